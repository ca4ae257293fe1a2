"""
Exception types for the agent pipeline.

Only ConfigError/LoadError and StartupError are allowed to escape a command;
the others are caught where the external call is made and turned into typed
outcomes (failed replies, failed trade results).
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    CONFIG_ERROR = "CONFIG_ERROR"
    STARTUP_ERROR = "STARTUP_ERROR"
    AGENT_CALL_ERROR = "AGENT_CALL_ERROR"
    QUOTE_ERROR = "QUOTE_ERROR"
    EXECUTION_ERROR = "EXECUTION_ERROR"


class SwarmTraderError(Exception):
    """Base exception for swarm_trader."""

    code: ErrorCode = ErrorCode.CONFIG_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(SwarmTraderError):
    """Missing or unusable configuration; fatal to the invoked command."""

    code = ErrorCode.CONFIG_ERROR


class LoadErrorReason(str, Enum):
    SOURCE_MISSING = "source_missing"
    SOURCE_EMPTY = "source_empty"
    ALL_ENTRIES_INVALID = "all_entries_invalid"


class LoadError(ConfigError):
    """Agent registry could not produce any agent."""

    def __init__(self, reason: LoadErrorReason, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.reason = reason


class StartupError(SwarmTraderError):
    """Pipeline cannot start (no scanner, no agents, no evaluators)."""

    code = ErrorCode.STARTUP_ERROR


class AgentCallError(SwarmTraderError):
    """Network, timeout or non-success response from an agent endpoint."""

    code = ErrorCode.AGENT_CALL_ERROR

    def __init__(self, agent_name: str, message: str, status_code: Optional[int] = None):
        super().__init__(message, {"agent": agent_name, "status_code": status_code})
        self.agent_name = agent_name
        self.status_code = status_code


class QuoteError(SwarmTraderError):
    """Swap quote could not be obtained."""

    code = ErrorCode.QUOTE_ERROR


class ExecutionError(SwarmTraderError):
    """Transaction executor rejected or failed the submission."""

    code = ErrorCode.EXECUTION_ERROR
