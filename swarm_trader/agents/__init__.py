"""
Agent pipeline.

Components (in handoff order):
1. AgentRegistry - Load agent descriptors, pick the scanner
2. AgentClient - One message to one agent, never raises
3. tally - Count evaluator approvals
4. TradeGate - Quorum check, at most one trade per candidate per pass
5. TradeExecutor - Quote, encode, submit
6. PassLogger - Audit trail

The PipelineDriver coordinates the loop.
"""

from .client import AgentClient, extract_candidates, extract_decision
from .execution import TradeExecutor
from .observability import PassLogger
from .orchestrator import PipelineDriver
from .registry import load_agents, split_roles
from .tally import effective_quorum, is_approved, tally
from .trade_gate import TradeGate

__all__ = [
    "AgentClient",
    "extract_candidates",
    "extract_decision",
    "TradeExecutor",
    "PassLogger",
    "PipelineDriver",
    "load_agents",
    "split_roles",
    "effective_quorum",
    "is_approved",
    "tally",
    "TradeGate",
]
