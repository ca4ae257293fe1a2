"""
AgentRegistry - Loads agent descriptors from a directory of JSON files.

Each *.json file fully defines one agent:
    {"name": "Alpha", "tag": "scanner", "endpoint": "https://...", "walletAddress": "0x..."}
"""
import json
import logging
from pathlib import Path
from typing import List, Tuple, Union

from pydantic import ValidationError

from ..errors import LoadError, LoadErrorReason, StartupError
from ..schemas import Agent, AgentRole

logger = logging.getLogger("swarm_trader.agents.registry")


def load_agents(agents_dir: Union[str, Path]) -> List[Agent]:
    """
    Load all agent descriptors from ``agents_dir``.

    Files are read in sorted filename order so repeated loads of the same
    directory produce the same list. A malformed entry is skipped with a
    warning.

    Raises:
        LoadError: SOURCE_MISSING (directory created), SOURCE_EMPTY or
            ALL_ENTRIES_INVALID
    """
    path = Path(agents_dir)

    if not path.is_dir():
        path.mkdir(parents=True, exist_ok=True)
        raise LoadError(
            LoadErrorReason.SOURCE_MISSING,
            f"Agents directory created at {path}. Please add agent configurations.",
            {"agents_dir": str(path)},
        )

    files = sorted(p for p in path.glob("*.json") if p.is_file())
    if not files:
        raise LoadError(
            LoadErrorReason.SOURCE_EMPTY,
            f"No agent configurations found in {path}.",
            {"agents_dir": str(path)},
        )

    agents: List[Agent] = []
    seen = set()
    for file in files:
        try:
            raw = json.loads(file.read_text(encoding="utf-8"))
            agent = Agent.model_validate(raw)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Skipping invalid agent file {file.name}: {e}")
            continue

        if agent.name in seen:
            logger.warning(f"Skipping {file.name}: duplicate agent name '{agent.name}'")
            continue

        seen.add(agent.name)
        agents.append(agent)

    if not agents:
        raise LoadError(
            LoadErrorReason.ALL_ENTRIES_INVALID,
            "No valid agent configurations found.",
            {"agents_dir": str(path), "files": [f.name for f in files]},
        )

    logger.info(f"Loaded {len(agents)} agents from {path}")
    return agents


def split_roles(agents: List[Agent], scanner_name: str = "Alpha") -> Tuple[Agent, List[Agent]]:
    """
    Identify the scanner and return ``(scanner, evaluators)``.

    An agent tagged ``scanner`` wins; otherwise the agent named
    ``scanner_name`` is the scanner. Every other agent is an evaluator.
    """
    if not agents:
        raise StartupError("No agents loaded.")

    scanners = [a for a in agents if a.role == AgentRole.SCANNER]
    if not scanners:
        scanners = [a for a in agents if a.name == scanner_name]

    if not scanners:
        raise StartupError(
            f"No scanner agent found. Tag one agent with \"tag\": \"scanner\" "
            f"or name it '{scanner_name}'.",
            {"agents": [a.name for a in agents]},
        )
    if len(scanners) > 1:
        raise StartupError(
            "More than one scanner agent configured.",
            {"scanners": [a.name for a in scanners]},
        )

    scanner = scanners[0]
    evaluators = [a for a in agents if a.name != scanner.name]
    if not evaluators:
        raise StartupError(
            f"Scanner '{scanner.name}' has no evaluator agents to vote on candidates.",
        )

    return scanner, evaluators
