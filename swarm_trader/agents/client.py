"""
AgentClient - Sends one text message to one agent endpoint.

Purpose: Turn every agent call into an AgentReply. Transport errors, timeouts,
non-2xx responses and unreadable bodies become failed replies; nothing raises
past send().

Agent reply bodies are a list of content items:
    [{"text": "...", "content": {"decision": "Yes", "reasoning": "..."}}, ...]
The scanner's items may carry content.trending_tokens instead.
"""
import logging
import time
from typing import Any, Dict, Iterator, List, Optional

import httpx
from pydantic import ValidationError

from ..errors import AgentCallError
from ..schemas import Agent, AgentReply, Candidate

logger = logging.getLogger("swarm_trader.agents.client")


class AgentClient:
    """Stateless sender; the httpx client is owned by the caller."""

    def __init__(self, http: httpx.AsyncClient, timeout: float = 60.0):
        self.http = http
        self.timeout = timeout

    async def send(self, agent: Agent, message: str) -> AgentReply:
        """Send ``message`` to ``agent`` and always return a reply."""
        start = time.monotonic()
        try:
            payload = await self._post(agent, message)
        except AgentCallError as e:
            duration_ms = (time.monotonic() - start) * 1000
            logger.warning(f"Agent {agent.name} call failed: {e.message}")
            return AgentReply.failure(agent.name, e.message, duration_ms)

        duration_ms = (time.monotonic() - start) * 1000
        logger.debug(f"Agent {agent.name} replied in {duration_ms:.0f}ms")
        return AgentReply.success(agent.name, payload, duration_ms)

    async def _post(self, agent: Agent, message: str) -> Any:
        try:
            response = await self.http.post(
                agent.endpoint,
                files={"text": (None, message)},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise AgentCallError(agent.name, f"timeout after {self.timeout:.0f}s: {e}") from e
        except httpx.HTTPStatusError as e:
            raise AgentCallError(
                agent.name,
                f"HTTP {e.response.status_code} from {agent.endpoint}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise AgentCallError(agent.name, f"transport error: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise AgentCallError(agent.name, f"invalid JSON body: {e}") from e


def _iter_items(payload: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        return
    for item in payload:
        if isinstance(item, dict):
            yield item


def _item_content(item: Dict[str, Any]) -> Dict[str, Any]:
    content = item.get("content")
    return content if isinstance(content, dict) else {}


def extract_decision(payload: Any) -> Optional[str]:
    """First ``decision`` string found in the reply's content items."""
    for item in _iter_items(payload):
        decision = _item_content(item).get("decision")
        if isinstance(decision, str):
            return decision
    return None


def extract_reasoning(payload: Any) -> Optional[str]:
    """First ``reasoning`` string, falling back to the first item text."""
    fallback = None
    for item in _iter_items(payload):
        reasoning = _item_content(item).get("reasoning")
        if isinstance(reasoning, str) and reasoning:
            return reasoning
        text = item.get("text")
        if fallback is None and isinstance(text, str) and text:
            fallback = text
    return fallback


def extract_candidates(payload: Any, limit: Optional[int] = None) -> List[Candidate]:
    """
    Convert the scanner's trending_tokens into Candidates.

    Malformed token records are skipped. Candidates carrying a ``rank`` are
    stable-sorted by it; unranked candidates keep scanner order after them.
    """
    tokens: List[Any] = []
    for item in _iter_items(payload):
        found = _item_content(item).get("trending_tokens")
        if isinstance(found, list):
            tokens = found
            break

    candidates: List[Candidate] = []
    for raw in tokens:
        if not isinstance(raw, dict):
            continue
        try:
            candidates.append(Candidate.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping malformed candidate {raw.get('symbol', '?')}: {e.error_count()} errors")

    candidates.sort(key=lambda c: (c.rank is None, c.rank if c.rank is not None else 0.0))

    if limit is not None:
        candidates = candidates[:limit]
    return candidates
