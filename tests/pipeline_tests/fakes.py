"""
Reply builders and a scripted agent client shared by the pipeline tests.
"""

from typing import Any, Dict, List, Tuple

from swarm_trader.schemas import Agent, AgentReply

FOO_ADDRESS = "0x" + "ab" * 20
BAR_ADDRESS = "0x" + "cd" * 20
ROUTER_ADDRESS = "0x" + "22" * 20
FAIL = object()


def scanner_payload(tokens: List[Dict[str, Any]], text: str = "Found trending tokens") -> List[Dict[str, Any]]:
    """Reply shape of the scanner: the token list sits in the first item's content."""
    return [{"text": text, "content": {"trending_tokens": tokens}}]


def vote_payload(decision: str, reasoning: str = "looks fine") -> List[Dict[str, Any]]:
    """Reply shape of an evaluator: reasoning first, decision in a later item."""
    return [
        {"text": reasoning, "content": {"reasoning": reasoning}},
        {"text": "", "content": {"decision": decision}},
    ]


def token(symbol: str, address: str, network_id: int = 8453, **extra: Any) -> Dict[str, Any]:
    return {
        "name": f"{symbol} Token",
        "symbol": symbol,
        "address": address,
        "decimals": 18,
        "networkId": network_id,
        **extra,
    }


class FakeAgentClient:
    """
    Scripted stand-in for AgentClient.

    ``replies`` maps agent name to a payload, to FAIL, or to a callable taking
    the message and returning either. Unknown agents fail.
    """

    def __init__(self, replies: Dict[str, Any], events: List[Tuple[str, str]] = None):
        self.replies = replies
        self.calls: List[Tuple[str, str]] = []
        self.events = events if events is not None else []

    async def send(self, agent: Agent, message: str) -> AgentReply:
        self.calls.append((agent.name, message))
        self.events.append(("send", agent.name))
        scripted = self.replies.get(agent.name, FAIL)
        if callable(scripted):
            scripted = scripted(message)
        if scripted is FAIL:
            return AgentReply.failure(agent.name, "timeout after 60s")
        return AgentReply.success(agent.name, scripted)

    def calls_to(self, name: str) -> List[str]:
        return [message for agent_name, message in self.calls if agent_name == name]
