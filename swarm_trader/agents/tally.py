"""
Vote counting for evaluator replies.

A reply is an approval only if the call succeeded and its decision parses to
Vote.YES. Failed calls still count toward the total.
"""
from typing import Iterable, Optional

from ..schemas import AgentReply, AgentVote, Tally, Vote
from .client import extract_decision, extract_reasoning


def to_vote(reply: AgentReply) -> AgentVote:
    if not reply.ok:
        return AgentVote(
            agent_name=reply.agent_name,
            vote=Vote.UNRECOGNIZED,
            failed=True,
            error=reply.error,
        )
    return AgentVote(
        agent_name=reply.agent_name,
        vote=Vote.parse(extract_decision(reply.payload)),
        reasoning=extract_reasoning(reply.payload),
    )


def tally(replies: Iterable[AgentReply]) -> Tally:
    """Count approvals over all replies; order of replies does not matter."""
    votes = sorted((to_vote(r) for r in replies), key=lambda v: v.agent_name)
    approvals = sum(1 for v in votes if v.vote == Vote.YES)
    return Tally(approvals=approvals, total=len(votes), votes=votes)


def effective_quorum(quorum: Optional[int], evaluator_count: int) -> int:
    """None means every evaluator must approve. Never below one."""
    if quorum is None:
        return max(1, evaluator_count)
    return max(1, quorum)


def is_approved(result: Tally, quorum: int) -> bool:
    return result.approvals >= max(1, quorum)
