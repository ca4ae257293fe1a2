"""
TradeGate - Deterministic gatekeeper between the vote tally and execution.

Rules enforced:
- approved only when approvals >= quorum
- at most one execution per candidate per pass: the first decision for a
  candidate is cached before the executor runs, and later decide() calls in
  the same pass return that cached decision
- one execution in flight at a time
"""
import asyncio
import logging
from typing import Dict, Optional, Protocol, Set

from ..schemas import Candidate, Tally, TradeDecision, TradeResult, TradeStage, TradeStatus
from .tally import is_approved

logger = logging.getLogger("swarm_trader.agents.trade_gate")


class Executor(Protocol):
    async def execute(self, candidate: Candidate) -> TradeResult: ...


class TradeGate:
    """Quorum check plus the per-pass at-most-once guarantee."""

    def __init__(self, quorum: int, executor: Executor):
        if quorum < 1:
            raise ValueError("quorum must be at least 1")
        self.quorum = quorum
        self.executor = executor
        self.pass_id: str = ""
        self._decisions: Dict[str, TradeDecision] = {}
        self._traded: Set[str] = set()
        self._lock = asyncio.Lock()

    def begin_pass(self, pass_id: str) -> None:
        """Start a new pass; decisions from the previous pass are forgotten."""
        self.pass_id = pass_id
        self._decisions.clear()

    def get_decision(self, candidate: Candidate) -> Optional[TradeDecision]:
        return self._decisions.get(candidate.key)

    def was_traded(self, candidate: Candidate) -> bool:
        """True if a transaction for this candidate succeeded in any pass."""
        return candidate.key in self._traded

    async def decide(self, candidate: Candidate, tally: Tally) -> TradeDecision:
        cached = self._decisions.get(candidate.key)
        if cached is not None:
            logger.info(
                f"{candidate.symbol}: already decided this pass ({cached.status.value}), not re-firing"
            )
            return cached

        approved = is_approved(tally, self.quorum)
        decision = TradeDecision(
            pass_id=self.pass_id,
            candidate_key=candidate.key,
            symbol=candidate.symbol,
            approved=approved,
            approvals=tally.approvals,
            total=tally.total,
            quorum=self.quorum,
        )
        self._decisions[candidate.key] = decision

        if not approved:
            logger.info(
                f"{candidate.symbol}: SKIPPED ({tally.approvals}/{tally.total} approvals, quorum {self.quorum})"
            )
            return decision

        logger.info(
            f"{candidate.symbol}: APPROVED ({tally.approvals}/{tally.total} approvals, quorum {self.quorum})"
        )
        try:
            async with self._lock:
                result = await self.executor.execute(candidate)
        except Exception as e:
            logger.error(f"{candidate.symbol}: execution raised {type(e).__name__}: {e}", exc_info=True)
            decision.status = TradeStatus.FAILED
            decision.error = str(e)
            return decision

        self._apply_result(decision, result)

        if decision.status == TradeStatus.EXECUTED:
            self._traded.add(candidate.key)

        return decision

    @staticmethod
    def _apply_result(decision: TradeDecision, result: TradeResult) -> None:
        if result.stage == TradeStage.SHADOW:
            decision.status = TradeStatus.SHADOW
        elif result.success:
            decision.status = TradeStatus.EXECUTED
            decision.tx_hash = result.tx_hash
        else:
            decision.status = TradeStatus.FAILED
            decision.error = result.error
