"""
Trade gate tests: quorum gating and the at-most-once-per-pass guarantee.
"""

import asyncio

import pytest

from swarm_trader.agents.trade_gate import TradeGate
from swarm_trader.schemas import Candidate, Tally, TradeResult, TradeStage, TradeStatus

from fakes import BAR_ADDRESS

APPROVING = Tally(approvals=2, total=2)
REJECTING = Tally(approvals=1, total=2)


class TestGating:

    def test_quorum_must_be_positive(self, executor):
        with pytest.raises(ValueError):
            TradeGate(0, executor)

    @pytest.mark.asyncio
    async def test_approved_tally_executes(self, executor, foo):
        gate = TradeGate(2, executor)
        gate.begin_pass("pass-1")

        decision = await gate.decide(foo, APPROVING)

        assert decision.approved is True
        assert decision.status == TradeStatus.EXECUTED
        assert decision.tx_hash == "0xhash"
        assert decision.pass_id == "pass-1"
        executor.execute.assert_awaited_once_with(foo)

    @pytest.mark.asyncio
    async def test_rejected_tally_skips(self, executor, foo):
        gate = TradeGate(2, executor)
        gate.begin_pass("pass-1")

        decision = await gate.decide(foo, REJECTING)

        assert decision.approved is False
        assert decision.status == TradeStatus.SKIPPED
        executor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_execution_is_recorded(self, executor, foo):
        executor.execute.return_value = TradeResult(
            success=False, stage=TradeStage.QUOTE, error="no route"
        )
        gate = TradeGate(2, executor)

        decision = await gate.decide(foo, APPROVING)

        assert decision.status == TradeStatus.FAILED
        assert decision.error == "no route"
        assert gate.was_traded(foo) is False

    @pytest.mark.asyncio
    async def test_shadow_execution_is_recorded(self, executor, foo):
        executor.execute.return_value = TradeResult(
            success=False, stage=TradeStage.SHADOW, error="shadow_no_execute"
        )
        gate = TradeGate(2, executor)

        decision = await gate.decide(foo, APPROVING)

        assert decision.status == TradeStatus.SHADOW
        assert decision.approved is True


class TestAtMostOnce:

    @pytest.mark.asyncio
    async def test_second_decide_in_same_pass_does_not_refire(self, executor, foo):
        gate = TradeGate(2, executor)
        gate.begin_pass("pass-1")

        first = await gate.decide(foo, APPROVING)
        second = await gate.decide(foo, APPROVING)

        assert executor.execute.await_count == 1
        assert second is first

    @pytest.mark.asyncio
    async def test_cached_decision_wins_over_new_tally(self, executor, foo):
        gate = TradeGate(2, executor)
        gate.begin_pass("pass-1")

        await gate.decide(foo, REJECTING)
        again = await gate.decide(foo, APPROVING)

        assert again.approved is False
        executor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_same_token_different_address_case_is_one_candidate(self, executor, foo):
        gate = TradeGate(2, executor)
        upper = Candidate(address=foo.address.upper().replace("0X", "0x"), chain_id=foo.chain_id, symbol="FOO")

        await gate.decide(foo, APPROVING)
        await gate.decide(upper, APPROVING)

        assert executor.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_decides_fire_once(self, executor, foo):
        gate = TradeGate(2, executor)
        gate.begin_pass("pass-1")

        await asyncio.gather(*(gate.decide(foo, APPROVING) for _ in range(5)))

        assert executor.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_new_pass_allows_new_decision(self, executor, foo):
        gate = TradeGate(2, executor)

        gate.begin_pass("pass-1")
        await gate.decide(foo, APPROVING)
        gate.begin_pass("pass-2")
        decision = await gate.decide(foo, APPROVING)

        assert executor.execute.await_count == 2
        assert decision.pass_id == "pass-2"

    @pytest.mark.asyncio
    async def test_other_candidates_are_independent(self, executor, foo):
        gate = TradeGate(2, executor)
        bar = Candidate(address=BAR_ADDRESS, chain_id=8453, symbol="BAR")

        await gate.decide(foo, APPROVING)
        await gate.decide(bar, APPROVING)

        assert executor.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_successful_trade_is_remembered_across_passes(self, executor, foo):
        gate = TradeGate(2, executor)

        gate.begin_pass("pass-1")
        await gate.decide(foo, APPROVING)
        gate.begin_pass("pass-2")

        assert gate.was_traded(foo) is True
        assert gate.get_decision(foo) is None


class TestExecutorErrors:

    @pytest.mark.asyncio
    async def test_unexpected_executor_error_is_failed_decision(self, executor, foo):
        executor.execute.side_effect = TypeError("unsupported operand")
        gate = TradeGate(2, executor)
        gate.begin_pass("pass-1")

        decision = await gate.decide(foo, APPROVING)

        assert decision.approved is True
        assert decision.status == TradeStatus.FAILED
        assert decision.error == "unsupported operand"
        assert gate.get_decision(foo) is decision
        assert gate.was_traded(foo) is False

    @pytest.mark.asyncio
    async def test_failed_decision_is_not_retried_in_same_pass(self, executor, foo):
        executor.execute.side_effect = TypeError("unsupported operand")
        gate = TradeGate(2, executor)
        gate.begin_pass("pass-1")

        await gate.decide(foo, APPROVING)
        again = await gate.decide(foo, APPROVING)

        assert again.status == TradeStatus.FAILED
        assert executor.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_decision_timestamp_is_timezone_aware(self, executor, foo):
        decision = await TradeGate(2, executor).decide(foo, REJECTING)
        assert decision.decided_at.tzinfo is not None
