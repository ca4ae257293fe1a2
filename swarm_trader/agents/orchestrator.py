"""
PipelineDriver - Top-level conductor.

Purpose: Run passes, call the agents in order, and gate trades.

Handoffs per pass (strict order):
  scanner -> for each candidate: evaluators (concurrent) -> tally -> TradeGate -> TradeExecutor

A candidate's trade finishes before the next candidate is evaluated. A
scanner failure aborts the pass; in long-running mode the next pass starts
after the scanner backoff instead of the regular loop interval.
"""
import asyncio
import logging
import time
from typing import List, Optional

import httpx

from ..config import TradingConfig
from ..schemas import Agent, Candidate, CandidateOutcome, PassResult, Vote
from ..services.quote_client import ParaSwapQuoteClient
from ..services.wallet_client import PrivyWalletClient
from .client import AgentClient, extract_candidates, extract_reasoning
from .execution import TradeExecutor
from .observability import PassLogger
from .registry import split_roles
from .tally import effective_quorum, tally
from .trade_gate import TradeGate

logger = logging.getLogger("swarm_trader.agents.orchestrator")


def evaluation_prompt(candidate: Candidate) -> str:
    return f"Should I Buy ${candidate.symbol}?"


class PipelineDriver:
    """
    Orchestrates the scanner -> evaluators -> gate loop.

    All collaborators are injected so tests can substitute fakes.
    """

    def __init__(
        self,
        config: TradingConfig,
        scanner: Agent,
        evaluators: List[Agent],
        client: AgentClient,
        gate: TradeGate,
        observability: Optional[PassLogger] = None,
    ):
        self.config = config
        self.scanner = scanner
        self.evaluators = evaluators
        self.client = client
        self.gate = gate
        self.observability = observability
        self._stop = asyncio.Event()

        logger.info(
            f"Pipeline initialized - Mode: {config.trading_mode.value}, "
            f"Scanner: {scanner.name}, Evaluators: {[a.name for a in evaluators]}, "
            f"Quorum: {gate.quorum}"
        )

    @classmethod
    def from_config(
        cls,
        config: TradingConfig,
        agents: List[Agent],
        http: httpx.AsyncClient,
    ) -> "PipelineDriver":
        """Wire the production collaborators around one shared httpx client."""
        scanner, evaluators = split_roles(agents, config.scanner_name)
        executor = TradeExecutor(
            config,
            quote_client=ParaSwapQuoteClient(http, config.paraswap_api_url, config.paraswap_version),
            wallet_client=PrivyWalletClient(
                http, config.privy_app_id, config.privy_app_secret, config.privy_api_url
            ),
            participants=agents,
        )
        gate = TradeGate(effective_quorum(config.quorum, len(evaluators)), executor)
        return cls(
            config,
            scanner,
            evaluators,
            client=AgentClient(http, timeout=config.agent_timeout_seconds),
            gate=gate,
            observability=PassLogger(config.log_dir),
        )

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> None:
        """Stop after the in-flight candidate; no new pass is started."""
        if not self._stop.is_set():
            logger.info("Stop requested - finishing in-flight work")
        self._stop.set()

    async def run_pass(self, request: Optional[str] = None) -> PassResult:
        """
        Run one complete pass.

        The scanner always receives the configured scan prompt; ``request``
        is the operator's chat message, kept on the pass record only.

        Returns:
            PassResult with the complete audit trail
        """
        start_time = time.time()
        result = PassResult(
            mode=self.config.trading_mode.value, scanner=self.scanner.name, request=request
        )
        self.gate.begin_pass(result.pass_id)

        logger.info("=== PASS START ===")
        if request:
            logger.info(f"Request: {request}")
        logger.info(f"[1/3] Asking {self.scanner.name} for candidates...")
        reply = await self.client.send(self.scanner, self.config.scan_prompt)

        if not reply.ok:
            logger.error(f"Scanner {self.scanner.name} failed: {reply.error} - pass aborted")
            result.aborted = True
            result.errors.append(f"scanner {self.scanner.name}: {reply.error}")
            return self._finish(result, start_time)

        reasoning = extract_reasoning(reply.payload)
        if reasoning:
            logger.info(f"{self.scanner.name}: {reasoning}")

        candidates = extract_candidates(reply.payload, self.config.max_candidates_per_pass)
        result.candidates = candidates
        logger.info(f"[2/3] {len(candidates)} candidates: {[c.symbol for c in candidates]}")

        for candidate in candidates:
            if self.stopping:
                logger.info("Stop requested - remaining candidates not evaluated")
                break

            if self.config.skip_traded_candidates and self.gate.was_traded(candidate):
                logger.info(f"{candidate.symbol}: traded in an earlier pass, skipping")
                result.skipped_candidates.append(candidate.key)
                continue

            try:
                result.outcomes.append(await self.process_candidate(candidate))
            except Exception as e:
                logger.error(f"{candidate.symbol}: candidate processing failed: {e}", exc_info=True)
                result.errors.append(f"{candidate.symbol}: {e}")

        return self._finish(result, start_time)

    async def process_candidate(self, candidate: Candidate) -> CandidateOutcome:
        """Evaluate, tally and gate one candidate."""
        prompt = evaluation_prompt(candidate)
        replies = await asyncio.gather(
            *(self.client.send(agent, prompt) for agent in self.evaluators)
        )

        result = tally(replies)
        for vote in result.votes:
            if vote.failed:
                logger.warning(f"{candidate.symbol} / {vote.agent_name}: no vote ({vote.error})")
            else:
                logger.info(
                    f"{candidate.symbol} / {vote.agent_name}: "
                    f"{'APPROVED' if vote.vote == Vote.YES else vote.vote.value.upper()}"
                    f"{' - ' + vote.reasoning if vote.reasoning else ''}"
                )

        logger.info(f"[3/3] Gate {candidate.symbol}...")
        decision = await self.gate.decide(candidate, result)
        return CandidateOutcome(candidate=candidate, tally=result, decision=decision)

    def _finish(self, result: PassResult, start_time: float) -> PassResult:
        result.duration_ms = (time.time() - start_time) * 1000
        if self.observability is not None:
            self.observability.log_pass(result)
        logger.info(f"=== PASS COMPLETE ({result.duration_ms:.0f}ms) ===")
        return result

    def next_delay(self, result: Optional[PassResult]) -> float:
        """Seconds to wait before the next pass."""
        if result is None or result.aborted:
            return self.config.scanner_backoff_seconds
        return self.config.loop_seconds

    async def _wait(self, seconds: float) -> None:
        """Sleep that returns early when a stop is requested."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def run_forever(self, max_passes: Optional[int] = None) -> int:
        """
        Long-running mode: pass, sleep, repeat until stopped.

        Returns:
            Number of passes run
        """
        passes = 0
        while not self.stopping:
            result: Optional[PassResult] = None
            try:
                result = await self.run_pass()
            except Exception as e:
                logger.error(f"Pass error: {e}", exc_info=True)

            passes += 1
            if max_passes is not None and passes >= max_passes:
                break
            if self.stopping:
                break

            delay = self.next_delay(result)
            logger.info(f"Sleeping for {delay:.0f} seconds...")
            await self._wait(delay)

        return passes
