"""
PassLogger - Audit trail for pipeline passes and trade attempts.

Purpose: Log every pass; keep the trade record complete. Write failures are
logged and swallowed so auditing never stops the pipeline.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from ..schemas import PassResult, TradeStatus

logger = logging.getLogger("swarm_trader.agents.observability")


class PassLogger:
    """Writes pass results and trade attempts under the log directory."""

    def __init__(self, log_dir: str):
        self.log_dir = Path(log_dir)
        self._ensure_log_dir()

    def _ensure_log_dir(self):
        self.log_dir.mkdir(parents=True, exist_ok=True)
        (self.log_dir / "passes").mkdir(exist_ok=True)
        (self.log_dir / "trades").mkdir(exist_ok=True)

    def log_pass(self, result: PassResult):
        """Log complete pass result plus one line per trade attempt."""
        timestamp = result.timestamp.strftime("%Y%m%d_%H%M%S")
        filename = self.log_dir / "passes" / f"pass_{timestamp}_{result.pass_id[:8]}.json"

        try:
            with open(filename, "w") as f:
                json.dump(result.model_dump(mode="json"), f, indent=2, default=str)
            logger.debug(f"Pass logged: {filename}")
        except OSError as e:
            logger.error(f"Failed to log pass: {e}")

        for outcome in result.outcomes:
            if outcome.decision.approved:
                self.log_trade(outcome.model_dump(mode="json"))

        self._log_summary(result)

    def _log_summary(self, result: PassResult):
        approved = sum(1 for o in result.outcomes if o.decision.approved)
        executed = sum(1 for o in result.outcomes if o.decision.status == TradeStatus.EXECUTED)
        logger.info(
            f"PASS SUMMARY | "
            f"Candidates: {len(result.candidates)} | "
            f"Approved: {approved} | "
            f"Executed: {executed} | "
            f"Aborted: {result.aborted} | "
            f"Duration: {result.duration_ms:.0f}ms"
        )

    def log_trade(self, record: dict):
        timestamp = datetime.now(timezone.utc)
        trades_file = self.log_dir / "trades" / f"trades_{timestamp.strftime('%Y%m%d')}.jsonl"
        record = {"timestamp": timestamp.isoformat(), **record}

        try:
            with open(trades_file, "a") as f:
                f.write(json.dumps(record, default=str) + "\n")
        except OSError as e:
            logger.error(f"Failed to log trade: {e}")

    def get_trades_today(self) -> list[dict]:
        date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
        trades_file = self.log_dir / "trades" / f"trades_{date_str}.jsonl"

        trades = []
        if trades_file.exists():
            try:
                with open(trades_file, "r") as f:
                    for line in f:
                        if line.strip():
                            trades.append(json.loads(line))
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to read trades: {e}")

        return trades

    def get_recent_passes(self, limit: int = 10) -> list[dict]:
        passes_dir = self.log_dir / "passes"
        if not passes_dir.exists():
            return []

        results = []
        for f in sorted(passes_dir.glob("pass_*.json"), reverse=True)[:limit]:
            try:
                with open(f, "r") as file:
                    results.append(json.load(file))
            except (OSError, json.JSONDecodeError):
                continue

        return results
