"""
Shared fixtures for pipeline tests.

Provides agents, collaborator mocks and a live-mode config that never sleeps.
"""

from typing import Callable, List
from unittest.mock import AsyncMock

import pytest

from swarm_trader.config import TradingConfig, TradingMode
from swarm_trader.schemas import Agent, Candidate, Quote, TradeResult, TradeStage, WalletDescriptor

from fakes import FOO_ADDRESS, ROUTER_ADDRESS


@pytest.fixture
def make_agent() -> Callable[..., Agent]:
    def _make(name: str, tag: str = "", wallet: str = "") -> Agent:
        return Agent(
            name=name,
            tag=tag,
            endpoint=f"https://agents.example/{name.lower()}",
            wallet_address=wallet,
        )
    return _make


@pytest.fixture
def scanner(make_agent) -> Agent:
    return make_agent("Alpha", tag="scanner", wallet="0x" + "01" * 20)


@pytest.fixture
def evaluators(make_agent) -> List[Agent]:
    return [
        make_agent("Bizyugo", tag="evaluator", wallet="0x" + "02" * 20),
        make_agent("Murad", tag="evaluator", wallet="0x" + "03" * 20),
    ]


@pytest.fixture
def foo() -> Candidate:
    return Candidate(address=FOO_ADDRESS, chain_id=8453, symbol="FOO", name="Foo Token")


@pytest.fixture
def config(tmp_path) -> TradingConfig:
    return TradingConfig(
        _env_file=None,
        trading_mode=TradingMode.LIVE,
        live_trading_enabled=True,
        quorum=2,
        log_dir=str(tmp_path / "logs"),
        wallet_path=str(tmp_path / "wallet.json"),
        agents_dir=str(tmp_path / "agents"),
        loop_seconds=0,
        scanner_backoff_seconds=0,
    )


@pytest.fixture
def wallet() -> WalletDescriptor:
    return WalletDescriptor(wallet_id="wallet-123", wallet_address="0x" + "99" * 20)


@pytest.fixture
def quote() -> Quote:
    return Quote(
        router_address=ROUTER_ADDRESS,
        call_data="0xdeadbeef",
        quoted_amount="1000",
        min_received_amount="990",
        quoted_decimals=18,
    )


@pytest.fixture
def quote_client(quote) -> AsyncMock:
    client = AsyncMock()
    client.get_quote.return_value = quote
    return client


@pytest.fixture
def wallet_client() -> AsyncMock:
    client = AsyncMock()
    client.send_transaction.return_value = "0xhash"
    return client


@pytest.fixture
def executor() -> AsyncMock:
    """Executor fake whose execute() always succeeds."""
    fake = AsyncMock()
    fake.execute.return_value = TradeResult(success=True, stage=TradeStage.EXECUTE, tx_hash="0xhash")
    return fake
