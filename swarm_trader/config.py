"""
Configuration management with safety latches for trading modes.

Settings are loaded from environment variables (and an optional .env file)
through Pydantic Settings.
"""
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


NATIVE_TOKEN_ADDRESS = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"


class TradingMode(str, Enum):
    SHADOW = "shadow"
    LIVE = "live"


class TradingConfig(BaseSettings):
    """
    Runtime settings for the agent pipeline and its external services.

    Attributes:
        trading_mode: shadow logs approved trades without sending them
        live_trading_enabled: second latch required for live mode
        quorum: approving evaluator votes required; None means all evaluators
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    trading_mode: TradingMode = TradingMode.SHADOW
    live_trading_enabled: bool = False

    agents_dir: str = "agents"
    wallet_path: str = "wallet.json"
    log_dir: str = "swarm_trader/logs"
    log_level: str = "INFO"

    scanner_name: str = Field(
        default="Alpha",
        description="Scanner agent name used when no agent carries the scanner role",
    )
    scan_prompt: str = "show me the latest boosted tokens"
    quorum: Optional[int] = Field(default=None, ge=1)
    max_candidates_per_pass: int = Field(default=5, ge=1)
    skip_traded_candidates: bool = False

    agent_timeout_seconds: float = 60.0
    loop_seconds: float = 60.0
    scanner_backoff_seconds: float = 30.0

    swap_amount_wei: int = 9_990_000_000_000
    trade_value_eth: Decimal = Decimal("0.00001")
    slippage_percent: float = 1.0
    native_token_address: str = NATIVE_TOKEN_ADDRESS
    router_contract_address: str = "0x8743E1ad7889d413C17901144d8CA91679977a67"

    paraswap_api_url: str = "https://api.paraswap.io"
    paraswap_version: str = "6.2"
    privy_api_url: str = "https://api.privy.io"
    privy_app_id: str = ""
    privy_app_secret: str = ""
    rpc_url: str = "https://mainnet.base.org"

    @field_validator("slippage_percent")
    @classmethod
    def _check_slippage(cls, v: float) -> float:
        if v <= 0 or v > 99:
            raise ValueError("slippage_percent must be in (0, 99]")
        return v

    @model_validator(mode="after")
    def _validate_safety(self) -> "TradingConfig":
        """Ensure safety latches are properly configured."""
        if self.trading_mode == TradingMode.LIVE and not self.live_trading_enabled:
            raise ValueError(
                "SAFETY: Live trading requested but LIVE_TRADING_ENABLED is not true. "
                "Both TRADING_MODE=live AND LIVE_TRADING_ENABLED=true are required."
            )
        return self

    def can_execute(self) -> bool:
        """Check if transactions may be submitted based on mode and latches."""
        if self.trading_mode == TradingMode.SHADOW:
            return False
        return self.live_trading_enabled

    def get_mode_description(self) -> str:
        """Get human-readable description of current mode."""
        if self.trading_mode == TradingMode.SHADOW:
            return "SHADOW: Approved trades logged but NO transactions sent"
        return "LIVE: On-chain transactions ENABLED"

    def has_wallet_credentials(self) -> bool:
        return bool(self.privy_app_id and self.privy_app_secret)


@lru_cache()
def get_settings() -> TradingConfig:
    """
    Get cached settings instance.

    Raises:
        pydantic.ValidationError: if the environment violates a latch
    """
    return TradingConfig()
