"""
TradeExecutor - Quote, encode and submit one swap for an approved candidate.

Purpose: Submit a transaction only if the mode allows it. Every failure is
returned as a TradeResult; nothing is retried.
- SHADOW: approved trades are logged, no external calls are made
- LIVE: quote -> router call data -> custodial wallet transaction
"""
import logging
from pathlib import Path
from typing import List, Optional

from ..config import TradingConfig
from ..errors import ConfigError, ExecutionError, QuoteError
from ..schemas import Agent, Candidate, TradeResult, TradeStage, WalletDescriptor
from ..services.chain import encode_router_swap, eth_to_wei
from ..services.quote_client import ParaSwapQuoteClient
from ..services.wallet_client import PrivyWalletClient, load_wallet

logger = logging.getLogger("swarm_trader.agents.execution")


class TradeExecutor:
    """Turns an approved candidate into at most one on-chain transaction."""

    def __init__(
        self,
        config: TradingConfig,
        quote_client: ParaSwapQuoteClient,
        wallet_client: PrivyWalletClient,
        participants: List[Agent],
        wallet: Optional[WalletDescriptor] = None,
    ):
        self.config = config
        self.quote_client = quote_client
        self.wallet_client = wallet_client
        self.participant_wallets = [a.wallet_address for a in participants if a.wallet_address]
        self._wallet = wallet

    def _get_wallet(self) -> WalletDescriptor:
        if self._wallet is None:
            self._wallet = load_wallet(Path(self.config.wallet_path))
        return self._wallet

    async def execute(self, candidate: Candidate) -> TradeResult:
        if not self.config.can_execute():
            logger.info(f"SHADOW MODE: {candidate.symbol} approved but NOT executed")
            return TradeResult(success=False, stage=TradeStage.SHADOW, error="shadow_no_execute")

        try:
            wallet = self._get_wallet()
        except ConfigError as e:
            logger.error(f"TRADE FAILED {candidate.symbol}: {e.message}")
            return TradeResult(success=False, stage=TradeStage.EXECUTE, error=e.message)

        try:
            quote = await self.quote_client.get_quote(
                src_token=self.config.native_token_address,
                dest_token=candidate.address,
                amount=self.config.swap_amount_wei,
                user_address=wallet.wallet_address,
                chain_id=candidate.chain_id,
                slippage_percent=self.config.slippage_percent,
                dest_decimals=candidate.decimals,
            )
        except QuoteError as e:
            logger.error(f"QUOTE FAILED {candidate.symbol}: {e.message}")
            return TradeResult(success=False, stage=TradeStage.QUOTE, error=e.message)

        try:
            data = encode_router_swap(
                swap_router=quote.router_address,
                token=candidate.address,
                agent_addresses=self.participant_wallets,
                swap_data=quote.call_data,
                quoted_amount=quote.quoted_amount,
            )
        except ValueError as e:
            logger.error(f"ENCODE FAILED {candidate.symbol}: {e}")
            return TradeResult(success=False, stage=TradeStage.EXECUTE, error=f"encode failed: {e}", quote=quote)

        try:
            tx_hash = await self.wallet_client.send_transaction(
                wallet_id=wallet.wallet_id,
                chain_id=candidate.chain_id,
                to=self.config.router_contract_address,
                value_wei=eth_to_wei(self.config.trade_value_eth),
                data=data,
            )
        except ExecutionError as e:
            logger.error(f"TRADE FAILED {candidate.symbol}: {e.message}")
            return TradeResult(success=False, stage=TradeStage.EXECUTE, error=e.message, quote=quote)

        logger.info(f"TRADE EXECUTED: {candidate.symbol} ({candidate.address}) -> {tx_hash}")
        return TradeResult(success=True, stage=TradeStage.EXECUTE, tx_hash=tx_hash, quote=quote)
