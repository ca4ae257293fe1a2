"""
Custodial executor wallet: Privy REST client plus the wallet.json descriptor.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import httpx
from pydantic import ValidationError

from ..errors import ConfigError, ExecutionError
from ..schemas import WalletDescriptor

logger = logging.getLogger("swarm_trader.services.wallet_client")


class PrivyWalletClient:
    """
    Async client for the Privy server wallet API.

    Attributes:
        base_url: Privy API base URL
        app_id: Privy app id, also sent as the privy-app-id header
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        app_id: str,
        app_secret: str,
        base_url: str = "https://api.privy.io",
    ):
        self.http = http
        self.app_id = app_id
        self.app_secret = app_secret
        self.base_url = base_url.rstrip("/")

    def _get_headers(self) -> Dict[str, str]:
        return {
            "privy-app-id": self.app_id,
            "Content-Type": "application/json",
        }

    async def _post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.http.post(
            f"{self.base_url}{endpoint}",
            headers=self._get_headers(),
            auth=(self.app_id, self.app_secret),
            json=body,
        )
        response.raise_for_status()
        return response.json()

    async def create_wallet(self) -> WalletDescriptor:
        """
        Create a new ethereum wallet.

        Raises:
            ConfigError: credentials missing
            ExecutionError: the API call failed
        """
        if not self.app_id or not self.app_secret:
            raise ConfigError("PRIVY_APP_ID and PRIVY_APP_SECRET must be set to create a wallet.")

        try:
            body = await self._post("/v1/wallets", {"chain_type": "ethereum"})
            return WalletDescriptor(wallet_id=body["id"], wallet_address=body["address"])
        except httpx.HTTPStatusError as e:
            raise ExecutionError(f"Wallet creation failed: HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError, KeyError) as e:
            raise ExecutionError(f"Wallet creation failed: {e}") from e

    async def send_transaction(
        self,
        wallet_id: str,
        chain_id: int,
        to: str,
        value_wei: int,
        data: str,
    ) -> str:
        """
        Sign and broadcast a transaction from the custodial wallet.

        Returns:
            Transaction hash

        Raises:
            ExecutionError: on any failure; never retried here
        """
        if not self.app_id or not self.app_secret:
            raise ExecutionError("Privy credentials are not configured")

        body = {
            "method": "eth_sendTransaction",
            "caip2": f"eip155:{chain_id}",
            "chain_type": "ethereum",
            "params": {
                "transaction": {
                    "to": to,
                    "value": hex(value_wei),
                    "chain_id": chain_id,
                    "data": data,
                },
            },
        }
        try:
            result = await self._post(f"/v1/wallets/{wallet_id}/rpc", body)
        except httpx.HTTPStatusError as e:
            raise ExecutionError(
                f"Transaction rejected: HTTP {e.response.status_code} {e.response.text[:200]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ExecutionError(f"Transaction submission failed: {e}") from e

        tx_hash = (result.get("data") or {}).get("hash") if isinstance(result, dict) else None
        if not tx_hash:
            raise ExecutionError(f"Transaction submitted but no hash returned: {result}")

        logger.info(f"TX SENT: chain {chain_id} -> {to} hash {tx_hash}")
        return tx_hash


def load_wallet(path: Union[str, Path]) -> WalletDescriptor:
    """
    Read the executor wallet descriptor.

    Raises:
        ConfigError: file missing or unreadable
    """
    wallet_path = Path(path)
    if not wallet_path.is_file():
        raise ConfigError(
            f"Executor wallet not found at {wallet_path}. Run create-executor-wallet first."
        )
    try:
        return WalletDescriptor.model_validate(json.loads(wallet_path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"Invalid executor wallet file {wallet_path}: {e}") from e


def save_wallet(path: Union[str, Path], wallet: WalletDescriptor) -> Path:
    wallet_path = Path(path)
    wallet_path.parent.mkdir(parents=True, exist_ok=True)
    with open(wallet_path, "w", encoding="utf-8") as f:
        json.dump(wallet.model_dump(by_alias=True), f, indent=2)
    return wallet_path
