"""
ParaSwap quote client.

Two calls per quote: GET /prices for the route, then POST /transactions/{chain}
to build router call data for that route.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import QuoteError
from ..schemas import Quote

logger = logging.getLogger("swarm_trader.services.quote_client")


def number_to_bps(num: float) -> int:
    return round(num * 100)


def min_received_amount(slippage_bps: int, quoted_amount: int) -> str:
    slippage_amount = (slippage_bps * quoted_amount) // 10_000
    return str(quoted_amount - slippage_amount)


class ParaSwapQuoteClient:
    """Async client for the ParaSwap REST API."""

    def __init__(self, http: httpx.AsyncClient, base_url: str = "https://api.paraswap.io", version: str = "6.2"):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.version = version

    async def get_quote(
        self,
        src_token: str,
        dest_token: str,
        amount: int,
        user_address: str,
        chain_id: int,
        slippage_percent: float = 1.0,
        src_decimals: int = 18,
        dest_decimals: int = 18,
        receiver: Optional[str] = None,
    ) -> Quote:
        """
        Quote a SELL of ``amount`` src_token for dest_token.

        Raises:
            QuoteError: invalid slippage, HTTP failure or unusable response
        """
        if slippage_percent <= 0 or slippage_percent > 99:
            raise QuoteError(f"Invalid slippage: {slippage_percent}")

        slippage_bps = number_to_bps(slippage_percent)

        price_body = await self._request(
            "GET",
            "/prices",
            params={
                "srcToken": src_token,
                "destToken": dest_token,
                "amount": str(amount),
                "srcDecimals": src_decimals,
                "destDecimals": dest_decimals,
                "side": "SELL",
                "network": chain_id,
                "userAddress": user_address,
                "version": self.version,
            },
        )
        price_route = price_body.get("priceRoute")
        if not isinstance(price_route, dict) or "destAmount" not in price_route:
            raise QuoteError(
                f"No price route for {dest_token} on chain {chain_id}: {price_body.get('error', 'missing priceRoute')}"
            )

        tx_body: Dict[str, Any] = {
            "srcToken": src_token,
            "destToken": dest_token,
            "srcAmount": str(amount),
            "srcDecimals": src_decimals,
            "destDecimals": dest_decimals,
            "priceRoute": price_route,
            "userAddress": user_address,
            "slippage": slippage_bps,
        }
        if receiver:
            tx_body["receiver"] = receiver

        tx = await self._request(
            "POST",
            f"/transactions/{chain_id}",
            params={"ignoreChecks": "true"},
            json=tx_body,
        )
        if not tx.get("to") or not tx.get("data"):
            raise QuoteError(f"Transaction build returned no router call data: {tx.get('error', tx)}")

        try:
            quoted = int(price_route["destAmount"])
        except (TypeError, ValueError) as e:
            raise QuoteError(f"Unreadable destAmount {price_route['destAmount']!r}") from e

        quote = Quote(
            router_address=tx["to"],
            call_data=tx["data"],
            value=str(tx.get("value", "0")),
            quoted_amount=str(quoted),
            min_received_amount=min_received_amount(slippage_bps, quoted),
            quoted_decimals=price_route.get("destDecimals"),
        )
        logger.info(f"Quote {src_token[:10]} -> {dest_token[:10]}: {quote.quoted_amount} via {quote.router_address}")
        return quote

    async def _request(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        try:
            response = await self.http.request(method, url, **kwargs)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise QuoteError(f"ParaSwap {endpoint} returned HTTP {e.response.status_code}: {e.response.text[:200]}") from e
        except httpx.HTTPError as e:
            raise QuoteError(f"ParaSwap {endpoint} request failed: {e}") from e
        except ValueError as e:
            raise QuoteError(f"ParaSwap {endpoint} returned invalid JSON") from e

        if not isinstance(body, dict):
            raise QuoteError(f"ParaSwap {endpoint} returned unexpected body")
        return body
