"""Coinbase public exchange-rate client."""

import httpx

from app.clients.base import ProviderClient, ProviderError, as_float
from app.models import SpotPrice


class CoinbaseClient(ProviderClient):
    """Coinbase v2 client for BTC spot price."""

    BASE_URL = "https://api.coinbase.com"

    def __init__(self, base_url: str = BASE_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_spot(self, currency: str = "BTC") -> SpotPrice:
        """
        Fetch the USD rate and, when available, the 24h change.

        The stats call is best-effort: its failure does not fail the price.
        """
        data = await self._request("GET", "/v2/exchange-rates", {"currency": currency})
        try:
            price = as_float(data["data"]["rates"]["USD"])
        except (KeyError, TypeError) as e:
            raise ProviderError(f"Coinbase rate for {currency}: missing USD") from e
        if not price:
            raise ProviderError(f"Coinbase rate for {currency}: not a price")

        return SpotPrice(price=price, change_24h=await self._get_change_24h(currency))

    async def _get_change_24h(self, currency: str) -> float | None:
        try:
            stats = await self._request("GET", f"/v2/currencies/{currency}/stats")
        except (httpx.HTTPError, ProviderError):
            return None
        body = stats.get("data") if isinstance(stats, dict) else None
        if not isinstance(body, dict):
            return None
        return as_float(body.get("change_24h"))
