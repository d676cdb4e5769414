"""CoinGecko public API client."""

from datetime import datetime, timezone
from typing import Any

from app.clients.base import ProviderClient, ProviderError, RateLimiter, as_float
from app.models import ChartSeries, SpotPrice
from core.indicators import clean_series


class CoinGeckoClient(ProviderClient):
    """CoinGecko v3 client (free tier, rate limited)."""

    BASE_URL = "https://api.coingecko.com/api/v3"

    def __init__(self, base_url: str = BASE_URL, calls_per_minute: int = 30, **kwargs):
        kwargs.setdefault("rate_limiter", RateLimiter(calls_per_minute))
        super().__init__(base_url, **kwargs)

    async def get_spot(self, coin_id: str = "bitcoin", vs_currency: str = "usd") -> SpotPrice:
        """Fetch spot price and 24h change."""
        data = await self._request(
            "GET",
            "/simple/price",
            {"ids": coin_id, "vs_currencies": vs_currency, "include_24hr_change": "true"},
        )
        try:
            entry = data[coin_id]
        except (KeyError, TypeError) as e:
            raise ProviderError(f"CoinGecko price for {coin_id}: missing") from e
        if not isinstance(entry, dict):
            raise ProviderError(f"CoinGecko price for {coin_id}: malformed entry")

        price = as_float(entry.get(vs_currency))
        if not price:
            raise ProviderError(f"CoinGecko price for {coin_id}: missing {vs_currency}")
        return SpotPrice(
            price=price,
            change_24h=as_float(entry.get(f"{vs_currency}_24h_change")),
        )

    async def get_market_chart(
        self,
        coin_id: str = "bitcoin",
        days: int = 30,
        vs_currency: str = "usd",
    ) -> ChartSeries:
        """
        Fetch daily price history.

        Args:
            coin_id: CoinGecko coin id
            days: Number of days of history
            vs_currency: Quote currency

        Returns:
            ChartSeries with daily closes and total volumes
        """
        data = await self._request(
            "GET",
            f"/coins/{coin_id}/market_chart",
            {"vs_currency": vs_currency, "days": days, "interval": "daily"},
        )
        return parse_market_chart(coin_id, data)


def _second_column(rows: Any) -> list[Any]:
    if not isinstance(rows, list):
        return []
    return [row[1] for row in rows if isinstance(row, (list, tuple)) and len(row) >= 2]


def _price_points(rows: Any) -> tuple[list[float], list[datetime]]:
    """Closes with their timestamps; a row missing either is dropped."""
    closes: list[float] = []
    timestamps: list[datetime] = []
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, (list, tuple)) or len(row) < 2:
            continue
        millis = as_float(row[0])
        close = clean_series([row[1]])
        if millis is None or not close:
            continue
        closes.append(close[0])
        timestamps.append(datetime.fromtimestamp(millis / 1000, tz=timezone.utc))
    return closes, timestamps


def parse_market_chart(coin_id: str, data: Any) -> ChartSeries:
    """Parse a /coins/{id}/market_chart payload ([[ms, value], ...] columns)."""
    if not isinstance(data, dict) or "prices" not in data:
        raise ProviderError(f"CoinGecko market chart for {coin_id}: no prices")

    closes, timestamps = _price_points(data["prices"])
    volumes = clean_series(_second_column(data.get("total_volumes")))
    return ChartSeries(
        symbol=coin_id,
        closes=closes,
        volumes=volumes,
        timestamps=timestamps,
        price=closes[-1] if closes else None,
    )
