"""Market data gateway.

Every public method resolves an ordered fallback chain:
live providers in priority order, then the last good answer cached in
Redis, then the constant from ``MarketDefaults``. Callers always get a
value plus the name of the source that produced it.

Preferred share quotes are the exception: they are live only and resolve
to None when Yahoo has nothing.
"""

import logging
from datetime import date

from pydantic import BaseModel

from app.clients import CoinbaseClient, CoinGeckoClient, FredClient, YahooFinanceClient
from app.config import Settings, get_settings
from app.models import (
    ChartSeries,
    MarketDefaults,
    ObservationSeries,
    ShareCounts,
    SpotPrice,
    VolumeHistory,
)
from app.services.fallback import Attempt, FallbackChain, FallbackResult, FALLBACK_SOURCE
from app.storage import cache

logger = logging.getLogger(__name__)

CACHE_SOURCE = "cache"
MSTR_SYMBOL = "MSTR"
BTC_YAHOO_SYMBOL = "BTC-USD"


def _non_empty(series: ChartSeries) -> ChartSeries | None:
    return None if series.is_empty else series


def _priced(series: ChartSeries) -> ChartSeries | None:
    return series if series.price else None


class MarketDataGateway:
    """Single entry point for BTC and MSTR market data."""

    def __init__(
        self,
        defaults: MarketDefaults,
        yahoo: YahooFinanceClient,
        coingecko: CoinGeckoClient,
        coinbase: CoinbaseClient,
        fred: FredClient | None = None,
        timeout: float = 5.0,
        use_cache: bool = True,
    ):
        self.defaults = defaults
        self.yahoo = yahoo
        self.coingecko = coingecko
        self.coinbase = coinbase
        self.fred = fred
        self.timeout = timeout
        self.use_cache = use_cache

    @classmethod
    def from_settings(
        cls,
        defaults: MarketDefaults,
        settings: Settings | None = None,
    ) -> "MarketDataGateway":
        settings = settings or get_settings()
        common = {"user_agent": settings.user_agent, "timeout": settings.http_timeout}
        return cls(
            defaults=defaults,
            yahoo=YahooFinanceClient(
                settings.yahoo_base_url, settings.yahoo_summary_base_url, **common
            ),
            coingecko=CoinGeckoClient(settings.coingecko_base_url, **common),
            coinbase=CoinbaseClient(settings.coinbase_base_url, **common),
            fred=FredClient(settings.fred_base_url, api_key=settings.fred_api_key, **common),
            timeout=settings.provider_timeout,
            use_cache=settings.cache_enabled,
        )

    async def close(self) -> None:
        """Close all provider clients."""
        for client in (self.yahoo, self.coingecko, self.coinbase, self.fred):
            if client is not None:
                await client.close()

    async def _resolve(
        self,
        key: str,
        live: list[Attempt],
        model: type[BaseModel],
        default: BaseModel,
    ) -> FallbackResult:
        attempts = list(live)
        if self.use_cache:
            attempts.append(Attempt(CACHE_SOURCE, lambda: cache.recall(key, model)))

        result = await FallbackChain(key, attempts, default, timeout=self.timeout).resolve()

        if self.use_cache and result.source not in (CACHE_SOURCE, FALLBACK_SOURCE):
            await cache.remember(key, result.value)
        return result

    # =========================================================================
    # Bitcoin
    # =========================================================================

    async def _yahoo_btc_spot(self) -> SpotPrice | None:
        chart = await self.yahoo.get_chart(BTC_YAHOO_SYMBOL, "1d", "1d")
        if not chart.price:
            return None
        change = None
        if chart.previous_close:
            change = (chart.price - chart.previous_close) / chart.previous_close * 100
        return SpotPrice(price=chart.price, change_24h=change)

    async def btc_spot(self) -> FallbackResult[SpotPrice]:
        """BTC/USD spot: Coinbase, CoinGecko, Yahoo, cache, constant."""
        return await self._resolve(
            "btc_spot",
            [
                Attempt("coinbase", self.coinbase.get_spot),
                Attempt("coingecko", self.coingecko.get_spot),
                Attempt("yahoo_finance", self._yahoo_btc_spot),
            ],
            SpotPrice,
            SpotPrice(price=self.defaults.btc_price, change_24h=self.defaults.btc_change_24h),
        )

    async def btc_history(self, days: int = 30) -> FallbackResult[ChartSeries]:
        """Daily BTC closes: CoinGecko, Yahoo, cache, empty series."""

        async def coingecko_history() -> ChartSeries | None:
            return _non_empty(await self.coingecko.get_market_chart("bitcoin", days))

        async def yahoo_history() -> ChartSeries | None:
            return _non_empty(await self.yahoo.get_chart(BTC_YAHOO_SYMBOL, f"{days}d", "1d"))

        return await self._resolve(
            f"btc_history:{days}",
            [
                Attempt("coingecko", coingecko_history),
                Attempt("yahoo_finance", yahoo_history),
            ],
            ChartSeries,
            ChartSeries(symbol="bitcoin"),
        )

    # =========================================================================
    # Equities and charts
    # =========================================================================

    async def chart(
        self,
        symbol: str,
        range_: str = "30d",
        interval: str = "1d",
    ) -> FallbackResult[ChartSeries]:
        """Yahoo chart for any symbol: Yahoo, cache, empty series."""

        async def yahoo_chart() -> ChartSeries | None:
            return _non_empty(await self.yahoo.get_chart(symbol, range_, interval))

        return await self._resolve(
            f"chart:{symbol}:{range_}:{interval}",
            [Attempt("yahoo_finance", yahoo_chart)],
            ChartSeries,
            ChartSeries(symbol=symbol),
        )

    async def mstr_quote(self) -> FallbackResult[ChartSeries]:
        """Intraday MSTR quote: Yahoo, cache, constant quote."""

        async def yahoo_quote() -> ChartSeries | None:
            return _priced(await self.yahoo.get_chart(MSTR_SYMBOL, "1d", "1m"))

        return await self._resolve(
            "mstr_quote",
            [Attempt("yahoo_finance", yahoo_quote)],
            ChartSeries,
            ChartSeries(
                symbol=MSTR_SYMBOL,
                price=self.defaults.mstr_price,
                previous_close=self.defaults.mstr_previous_close,
                volume=self.defaults.mstr_volume,
            ),
        )

    async def share_counts(self) -> FallbackResult[ShareCounts]:
        """MSTR share counts: Yahoo key statistics, cache, constant."""

        async def yahoo_shares() -> ShareCounts | None:
            return await self.yahoo.get_share_counts(MSTR_SYMBOL)

        return await self._resolve(
            "mstr_shares",
            [Attempt("yahoo_finance", yahoo_shares)],
            ShareCounts,
            ShareCounts(basic_shares=self.defaults.basic_shares),
        )

    async def preferred_quote(self, symbol: str) -> FallbackResult[ChartSeries | None]:
        """Intraday quote for a preferred share: Yahoo only, None when it fails."""

        async def yahoo_quote() -> ChartSeries | None:
            return _priced(await self.yahoo.get_chart(symbol, "1d", "1m"))

        return await FallbackChain(
            f"preferred:{symbol}",
            [Attempt("yahoo_finance", yahoo_quote)],
            None,
            timeout=self.timeout,
        ).resolve()

    async def volume_history(
        self,
        symbol: str,
        range_: str = "1mo",
        interval: str = "1d",
    ) -> FallbackResult[VolumeHistory]:
        """Per-bar volumes: Yahoo, cache, no bars."""

        async def yahoo_volumes() -> VolumeHistory | None:
            history = await self.yahoo.get_volume_history(symbol, range_, interval)
            return history if history.bars else None

        return await self._resolve(
            f"volume_history:{symbol}:{range_}:{interval}",
            [Attempt("yahoo_finance", yahoo_volumes)],
            VolumeHistory,
            VolumeHistory(symbol=symbol),
        )

    # =========================================================================
    # Macro series
    # =========================================================================

    async def observations(self, series_id: str, start: date) -> FallbackResult[ObservationSeries]:
        """FRED series from ``start``: FRED, cache, no observations."""

        async def fred_series() -> ObservationSeries | None:
            series = await self.fred.get_observations(series_id, start)
            return series if series.observations else None

        attempts = [Attempt("fred", fred_series)] if self.fred is not None else []

        return await self._resolve(
            f"fred:{series_id}:{start.isoformat()}",
            attempts,
            ObservationSeries,
            ObservationSeries(series_id=series_id),
        )
