"""MSTR preferred shares: live quotes and volume history."""

import asyncio
import logging

from app.models import ChartSeries, MarketDefaults
from app.models.live import (
    PreferredQuote,
    PreferredsResponse,
    PreferredsSummary,
    VolumeHistoryResponse,
    VolumePoint,
)
from app.services.market_data import MarketDataGateway
from core.indicators import daily_change_pct

logger = logging.getLogger(__name__)

PREFERRED_SYMBOLS = ("STRC", "STRF", "STRD", "STRK")
MIN_LIVE_SYMBOLS = 2

# period -> (Yahoo range, bar interval)
VOLUME_PERIODS: dict[str, tuple[str, str]] = {
    "5d": ("5d", "1d"),
    "1mo": ("1mo", "1d"),
    "3mo": ("3mo", "1d"),
    "6mo": ("6mo", "1wk"),
    "1y": ("1y", "1wk"),
    "max": ("max", "1mo"),
}
DEFAULT_VOLUME_PERIOD = "1mo"


class InsufficientLiveData(Exception):
    """Fewer preferred symbols than required came back live."""

    def __init__(self, fetched: int, required: int = MIN_LIVE_SYMBOLS):
        super().__init__(f"live data for {fetched} symbols, need {required}")
        self.fetched = fetched
        self.required = required


class PreferredsService:
    """Live-only preferred quotes; stale or constant prices are never served."""

    def __init__(
        self,
        gateway: MarketDataGateway,
        defaults: MarketDefaults,
        symbols: tuple[str, ...] = PREFERRED_SYMBOLS,
    ):
        self.gateway = gateway
        self.defaults = defaults
        self.symbols = symbols

    def _dividend_yield(self, symbol: str) -> float:
        return self.defaults.preferred_dividend_yields.get(symbol, self.defaults.preferred_default_yield)

    def _to_quote(self, symbol: str, chart: ChartSeries) -> PreferredQuote:
        price = chart.price or 0.0
        previous = chart.previous_close
        return PreferredQuote(
            symbol=symbol,
            price=price,
            volume=chart.volume or 0.0,
            change=price - previous if previous else 0.0,
            change_percent=daily_change_pct(price, previous or 0.0),
            previous_close=previous,
            dividend_yield=self._dividend_yield(symbol),
            market_state=chart.market_state or "unknown",
        )

    async def quotes(self) -> PreferredsResponse:
        """
        Fetch every symbol concurrently.

        Raises:
            InsufficientLiveData: fewer than two symbols have a live price
        """
        results = await asyncio.gather(*(self.gateway.preferred_quote(s) for s in self.symbols))

        preferreds: dict[str, PreferredQuote | None] = {}
        for symbol, result in zip(self.symbols, results):
            preferreds[symbol] = self._to_quote(symbol, result.value) if result.value else None

        live = [q for q in preferreds.values() if q is not None]
        if len(live) < MIN_LIVE_SYMBOLS:
            logger.warning("Preferreds: only %d of %d symbols live", len(live), len(self.symbols))
            raise InsufficientLiveData(len(live))

        return PreferredsResponse(
            preferreds=preferreds,
            summary=PreferredsSummary(
                total_symbols=len(live),
                symbols_requested=len(self.symbols),
                total_volume=sum(q.volume for q in live),
                average_dividend_yield=sum(q.dividend_yield for q in live) / len(live),
            ),
            live_symbols=[s for s, q in preferreds.items() if q is not None],
            failed_symbols=[s for s, q in preferreds.items() if q is None],
        )

    async def volume_history(self, symbol: str, period: str = DEFAULT_VOLUME_PERIOD) -> VolumeHistoryResponse:
        """Traded volume per bar; unknown periods use one month of daily bars."""
        range_, interval = VOLUME_PERIODS.get(period, VOLUME_PERIODS[DEFAULT_VOLUME_PERIOD])
        result = await self.gateway.volume_history(symbol, range_, interval)

        points = [
            VolumePoint(
                timestamp=bar.timestamp,
                date=f"{bar.timestamp:%b} {bar.timestamp.day}",
                volume=bar.volume,
                price=round(bar.close, 2) if bar.close is not None else None,
            )
            for bar in result.value.bars
        ]
        return VolumeHistoryResponse(
            symbol=symbol,
            period=period,
            volume_history=points,
            data_source=result.source,
            data_points=len(points),
            success=not result.is_fallback,
            error="Failed to fetch volume history" if result.is_fallback else None,
        )
