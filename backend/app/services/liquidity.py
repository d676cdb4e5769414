"""Liquidity composite history from FRED series and BTC closes."""

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone

from app.models.live import LiquidityHistoryResponse
from app.services.market_data import MarketDataGateway
from core.liquidity import LIQUIDITY_SERIES, downsample, liquidity_history

logger = logging.getLogger(__name__)

# period -> days of history (None: since MAX_START)
LIQUIDITY_PERIODS: dict[str, int | None] = {
    "6M": 182,
    "1Y": 365,
    "2Y": 730,
    "5Y": 1826,
    "MAX": None,
}
DEFAULT_LIQUIDITY_PERIOD = "1Y"
MAX_START = date(2014, 1, 1)


class LiquidityHistoryService:
    """Fetches the FRED series and BTC history concurrently and scores each date."""

    def __init__(self, gateway: MarketDataGateway):
        self.gateway = gateway

    async def history(
        self,
        period: str = DEFAULT_LIQUIDITY_PERIOD,
        today: date | None = None,
    ) -> LiquidityHistoryResponse:
        today = today or datetime.now(timezone.utc).date()
        days = LIQUIDITY_PERIODS.get(period.upper(), LIQUIDITY_PERIODS[DEFAULT_LIQUIDITY_PERIOD])
        start = MAX_START if days is None else today - timedelta(days=days)

        series_ids = list(LIQUIDITY_SERIES)
        *fred_results, btc = await asyncio.gather(
            *(self.gateway.observations(series_id, start) for series_id in series_ids),
            self.gateway.btc_history(max((today - start).days, 1)),
        )

        series = {
            result.value.series_id: {o.date: o.value for o in result.value.observations}
            for result in fred_results
        }
        chart = btc.value
        btc_prices = {stamp.date(): close for stamp, close in zip(chart.timestamps, chart.closes)}

        points = downsample(liquidity_history(series, btc_prices))
        if not points:
            logger.warning("Liquidity history %s: no FRED observations", period)

        sources = {series_id: result.source for series_id, result in zip(series_ids, fred_results)}
        sources["btc"] = btc.source
        return LiquidityHistoryResponse(period=period, count=len(points), history=points, sources=sources)
