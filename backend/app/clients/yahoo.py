"""Yahoo Finance chart and quote summary client."""

from datetime import datetime, timezone
from typing import Any

from app.clients.base import ProviderClient, ProviderError, as_float
from app.models import ChartSeries, ShareCounts, VolumeBar, VolumeHistory
from core.indicators import clean_series


class YahooFinanceClient(ProviderClient):
    """Client for the unofficial Yahoo Finance JSON endpoints."""

    BASE_URL = "https://query1.finance.yahoo.com"
    SUMMARY_BASE_URL = "https://query2.finance.yahoo.com"

    def __init__(self, base_url: str = BASE_URL, summary_base_url: str = SUMMARY_BASE_URL, **kwargs):
        super().__init__(base_url, **kwargs)
        self.summary_base_url = summary_base_url

    async def get_chart(
        self,
        symbol: str,
        range_: str = "30d",
        interval: str = "1d",
    ) -> ChartSeries:
        """
        Fetch a price chart.

        Args:
            symbol: Ticker (e.g., "MSTR", "BTC-USD")
            range_: Yahoo range (e.g., "1d", "5d", "30d")
            interval: Bar interval (e.g., "1m", "1d")

        Returns:
            ChartSeries with null bars removed
        """
        data = await self._request(
            "GET",
            f"/v8/finance/chart/{symbol}",
            {"range": range_, "interval": interval},
        )
        return parse_chart(symbol, data)

    async def get_volume_history(
        self,
        symbol: str,
        range_: str = "1mo",
        interval: str = "1d",
    ) -> VolumeHistory:
        """Fetch per-bar volumes (regular session only)."""
        data = await self._request(
            "GET",
            f"/v8/finance/chart/{symbol}",
            {"range": range_, "interval": interval, "includePrePost": "false"},
        )
        return parse_volume_history(symbol, data)

    async def get_share_counts(self, symbol: str) -> ShareCounts:
        """Fetch basic and diluted share counts from key statistics."""
        data = await self._request(
            "GET",
            f"{self.summary_base_url}/v10/finance/quoteSummary/{symbol}",
            {"modules": "defaultKeyStatistics,financialData"},
        )
        return parse_share_counts(symbol, data)


def _raw(stats: dict[str, Any], key: str) -> float | None:
    value = stats.get(key)
    if isinstance(value, dict):
        return as_float(value.get("raw"))
    return as_float(value)


def _section(value: Any, expected: type, what: str) -> Any:
    """A nested payload section, empty when absent, ProviderError when the wrong shape."""
    if value is None:
        return expected()
    if not isinstance(value, expected):
        raise ProviderError(f"{what}: malformed")
    return value


def _chart_result(symbol: str, data: Any) -> tuple[dict[str, Any], dict[str, Any], str]:
    """The first chart result and its first quote block."""
    try:
        result = data["chart"]["result"][0]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(f"Yahoo chart for {symbol}: no result") from e
    what = f"Yahoo chart for {symbol}"
    if not isinstance(result, dict):
        raise ProviderError(f"{what}: malformed result")

    quotes = _section(_section(result.get("indicators"), dict, what).get("quote"), list, what)
    quote = _section(quotes[0] if quotes else None, dict, what)
    return result, quote, what


def _timestamp(value: Any) -> datetime | None:
    seconds = as_float(value)
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def parse_chart(symbol: str, data: Any) -> ChartSeries:
    """Parse a /v8/finance/chart payload."""
    result, quote, what = _chart_result(symbol, data)
    meta = _section(result.get("meta"), dict, what)
    raw_closes = _section(quote.get("close"), list, what)
    raw_timestamps = _section(result.get("timestamp"), list, what)

    # A null close drops the whole bar, timestamp included
    closes: list[float] = []
    timestamps: list[datetime] = []
    for i, raw_close in enumerate(raw_closes):
        close = clean_series([raw_close])
        if not close:
            continue
        closes.append(close[0])
        stamp = _timestamp(raw_timestamps[i]) if i < len(raw_timestamps) else None
        if stamp is not None:
            timestamps.append(stamp)

    market_state = meta.get("marketState")
    return ChartSeries(
        symbol=symbol,
        closes=closes,
        volumes=clean_series(_section(quote.get("volume"), list, what)),
        timestamps=timestamps,
        price=as_float(meta.get("regularMarketPrice")) or as_float(meta.get("previousClose")),
        previous_close=as_float(meta.get("previousClose") or meta.get("chartPreviousClose")),
        volume=as_float(meta.get("regularMarketVolume")),
        market_state=market_state if isinstance(market_state, str) else None,
    )


def parse_volume_history(symbol: str, data: Any) -> VolumeHistory:
    """
    Parse a chart payload into volume bars.

    Bars stay aligned with their timestamps. Bars with no volume are
    dropped; a null close is kept as None.
    """
    result, quote, what = _chart_result(symbol, data)
    raw_volumes = _section(quote.get("volume"), list, what)
    raw_closes = _section(quote.get("close"), list, what)

    bars: list[VolumeBar] = []
    for i, raw_timestamp in enumerate(_section(result.get("timestamp"), list, what)):
        stamp = _timestamp(raw_timestamp)
        volume = as_float(raw_volumes[i]) if i < len(raw_volumes) else None
        if stamp is None or not volume or volume <= 0:
            continue
        close = clean_series([raw_closes[i]]) if i < len(raw_closes) else []
        bars.append(VolumeBar(timestamp=stamp, volume=volume, close=close[0] if close else None))
    return VolumeHistory(symbol=symbol, bars=bars)


def parse_share_counts(symbol: str, data: Any) -> ShareCounts:
    """Parse a /v10/finance/quoteSummary payload."""
    try:
        result = data["quoteSummary"]["result"][0]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(f"Yahoo quote summary for {symbol}: no result") from e
    what = f"Yahoo quote summary for {symbol}"
    if not isinstance(result, dict):
        raise ProviderError(f"{what}: malformed result")

    stats = _section(result.get("defaultKeyStatistics"), dict, what)
    basic = _raw(stats, "sharesOutstanding") or _raw(stats, "impliedSharesOutstanding")
    if not basic:
        raise ProviderError(f"{what}: no share count")

    return ShareCounts(
        basic_shares=basic,
        diluted_shares=_raw(stats, "sharesOutstandingDiluted"),
    )
