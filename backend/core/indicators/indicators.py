"""Technical indicators for the dashboard.

RSI uses Wilder's smoothing seeded with the simple average of the first
``period`` gains and losses. MACD is the difference between the last
values of a 12 and a 26 period EMA, both seeded with the first price.

Series are sanitised with ``clean_series`` first, so provider gaps
(None, NaN) shorten the series instead of failing the calculation.
A series that is too short yields the neutral default, never an error.
"""

from typing import Any, Iterable

from core.indicators.series import clean_series, differences, ema, mean
from core.models.indicator import IndicatorResult, Signal

RSI_PERIOD = 14
RSI_NEUTRAL = 50.0
RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0

MACD_FAST_PERIOD = 12
MACD_SLOW_PERIOD = 26
# Thresholds are in raw price units, not a normalized oscillator
MACD_BULLISH_THRESHOLD = 50.0
MACD_BEARISH_THRESHOLD = -50.0

RSI_DESCRIPTIONS = {
    Signal.OVERBOUGHT: "Overbought conditions",
    Signal.OVERSOLD: "Oversold conditions",
    Signal.NEUTRAL: "Balanced momentum",
}

MACD_DESCRIPTIONS = {
    Signal.BULLISH: "Positive momentum",
    Signal.BEARISH: "Negative momentum",
    Signal.NEUTRAL: "Sideways trend",
}


def rsi_signal(value: float) -> Signal:
    """Map an RSI value to OVERBOUGHT (>= 70), OVERSOLD (<= 30) or NEUTRAL."""
    if value >= RSI_OVERBOUGHT:
        return Signal.OVERBOUGHT
    if value <= RSI_OVERSOLD:
        return Signal.OVERSOLD
    return Signal.NEUTRAL


def macd_signal(value: float) -> Signal:
    """Map a MACD line value to BULLISH (> 50), BEARISH (< -50) or NEUTRAL."""
    if value > MACD_BULLISH_THRESHOLD:
        return Signal.BULLISH
    if value < MACD_BEARISH_THRESHOLD:
        return Signal.BEARISH
    return Signal.NEUTRAL


def compute_rsi_value(prices: Iterable[Any], period: int = RSI_PERIOD) -> float:
    """
    Calculate the Relative Strength Index of a price series.

    Args:
        prices: Chronologically ascending prices
        period: Lookback period (>= 1)

    Returns:
        RSI in [0, 100]; 50 when fewer than ``period + 1`` usable prices,
        100 when there were no losses at all
    """
    if period < 1:
        raise ValueError(f"RSI period must be >= 1, got {period}")

    series = clean_series(prices)
    if len(series) < period + 1:
        return RSI_NEUTRAL

    changes = differences(series)

    seed = changes[:period]
    avg_gain = sum(c for c in seed if c > 0) / period
    avg_loss = sum(-c for c in seed if c < 0) / period

    for change in changes[period:]:
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def compute_rsi(prices: Iterable[Any], period: int = RSI_PERIOD) -> IndicatorResult:
    """Calculate RSI and its signal."""
    value = compute_rsi_value(prices, period)
    signal = rsi_signal(value)
    return IndicatorResult(
        value=value,
        signal=signal,
        description=RSI_DESCRIPTIONS[signal],
        period=period,
    )


def compute_macd(prices: Iterable[Any]) -> IndicatorResult:
    """
    Calculate the MACD line (EMA12 - EMA26) of a price series.

    Both EMAs run over the full series. An empty series, or one with no
    usable prices, gives 0 / NEUTRAL.

    Args:
        prices: Chronologically ascending prices

    Returns:
        IndicatorResult with the MACD line value, signal and description
    """
    series = clean_series(prices)
    if not series:
        return IndicatorResult(
            value=0.0,
            signal=Signal.NEUTRAL,
            description=MACD_DESCRIPTIONS[Signal.NEUTRAL],
        )

    fast = ema(series, MACD_FAST_PERIOD)
    slow = ema(series, MACD_SLOW_PERIOD)
    line = fast[-1] - slow[-1]

    signal = macd_signal(line)
    return IndicatorResult(
        value=line,
        signal=signal,
        description=MACD_DESCRIPTIONS[signal],
    )


def volume_ratio(volumes: Iterable[Any]) -> float:
    """Latest volume divided by the mean volume of the window (1.0 if undefined)."""
    series = clean_series(volumes)
    if not series:
        return 1.0
    average = mean(series)
    if average <= 0:
        return 1.0
    return series[-1] / average


class IndicatorCalculator:
    """Calculator for the indicators shown on the technical panels."""

    def __init__(self, rsi_period: int = RSI_PERIOD):
        self.rsi_period = rsi_period

    def calculate_all(self, closes: Iterable[Any]) -> dict[str, IndicatorResult]:
        """
        Calculate RSI and MACD for the given closes.

        Args:
            closes: List of close prices

        Returns:
            Dict with "rsi" and "macd" results
        """
        closes = clean_series(closes)
        return {
            "rsi": compute_rsi(closes, self.rsi_period),
            "macd": compute_macd(closes),
        }

    def has_enough_data(self, closes: Iterable[Any]) -> bool:
        """Check whether RSI would be computed rather than defaulted."""
        return len(clean_series(closes)) >= self.rsi_period + 1
