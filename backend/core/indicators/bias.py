"""Institutional bias and overall sentiment heuristics."""

from core.models.indicator import IndicatorResult, Signal

# Volume-confirmed move: heavy volume with a > 2% daily move
BIAS_VOLUME_RATIO = 1.5
BIAS_VOLUME_MOVE_PCT = 2.0
# Price-only move: > 3% in 24h
BIAS_PRICE_MOVE_PCT = 3.0

VOLUME_BIAS_DESCRIPTIONS = {
    Signal.BULLISH: "High volume buying pressure",
    Signal.BEARISH: "High volume selling pressure",
    Signal.NEUTRAL: "Normal trading activity",
}

PRICE_BIAS_DESCRIPTIONS = {
    Signal.BULLISH: "Strong buying pressure",
    Signal.BEARISH: "Selling pressure detected",
    Signal.NEUTRAL: "Normal trading activity",
}


def volume_bias(volume_ratio: float, change_pct: float) -> IndicatorResult:
    """Bias from latest/average volume and the daily percent change."""
    signal = Signal.NEUTRAL
    if volume_ratio > BIAS_VOLUME_RATIO:
        if change_pct > BIAS_VOLUME_MOVE_PCT:
            signal = Signal.BULLISH
        elif change_pct < -BIAS_VOLUME_MOVE_PCT:
            signal = Signal.BEARISH
    return IndicatorResult(
        value=volume_ratio,
        signal=signal,
        description=VOLUME_BIAS_DESCRIPTIONS[signal],
    )


def price_bias(change_pct: float) -> IndicatorResult:
    """Bias from the 24h percent change alone."""
    signal = Signal.NEUTRAL
    if change_pct > BIAS_PRICE_MOVE_PCT:
        signal = Signal.BULLISH
    elif change_pct < -BIAS_PRICE_MOVE_PCT:
        signal = Signal.BEARISH
    return IndicatorResult(
        value=change_pct,
        signal=signal,
        description=PRICE_BIAS_DESCRIPTIONS[signal],
    )


def market_sentiment(rsi: IndicatorResult, macd: IndicatorResult) -> str:
    """STRONG_BULLISH / STRONG_BEARISH when RSI and MACD agree, else NEUTRAL."""
    if rsi.value > 60 and macd.signal == Signal.BULLISH:
        return "STRONG_BULLISH"
    if rsi.value < 40 and macd.signal == Signal.BEARISH:
        return "STRONG_BEARISH"
    return "NEUTRAL"
