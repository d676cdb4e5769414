"""Technical indicators and composite scoring (pure math, no I/O)."""

from core.indicators.series import (
    InvalidSeriesError,
    clean_series,
    differences,
    ema,
    mean,
)
from core.indicators.indicators import (
    IndicatorCalculator,
    compute_macd,
    compute_rsi,
    compute_rsi_value,
    macd_signal,
    rsi_signal,
    volume_ratio,
)
from core.indicators.bias import (
    market_sentiment,
    price_bias,
    volume_bias,
)
from core.indicators.composite import (
    clamp,
    compute_composite_score,
    daily_change_pct,
    display_score,
    momentum_pct,
    score_label,
    volume_bonus,
)

__all__ = [
    "InvalidSeriesError",
    "clean_series",
    "differences",
    "ema",
    "mean",
    "IndicatorCalculator",
    "compute_macd",
    "compute_rsi",
    "compute_rsi_value",
    "macd_signal",
    "rsi_signal",
    "volume_ratio",
    "market_sentiment",
    "price_bias",
    "volume_bias",
    "clamp",
    "compute_composite_score",
    "daily_change_pct",
    "display_score",
    "momentum_pct",
    "score_label",
    "volume_bonus",
]
