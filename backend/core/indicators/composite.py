"""Composite ("VaultSignal") score.

score = clamp(momentum_pct * w_momentum
              + daily_change_pct * w_daily
              + volume_bonus(volume_trend)
              + correlated_score * w_correlation, -100, 100)

The label is taken from a fixed threshold table, lower bounds inclusive.
"""

import math
from typing import Any, Iterable

from core.indicators.indicators import volume_ratio
from core.indicators.series import clean_series
from core.models.indicator import BTC_WEIGHTS, CompositeScore, ScoreWeights

SCORE_MIN = -100.0
SCORE_MAX = 100.0

VOLUME_HIGH_RATIO = 1.2
VOLUME_LOW_RATIO = 0.8
VOLUME_HIGH_BONUS = 15.0
VOLUME_LOW_PENALTY = -10.0

# (lower bound, label), checked top-down
SCORE_LABELS = [
    (50.0, "STRONG BUY"),
    (20.0, "BUY"),
    (-20.0, "NEUTRAL"),
    (-50.0, "SELL"),
]
LOWEST_LABEL = "STRONG SELL"


def clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    return max(low, min(high, value))


def volume_bonus(ratio: float) -> float:
    """+15 above 1.2x average volume, -10 below 0.8x, otherwise 0."""
    if ratio > VOLUME_HIGH_RATIO:
        return VOLUME_HIGH_BONUS
    if ratio < VOLUME_LOW_RATIO:
        return VOLUME_LOW_PENALTY
    return 0.0


def display_score(score: float) -> int:
    """Integer score for display; halves round up (12.5 -> 13, -12.5 -> -12)."""
    return math.floor(score + 0.5)


def score_label(score: float) -> str:
    for lower_bound, label in SCORE_LABELS:
        if score >= lower_bound:
            return label
    return LOWEST_LABEL


def momentum_pct(closes: Iterable[Any]) -> float:
    """Percent move from the first to the last close (needs 3 closes)."""
    series = clean_series(closes)
    if len(series) < 3 or series[0] == 0:
        return 0.0
    return (series[-1] - series[0]) / series[0] * 100


def daily_change_pct(current: float, previous: float) -> float:
    """Percent change between two prices; 0 unless both are positive."""
    if current <= 0 or previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def compute_composite_score(
    closes: Iterable[Any],
    volumes: Iterable[Any],
    weights: ScoreWeights = BTC_WEIGHTS,
    correlated: CompositeScore | None = None,
) -> CompositeScore:
    """
    Score one instrument from a short window of daily closes and volumes.

    The latest close is the current price and the one before it the
    previous price. A missing previous close counts as no change.

    Args:
        closes: Chronologically ascending closes (e.g. 5 daily bars)
        volumes: Volumes over the same window
        weights: Momentum/daily/correlation weights
        correlated: Score of a correlated instrument to blend in

    Returns:
        CompositeScore clamped to [-100, 100]; a neutral score when
        there are no usable closes
    """
    series = clean_series(closes)
    if not series:
        return CompositeScore()

    price = series[-1]
    previous = series[-2] if len(series) >= 2 else price

    change = daily_change_pct(price, previous)
    momentum = momentum_pct(series)
    trend = volume_ratio(volumes)

    raw = momentum * weights.momentum + change * weights.daily + volume_bonus(trend)
    if correlated is not None:
        raw += correlated.score * weights.correlation

    score = clamp(raw)
    return CompositeScore(
        score=score,
        label=score_label(score),
        price=price,
        change_pct=change,
        momentum_pct=momentum,
        volume_trend=trend,
    )
