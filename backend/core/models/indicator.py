"""Indicator and score result models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Signal(str, Enum):
    """Categorical reading of an indicator value."""

    OVERBOUGHT = "OVERBOUGHT"
    OVERSOLD = "OVERSOLD"
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class IndicatorResult(BaseModel):
    """Result of a single indicator computation.

    Produced fresh per request and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    value: float
    signal: Signal = Signal.NEUTRAL
    description: str = ""
    period: int | None = None


class ScoreWeights(BaseModel):
    """Linear weights for the composite score."""

    model_config = ConfigDict(frozen=True)

    momentum: float
    daily: float
    correlation: float = 0.0  # weight applied to a correlated asset's score


# BTC is scored on its own; MSTR gets 30% of the BTC score blended in
BTC_WEIGHTS = ScoreWeights(momentum=10.0, daily=5.0)
MSTR_WEIGHTS = ScoreWeights(momentum=8.0, daily=5.0, correlation=0.3)


class CompositeScore(BaseModel):
    """Bounded composite ("VaultSignal") score with its inputs."""

    model_config = ConfigDict(frozen=True)

    score: float = 0.0  # always within [-100, 100]
    label: str = "NEUTRAL"
    price: float = 0.0
    change_pct: float = 0.0
    momentum_pct: float = 0.0
    volume_trend: float = 1.0
