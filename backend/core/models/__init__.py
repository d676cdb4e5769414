"""Value objects produced by the core."""

from core.models.indicator import (
    CompositeScore,
    IndicatorResult,
    ScoreWeights,
    Signal,
    BTC_WEIGHTS,
    MSTR_WEIGHTS,
)
from core.models.config import (
    DilutionComponents,
    GovernmentHolding,
    LiquiditySnapshot,
    MarketDefaults,
    TreasuryMilestone,
    GOVERNMENT_HOLDINGS,
    PREFERRED_DIVIDEND_YIELDS,
    TREASURY_HISTORY,
)

__all__ = [
    "CompositeScore",
    "IndicatorResult",
    "ScoreWeights",
    "Signal",
    "BTC_WEIGHTS",
    "MSTR_WEIGHTS",
    "DilutionComponents",
    "GovernmentHolding",
    "LiquiditySnapshot",
    "MarketDefaults",
    "TreasuryMilestone",
    "GOVERNMENT_HOLDINGS",
    "PREFERRED_DIVIDEND_YIELDS",
    "TREASURY_HISTORY",
]
