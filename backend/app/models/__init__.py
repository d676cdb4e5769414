"""Data models."""

from app.models.market import (
    ChartSeries,
    Observation,
    ObservationSeries,
    ShareCounts,
    SpotPrice,
    VolumeBar,
    VolumeHistory,
)
from app.models.live import (
    AssetSignal,
    BtcQuote,
    DilutedShares,
    GovernmentHoldingsResponse,
    LiquidityResponse,
    MstrQuote,
    NavAnalysisResponse,
    NavMultiple,
    TechnicalSnapshot,
    VaultSignalResponse,
)
from core.models import (
    BTC_WEIGHTS,
    MSTR_WEIGHTS,
    CompositeScore,
    GovernmentHolding,
    IndicatorResult,
    LiquiditySnapshot,
    MarketDefaults,
    ScoreWeights,
    Signal,
)

__all__ = [
    # Provider data
    "ChartSeries",
    "Observation",
    "ObservationSeries",
    "ShareCounts",
    "SpotPrice",
    "VolumeBar",
    "VolumeHistory",
    # Responses
    "AssetSignal",
    "BtcQuote",
    "DilutedShares",
    "GovernmentHoldingsResponse",
    "LiquidityResponse",
    "MstrQuote",
    "NavAnalysisResponse",
    "NavMultiple",
    "TechnicalSnapshot",
    "VaultSignalResponse",
    # Core results
    "BTC_WEIGHTS",
    "MSTR_WEIGHTS",
    "CompositeScore",
    "GovernmentHolding",
    "IndicatorResult",
    "LiquiditySnapshot",
    "MarketDefaults",
    "ScoreWeights",
    "Signal",
]
