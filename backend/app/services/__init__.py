"""Business services."""

from app.services.fallback import (
    Attempt,
    FallbackChain,
    FallbackResult,
    FALLBACK_SOURCE,
)
from app.services.liquidity import LiquidityHistoryService
from app.services.market_data import MarketDataGateway
from app.services.options import OptionsFlowService
from app.services.preferreds import InsufficientLiveData, PreferredsService
from app.services.technical import TechnicalService
from app.services.treasury import TreasuryService
from app.services.vault_signal import VaultSignalService

__all__ = [
    "Attempt",
    "FallbackChain",
    "FallbackResult",
    "FALLBACK_SOURCE",
    "InsufficientLiveData",
    "LiquidityHistoryService",
    "MarketDataGateway",
    "OptionsFlowService",
    "PreferredsService",
    "TechnicalService",
    "TreasuryService",
    "VaultSignalService",
]
