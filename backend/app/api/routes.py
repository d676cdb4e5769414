"""Live market data REST routes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import ORJSONResponse

from app.api.deps import (
    client_ip,
    get_liquidity_history_service,
    get_options_flow_service,
    get_preferreds_service,
    get_technical_service,
    get_treasury_service,
    get_vault_signal_service,
)
from app.config import get_settings
from app.models import (
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
from app.models.live import (
    BtcPerShareHistory,
    LiquidityHistoryResponse,
    OptionsFlowResponse,
    PreferredsResponse,
    VolumeHistoryResponse,
)
from app.services import (
    InsufficientLiveData,
    LiquidityHistoryService,
    OptionsFlowService,
    PreferredsService,
    TechnicalService,
    TreasuryService,
    VaultSignalService,
)
from app.services.preferreds import DEFAULT_VOLUME_PERIOD, PREFERRED_SYMBOLS

logger = logging.getLogger(__name__)

router = APIRouter()

NO_STORE = "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
PUBLIC_5_MIN = "public, max-age=300"
PREFERREDS_RETRY_SECONDS = 30


def _no_store(response: Response) -> None:
    response.headers["Cache-Control"] = NO_STORE
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"


@router.get("/v1/live/btc", response_model=BtcQuote)
async def get_btc(
    response: Response,
    service: TreasuryService = Depends(get_treasury_service),
):
    """Live bitcoin price."""
    _no_store(response)
    return await service.btc_quote()


@router.get("/v1/live/mstr", response_model=MstrQuote)
async def get_mstr(
    response: Response,
    service: TreasuryService = Depends(get_treasury_service),
):
    """Live MSTR quote with bitcoin holdings and NAV premium."""
    _no_store(response)
    return await service.mstr_quote()


@router.get("/v1/live/nav", response_model=NavMultiple)
async def get_nav(
    response: Response,
    service: TreasuryService = Depends(get_treasury_service),
):
    """Published NAV multiple."""
    _no_store(response)
    return await service.nav()


@router.get("/v1/live/nav-analysis", response_model=NavAnalysisResponse)
async def get_nav_analysis(
    response: Response,
    service: TreasuryService = Depends(get_treasury_service),
):
    """Basic and fully diluted NAV per share and premium."""
    _no_store(response)
    return await service.nav_analysis()


@router.get("/v1/live/diluted-shares", response_model=DilutedShares)
async def get_diluted_shares(
    response: Response,
    service: TreasuryService = Depends(get_treasury_service),
):
    """Fully diluted share count."""
    _no_store(response)
    return await service.diluted_shares()


@router.get("/v1/live/technical-indicators", response_model=TechnicalSnapshot)
async def get_technical_indicators(
    response: Response,
    service: TechnicalService = Depends(get_technical_service),
):
    """MSTR RSI, MACD and institutional bias."""
    _no_store(response)
    return await service.mstr_indicators()


@router.get("/v1/live/bitcoin-technical", response_model=TechnicalSnapshot)
async def get_bitcoin_technical(
    response: Response,
    service: TechnicalService = Depends(get_technical_service),
):
    """BTC RSI, MACD and institutional bias."""
    _no_store(response)
    return await service.btc_indicators()


@router.get("/v1/live/vault-signal", response_model=VaultSignalResponse)
async def get_vault_signal(
    response: Response,
    service: VaultSignalService = Depends(get_vault_signal_service),
):
    """Composite BTC and MSTR signal."""
    response.headers["Cache-Control"] = "public, max-age=60"
    return await service.compute()


@router.get("/v1/live/government-holdings", response_model=GovernmentHoldingsResponse)
async def get_government_holdings(
    response: Response,
    service: TreasuryService = Depends(get_treasury_service),
):
    """Sovereign bitcoin holdings at the live price."""
    response.headers["Cache-Control"] = "public, s-maxage=300, stale-while-revalidate=600"
    return await service.government_holdings()


@router.get("/v1/live/liquidity", response_model=LiquidityResponse)
async def get_liquidity(
    response: Response,
    service: TreasuryService = Depends(get_treasury_service),
):
    """Global liquidity reading."""
    _no_store(response)
    return await service.liquidity()


@router.get("/v1/live/options-flow", response_model=OptionsFlowResponse)
async def get_options_flow(
    response: Response,
    service: OptionsFlowService = Depends(get_options_flow_service),
):
    """MSTR options chain with Black-Scholes Greeks around the live price."""
    _no_store(response)
    return await service.flow()


@router.get("/v1/live/btc-per-share-history", response_model=BtcPerShareHistory)
async def get_btc_per_share_history(
    response: Response,
    period: str = Query("all", description="1y, 2y, 3y, 5y or all"),
    service: TreasuryService = Depends(get_treasury_service),
):
    """Bitcoin per MSTR share after each disclosed purchase."""
    response.headers["Cache-Control"] = PUBLIC_5_MIN
    return service.btc_per_share_history(period)


@router.get("/v1/live/preferreds", response_model=PreferredsResponse)
async def get_preferreds(
    response: Response,
    service: PreferredsService = Depends(get_preferreds_service),
):
    """
    Live STRC, STRF, STRD and STRK quotes.

    Answers 503 with Retry-After when fewer than two symbols are live:
    stale preferred prices are never served.
    """
    try:
        result = await service.quotes()
    except InsufficientLiveData as e:
        return ORJSONResponse(
            status_code=503,
            content={
                "error": "Live data requirements not met",
                "symbols_fetched": e.fetched,
                "minimum_required": e.required,
                "message": "Real-time data temporarily unavailable",
                "retry_in_seconds": PREFERREDS_RETRY_SECONDS,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            headers={
                "Cache-Control": "no-store, no-cache, must-revalidate",
                "Retry-After": str(PREFERREDS_RETRY_SECONDS),
            },
        )
    _no_store(response)
    response.headers["X-Live-Data"] = "true"
    response.headers["X-Update-Frequency"] = "10s"
    return result


@router.get("/v1/mstr/preferreds/volume-history", response_model=VolumeHistoryResponse)
async def get_preferred_volume_history(
    response: Response,
    symbol: str = Query(PREFERRED_SYMBOLS[0], pattern=r"^[A-Za-z0-9.\-]{1,10}$"),
    period: str = Query(DEFAULT_VOLUME_PERIOD, description="5d, 1mo, 3mo, 6mo, 1y or max"),
    service: PreferredsService = Depends(get_preferreds_service),
):
    """Traded volume history for one preferred share."""
    result = await service.volume_history(symbol.upper(), period)
    if result.success:
        response.headers["Cache-Control"] = PUBLIC_5_MIN
    return result


@router.get("/v1/live/liquidity-history", response_model=LiquidityHistoryResponse)
async def get_liquidity_history(
    response: Response,
    period: str = Query("1Y", description="6M, 1Y, 2Y, 5Y or MAX"),
    service: LiquidityHistoryService = Depends(get_liquidity_history_service),
):
    """Liquidity composite score and BTC price over time."""
    response.headers["Cache-Control"] = "public, max-age=3600"
    return await service.history(period)


@router.get("/version")
async def get_version():
    """Deployed build information."""
    settings = get_settings()
    return {
        "name": settings.app_name,
        "version": f"v{settings.app_version}",
    }


@router.get("/client-ip")
async def get_client_ip(request: Request):
    """Client IP as seen by the server, with request headers."""
    return {
        "ip": client_ip(request),
        "headers": dict(request.headers),
    }
