"""Request dependencies resolved from application state."""

from fastapi import Request

from app.config import get_settings
from app.services import (
    LiquidityHistoryService,
    MarketDataGateway,
    OptionsFlowService,
    PreferredsService,
    TechnicalService,
    TreasuryService,
    VaultSignalService,
)
from app.storage import EventLog

EVENT_LOG_NAMES = ("events", "pageviews", "registrations")

FORWARDED_IP_HEADERS = ("x-real-ip", "cf-connecting-ip")


def get_gateway(request: Request) -> MarketDataGateway:
    return request.app.state.gateway


def get_technical_service(request: Request) -> TechnicalService:
    settings = get_settings()
    return TechnicalService(
        get_gateway(request),
        rsi_period=settings.rsi_period,
        history_days=settings.history_days,
    )


def get_vault_signal_service(request: Request) -> VaultSignalService:
    return VaultSignalService(get_gateway(request), range_=get_settings().vault_signal_range)


def get_treasury_service(request: Request) -> TreasuryService:
    settings = get_settings()
    return TreasuryService(
        get_gateway(request),
        request.app.state.market_defaults,
        nav_snapshot_paths=settings.nav_snapshot_paths,
        liquidity_snapshot_paths=settings.liquidity_snapshot_paths,
    )


def get_options_flow_service(request: Request) -> OptionsFlowService:
    return OptionsFlowService(get_gateway(request), request.app.state.market_defaults)


def get_preferreds_service(request: Request) -> PreferredsService:
    return PreferredsService(get_gateway(request), request.app.state.market_defaults)


def get_liquidity_history_service(request: Request) -> LiquidityHistoryService:
    return LiquidityHistoryService(get_gateway(request))


def get_event_logs(request: Request) -> dict[str, EventLog]:
    return request.app.state.event_logs


def client_ip(request: Request) -> str:
    """Resolve the client IP from proxy headers, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in FORWARDED_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
