"""Response payloads for the live dashboard endpoints."""

from datetime import date, datetime, timezone

from pydantic import BaseModel, Field

from core.liquidity import LiquidityPoint
from core.models.config import GovernmentHolding
from core.options import GreeksSummary, OptionContract


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BtcQuote(BaseModel):
    """Bitcoin spot quote."""

    price_usd: float
    change_24h: float
    market_cap: float
    volume_24h: float
    last_updated: datetime = Field(default_factory=utc_now)
    source: str


class MstrQuote(BaseModel):
    """MSTR share quote with treasury figures."""

    symbol: str = "MSTR"
    price: float
    change: float
    change_percent: float
    volume: float
    market_cap: float
    shares_outstanding: float
    btc_holdings: float
    btc_cost_basis_per_coin: float
    total_investment: float
    btc_per_share: float
    nav_per_share: float
    nav_premium: float  # percent over (under) NAV
    btc_price: float
    last_updated: datetime = Field(default_factory=utc_now)
    source: str


class NavMultiple(BaseModel):
    """Published price/NAV multiple."""

    nav_multiple: float
    nav_multiple_formatted: str
    source: str
    method: str
    last_updated: datetime = Field(default_factory=utc_now)
    data_age_seconds: int | None = None


class NavAnalysisResponse(BaseModel):
    """Basic and fully diluted NAV."""

    price: float
    nav_multiple: float
    basic_shares: float
    diluted_shares: float
    basic_nav_per_share: float
    basic_premium_pct: float
    diluted_nav_per_share: float
    diluted_nav_multiple: float
    diluted_premium_pct: float
    sources: dict[str, str]
    last_updated: datetime = Field(default_factory=utc_now)


class DilutionBreakdown(BaseModel):
    """Share counts behind the dilution estimate."""

    basic_shares: float
    convertible_notes: float
    employee_options: float
    warrants: float
    total_diluted: float


class DilutedShares(BaseModel):
    """Basic and fully diluted share counts."""

    basic_shares: float
    diluted_shares: float
    dilution_factor: float
    conversion_data: DilutionBreakdown | None = None
    source: str
    note: str = "Includes convertible notes, employee options, and warrants"
    last_updated: datetime = Field(default_factory=utc_now)


class RsiPayload(BaseModel):
    value: float
    period: int
    signal: str


class MacdPayload(BaseModel):
    value: float
    signal: str
    description: str


class BiasPayload(BaseModel):
    signal: str
    description: str


class TechnicalIndicators(BaseModel):
    rsi: RsiPayload
    macd: MacdPayload
    institutional_bias: BiasPayload


class TechnicalSnapshot(BaseModel):
    """RSI, MACD and bias for one instrument."""

    symbol: str
    current_price: float
    price_change_percent: float
    technical_indicators: TechnicalIndicators
    market_sentiment: str
    last_updated: datetime = Field(default_factory=utc_now)
    source: str


class AssetSignal(BaseModel):
    """Composite score for one instrument."""

    price: float
    change_24h: float
    momentum_5d: float
    volume_trend: float
    score: int
    signal: str


class VaultSignalResponse(BaseModel):
    """Composite BTC and MSTR signal."""

    btc: AssetSignal
    mstr: AssetSignal
    sources: dict[str, str]
    timestamp: datetime = Field(default_factory=utc_now)
    version: str = "v0.1-beta"
    note: str = "VaultSignal indicator - early beta. Full on-chain + macro + sentiment coming soon."


class HoldingValue(GovernmentHolding):
    value_usd: float
    pct_supply: float


class GovernmentHoldingsResponse(BaseModel):
    """Sovereign bitcoin holdings valued at the live price."""

    btc_price: float
    price_source: str
    total_btc: float
    total_value_usd: float
    strategic_reserve_btc: float
    pct_total_supply: float
    holdings: list[HoldingValue]
    last_updated: datetime = Field(default_factory=utc_now)
    source: str = "bitcointreasuries.net + public reports"


class LiquidityResponse(BaseModel):
    """Global liquidity reading."""

    composite_score: float
    btc_correlation: float
    btc_price: float
    liquidity_state: str
    components: dict[str, float] = Field(default_factory=dict)
    analysis: str = ""
    last_updated: datetime = Field(default_factory=utc_now)
    source: str


class OptionsMarketData(BaseModel):
    implied_volatility: float
    risk_free_rate: float
    time_to_expiration: float  # years
    expiration_date: date


class OptionsFlowResponse(BaseModel):
    """Modelled MSTR options chain with Black-Scholes Greeks."""

    symbol: str = "MSTR"
    current_price: float
    price_source: str
    options_chain: list[OptionContract]
    greeks_summary: GreeksSummary
    market_data: OptionsMarketData
    last_updated: datetime = Field(default_factory=utc_now)
    source: str = "black_scholes_calculated"


class BtcPerSharePoint(BaseModel):
    date: date
    btc_holdings: float
    shares_outstanding: float
    btc_per_share: float
    label: str  # "Feb 25"


class BtcPerShareStats(BaseModel):
    current_btc_per_share: float = 0.0
    period_start_btc_per_share: float = 0.0
    growth_percent: float = 0.0
    total_btc: float = 0.0
    total_shares: float = 0.0


class BtcPerShareHistory(BaseModel):
    """Bitcoin per MSTR share after each disclosed purchase."""

    period: str
    data: list[BtcPerSharePoint]
    stats: BtcPerShareStats
    data_points: int
    last_updated: datetime = Field(default_factory=utc_now)
    success: bool = True


class PreferredQuote(BaseModel):
    symbol: str
    price: float
    volume: float
    change: float
    change_percent: float
    previous_close: float | None = None
    dividend_yield: float
    market_state: str = "unknown"
    source: str = "yahoo_finance_live"
    timestamp: datetime = Field(default_factory=utc_now)


class PreferredsSummary(BaseModel):
    total_symbols: int
    symbols_requested: int
    total_volume: float
    average_dividend_yield: float
    last_updated: datetime = Field(default_factory=utc_now)
    next_update_in: int = 10  # seconds


class PreferredsResponse(BaseModel):
    """Live quotes for MSTR preferred shares; failed symbols map to None."""

    preferreds: dict[str, PreferredQuote | None]
    summary: PreferredsSummary
    data_quality: str = "live"
    data_source: str = "real_time_apis"
    live_symbols: list[str]
    failed_symbols: list[str]


class VolumePoint(BaseModel):
    timestamp: datetime
    date: str  # "Mar 4"
    volume: float
    price: float | None = None


class VolumeHistoryResponse(BaseModel):
    """Daily (or weekly) traded volume for one preferred share."""

    symbol: str
    period: str
    volume_history: list[VolumePoint]
    data_source: str
    data_points: int
    last_updated: datetime = Field(default_factory=utc_now)
    success: bool
    error: str | None = None


class LiquidityHistoryResponse(BaseModel):
    """Liquidity composite score and BTC price over time."""

    period: str
    count: int
    history: list[LiquidityPoint]
    sources: dict[str, str] = Field(default_factory=dict)
