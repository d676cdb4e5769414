"""Bitcoin treasury figures: MSTR quote, NAV, dilution, sovereign holdings."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

from app.models import MarketDefaults
from app.models.live import (
    BtcPerShareHistory,
    BtcPerSharePoint,
    BtcPerShareStats,
    BtcQuote,
    DilutedShares,
    DilutionBreakdown,
    GovernmentHoldingsResponse,
    HoldingValue,
    LiquidityResponse,
    MstrQuote,
    NavAnalysisResponse,
    NavMultiple,
)
from app.services.market_data import MarketDataGateway
from app.storage import read_snapshot
from core.indicators import daily_change_pct
from core.nav import analyze_nav, btc_per_share, nav_per_share, nav_premium_pct, percent_change

logger = logging.getLogger(__name__)

# period -> days back from the latest disclosed purchase (None: everything)
HISTORY_PERIODS: dict[str, int | None] = {
    "1y": 365,
    "2y": 730,
    "3y": 1095,
    "5y": 1826,
    "all": None,
}
DEFAULT_HISTORY_PERIOD = "all"


def _parse_timestamp(value) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class TreasuryService:
    """Combines live quotes with treasury constants and snapshot files."""

    def __init__(
        self,
        gateway: MarketDataGateway,
        defaults: MarketDefaults,
        nav_snapshot_paths: list[Path] | None = None,
        liquidity_snapshot_paths: list[Path] | None = None,
    ):
        self.gateway = gateway
        self.defaults = defaults
        self.nav_snapshot_paths = nav_snapshot_paths or []
        self.liquidity_snapshot_paths = liquidity_snapshot_paths or []

    # =========================================================================
    # Quotes
    # =========================================================================

    async def btc_quote(self) -> BtcQuote:
        """BTC spot with market cap from circulating supply."""
        spot = await self.gateway.btc_spot()
        change = spot.value.change_24h
        return BtcQuote(
            price_usd=spot.value.price,
            change_24h=change if change is not None else self.defaults.btc_change_24h,
            market_cap=spot.value.price * self.defaults.btc_circulating_supply,
            volume_24h=self.defaults.btc_volume_24h,
            source=spot.source,
        )

    async def mstr_quote(self) -> MstrQuote:
        """MSTR quote with bitcoin per share and NAV premium."""
        quote, spot = await asyncio.gather(
            self.gateway.mstr_quote(),
            self.gateway.btc_spot(),
        )
        d = self.defaults

        price = quote.value.price or d.mstr_price
        previous = quote.value.previous_close or price
        shares = d.mstr_shares_outstanding
        nav = nav_per_share(d.mstr_btc_holdings, spot.value.price, shares)

        return MstrQuote(
            price=price,
            change=price - previous,
            change_percent=daily_change_pct(price, previous),
            volume=quote.value.volume or d.mstr_volume,
            market_cap=price * shares,
            shares_outstanding=shares,
            btc_holdings=d.mstr_btc_holdings,
            btc_cost_basis_per_coin=d.mstr_btc_cost_basis,
            total_investment=d.mstr_total_investment,
            btc_per_share=btc_per_share(d.mstr_btc_holdings, shares),
            nav_per_share=nav,
            nav_premium=nav_premium_pct(price, nav),
            btc_price=spot.value.price,
            source=quote.source,
        )

    # =========================================================================
    # NAV
    # =========================================================================

    async def nav(self) -> NavMultiple:
        """Published NAV multiple from the scraper snapshot, else the confirmed value."""
        snapshot = await asyncio.to_thread(read_snapshot, self.nav_snapshot_paths)
        multiple = snapshot.get("nav") if snapshot else None

        if isinstance(multiple, (int, float)) and not isinstance(multiple, bool) and multiple > 0:
            updated = _parse_timestamp(snapshot.get("timestamp"))
            age = None
            if updated is not None:
                age = int((datetime.now(timezone.utc) - updated).total_seconds())
            return NavMultiple(
                nav_multiple=float(multiple),
                nav_multiple_formatted=snapshot.get("nav_formatted") or f"{multiple:.2f}x",
                source="strategy_com_live",
                method=str(snapshot.get("method") or "scraper"),
                last_updated=updated or datetime.now(timezone.utc),
                data_age_seconds=age,
            )

        if snapshot is not None:
            logger.warning("NAV snapshot has no usable 'nav' value, using confirmed value")
        return NavMultiple(
            nav_multiple=self.defaults.nav_multiple,
            nav_multiple_formatted=f"{self.defaults.nav_multiple:.2f}x",
            source="confirmed_value",
            method="fallback_confirmed",
        )

    async def diluted_shares(self) -> DilutedShares:
        """
        Fully diluted share count.

        Uses the provider's diluted count when it exceeds the basic count,
        otherwise adds the convertible notes, options and warrants estimate.
        """
        counts = await self.gateway.share_counts()
        basic = counts.value.basic_shares
        diluted = counts.value.diluted_shares

        if diluted and diluted > basic:
            return DilutedShares(
                basic_shares=basic,
                diluted_shares=diluted,
                dilution_factor=round(diluted / basic, 3),
                source="yahoo_finance_api",
            )

        components = self.defaults.dilution
        total = basic + components.total
        return DilutedShares(
            basic_shares=basic,
            diluted_shares=total,
            dilution_factor=round(total / basic, 3) if basic else 0.0,
            conversion_data=DilutionBreakdown(
                basic_shares=basic,
                convertible_notes=components.convertible_notes,
                employee_options=components.employee_options,
                warrants=components.warrants,
                total_diluted=total,
            ),
            source="fallback_estimate" if counts.is_fallback else "calculated_with_convertibles",
        )

    async def nav_analysis(self) -> NavAnalysisResponse:
        """Basic and diluted NAV per share and premium."""
        nav, quote, shares = await asyncio.gather(
            self.nav(),
            self.gateway.mstr_quote(),
            self.diluted_shares(),
        )
        price = quote.value.price or self.defaults.mstr_price
        analysis = analyze_nav(
            price=price,
            nav_multiple=nav.nav_multiple,
            basic_shares=shares.basic_shares,
            diluted_shares=shares.diluted_shares,
        )
        return NavAnalysisResponse(
            **analysis.model_dump(),
            basic_shares=shares.basic_shares,
            diluted_shares=shares.diluted_shares,
            sources={"nav": nav.source, "price": quote.source, "shares": shares.source},
        )

    def btc_per_share_history(self, period: str = DEFAULT_HISTORY_PERIOD) -> BtcPerShareHistory:
        """
        Bitcoin per share after each disclosed purchase, oldest first.

        The window is anchored at the latest purchase, not today, so a stale
        table still returns its most recent year. Unknown periods return
        the whole history.
        """
        milestones = sorted(self.defaults.treasury_history, key=lambda m: m.date)
        days = HISTORY_PERIODS.get(period.lower())
        if days is not None and milestones:
            cutoff = milestones[-1].date - timedelta(days=days)
            milestones = [m for m in milestones if m.date >= cutoff]

        points = [
            BtcPerSharePoint(
                date=m.date,
                btc_holdings=m.btc_holdings,
                shares_outstanding=m.shares_outstanding,
                btc_per_share=btc_per_share(m.btc_holdings, m.shares_outstanding),
                label=f"{m.date:%b %y}",
            )
            for m in milestones
        ]

        stats = BtcPerShareStats()
        if points:
            first, last = points[0], points[-1]
            stats = BtcPerShareStats(
                current_btc_per_share=last.btc_per_share,
                period_start_btc_per_share=first.btc_per_share,
                growth_percent=percent_change(first.btc_per_share, last.btc_per_share),
                total_btc=last.btc_holdings,
                total_shares=last.shares_outstanding,
            )
        return BtcPerShareHistory(period=period, data=points, stats=stats, data_points=len(points))

    # =========================================================================
    # Sovereign holdings and liquidity
    # =========================================================================

    async def government_holdings(self) -> GovernmentHoldingsResponse:
        """Known sovereign holdings valued at the live BTC price."""
        spot = await self.gateway.btc_spot()
        price = spot.value.price
        max_supply = self.defaults.btc_max_supply

        holdings = [
            HoldingValue(
                **h.model_dump(),
                value_usd=h.btc * price,
                pct_supply=h.btc / max_supply * 100,
            )
            for h in self.defaults.government_holdings
        ]
        total_btc = sum(h.btc for h in holdings)

        return GovernmentHoldingsResponse(
            btc_price=price,
            price_source=spot.source,
            total_btc=total_btc,
            total_value_usd=sum(h.value_usd for h in holdings),
            strategic_reserve_btc=sum(h.btc for h in holdings if h.strategic),
            pct_total_supply=total_btc / max_supply * 100,
            holdings=holdings,
        )

    async def liquidity(self) -> LiquidityResponse:
        """Global liquidity tracker snapshot, else the last known reading."""
        snapshot = await asyncio.to_thread(read_snapshot, self.liquidity_snapshot_paths)
        if snapshot is not None:
            try:
                return LiquidityResponse(
                    composite_score=snapshot["composite_score"],
                    btc_correlation=snapshot["btc_correlation"],
                    btc_price=snapshot["btc_price"],
                    liquidity_state=snapshot["liquidity_state"],
                    components=snapshot.get("components") or {},
                    analysis=snapshot.get("analysis") or "",
                    last_updated=_parse_timestamp(snapshot.get("timestamp"))
                    or datetime.now(timezone.utc),
                    source="global_liquidity_tracker_live",
                )
            except (KeyError, ValidationError) as e:
                logger.warning("Liquidity snapshot unusable: %s", e)

        return LiquidityResponse(
            **self.defaults.liquidity.model_dump(),
            source="fallback_current",
        )
