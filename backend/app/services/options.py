"""Modelled MSTR options flow."""

import logging
from datetime import date, datetime, timedelta, timezone

from app.models import MarketDefaults
from app.models.live import OptionsFlowResponse, OptionsMarketData
from app.services.market_data import MarketDataGateway
from core.options import DAYS_TO_EXPIRATION, build_options_chain

logger = logging.getLogger(__name__)


class OptionsFlowService:
    """
    Builds a 30-day options chain around the live MSTR price.

    Greeks are Black-Scholes at one implied volatility. Volumes come from
    the seeded model in ``core.options``; the seed defaults to the current
    UTC date so the chain is stable for a day and changes daily.
    """

    def __init__(self, gateway: MarketDataGateway, defaults: MarketDefaults):
        self.gateway = gateway
        self.defaults = defaults

    async def flow(self, today: date | None = None, seed: int | None = None) -> OptionsFlowResponse:
        today = today or datetime.now(timezone.utc).date()
        quote = await self.gateway.mstr_quote()
        price = quote.value.price or self.defaults.mstr_price

        chain, summary = build_options_chain(
            price,
            seed=today.toordinal() if seed is None else seed,
            sigma=self.defaults.options_implied_volatility,
            rate=self.defaults.risk_free_rate,
            days=DAYS_TO_EXPIRATION,
        )
        logger.info(
            "Options flow at $%.2f: C/P %.2f (%s)",
            price, summary.call_put_ratio, summary.dominant_sentiment,
        )

        return OptionsFlowResponse(
            current_price=price,
            price_source=quote.source,
            options_chain=chain,
            greeks_summary=summary,
            market_data=OptionsMarketData(
                implied_volatility=self.defaults.options_implied_volatility,
                risk_free_rate=self.defaults.risk_free_rate,
                time_to_expiration=DAYS_TO_EXPIRATION / 365,
                expiration_date=today + timedelta(days=DAYS_TO_EXPIRATION),
            ),
        )
