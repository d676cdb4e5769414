"""Technical indicator panels for MSTR and BTC."""

import asyncio
import logging

from app.models.live import (
    BiasPayload,
    MacdPayload,
    RsiPayload,
    TechnicalIndicators,
    TechnicalSnapshot,
)
from app.services.market_data import MSTR_SYMBOL, MarketDataGateway
from core.indicators import (
    IndicatorCalculator,
    daily_change_pct,
    market_sentiment,
    price_bias,
    volume_bias,
    volume_ratio,
)
from core.models import IndicatorResult

logger = logging.getLogger(__name__)

LIVE_SOURCE = "live_calculation"
FALLBACK_SOURCE = "fallback"


def build_indicators(
    rsi: IndicatorResult,
    macd: IndicatorResult,
    bias: IndicatorResult,
) -> TechnicalIndicators:
    """Round indicator results for display."""
    return TechnicalIndicators(
        rsi=RsiPayload(value=round(rsi.value, 1), period=rsi.period or 14, signal=rsi.signal.value),
        macd=MacdPayload(
            value=round(macd.value, 2),
            signal=macd.signal.value,
            description=macd.description,
        ),
        institutional_bias=BiasPayload(signal=bias.signal.value, description=bias.description),
    )


class TechnicalService:
    """Computes RSI, MACD and institutional bias from provider history."""

    def __init__(self, gateway: MarketDataGateway, rsi_period: int = 14, history_days: int = 30):
        self.gateway = gateway
        self.history_days = history_days
        self.calculator = IndicatorCalculator(rsi_period=rsi_period)

    async def mstr_indicators(self) -> TechnicalSnapshot:
        """
        MSTR panel from daily Yahoo closes.

        Bias compares the latest volume with the window average and the
        last daily move. Current price comes from the intraday quote.
        """
        history, quote = await asyncio.gather(
            self.gateway.chart(MSTR_SYMBOL, f"{self.history_days}d", "1d"),
            self.gateway.mstr_quote(),
        )

        closes = history.value.closes
        indicators = self.calculator.calculate_all(closes)

        change = daily_change_pct(closes[-1], closes[-2]) if len(closes) >= 2 else 0.0
        bias = volume_bias(volume_ratio(history.value.volumes), change)

        live = self.calculator.has_enough_data(closes)
        if not live:
            logger.info("MSTR history too short (%d closes), indicators neutral", len(closes))

        price = quote.value.price or 0.0
        previous = quote.value.previous_close or 0.0
        return TechnicalSnapshot(
            symbol=MSTR_SYMBOL,
            current_price=price,
            price_change_percent=daily_change_pct(price, previous),
            technical_indicators=build_indicators(indicators["rsi"], indicators["macd"], bias),
            market_sentiment=market_sentiment(indicators["rsi"], indicators["macd"]),
            source=LIVE_SOURCE if live else FALLBACK_SOURCE,
        )

    async def btc_indicators(self) -> TechnicalSnapshot:
        """BTC panel from daily CoinGecko history; bias from the 24h change."""
        spot, history = await asyncio.gather(
            self.gateway.btc_spot(),
            self.gateway.btc_history(self.history_days),
        )

        closes = history.value.closes
        indicators = self.calculator.calculate_all(closes)

        change = spot.value.change_24h or 0.0
        live = self.calculator.has_enough_data(closes)
        if not live:
            logger.info("BTC history too short (%d closes), indicators neutral", len(closes))

        return TechnicalSnapshot(
            symbol="BTC",
            current_price=spot.value.price,
            price_change_percent=change,
            technical_indicators=build_indicators(
                indicators["rsi"], indicators["macd"], price_bias(change)
            ),
            market_sentiment=market_sentiment(indicators["rsi"], indicators["macd"]),
            source=LIVE_SOURCE if live else FALLBACK_SOURCE,
        )
