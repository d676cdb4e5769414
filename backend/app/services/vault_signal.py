"""VaultSignal composite score for BTC and MSTR."""

import asyncio
import logging

from app.models.live import AssetSignal, VaultSignalResponse
from app.services.market_data import BTC_YAHOO_SYMBOL, MSTR_SYMBOL, MarketDataGateway
from core.indicators import compute_composite_score, display_score
from core.models import BTC_WEIGHTS, MSTR_WEIGHTS, CompositeScore, ScoreWeights

logger = logging.getLogger(__name__)


def to_asset_signal(score: CompositeScore) -> AssetSignal:
    return AssetSignal(
        price=score.price,
        change_24h=score.change_pct,
        momentum_5d=score.momentum_pct,
        volume_trend=score.volume_trend,
        score=display_score(score.score),
        signal=score.label,
    )


class VaultSignalService:
    """Scores BTC on its own and MSTR with 30% of the BTC score blended in."""

    def __init__(
        self,
        gateway: MarketDataGateway,
        range_: str = "5d",
        btc_weights: ScoreWeights = BTC_WEIGHTS,
        mstr_weights: ScoreWeights = MSTR_WEIGHTS,
    ):
        self.gateway = gateway
        self.range = range_
        self.btc_weights = btc_weights
        self.mstr_weights = mstr_weights

    async def compute(self) -> VaultSignalResponse:
        """Fetch both daily charts concurrently and score them."""
        btc_chart, mstr_chart = await asyncio.gather(
            self.gateway.chart(BTC_YAHOO_SYMBOL, self.range, "1d"),
            self.gateway.chart(MSTR_SYMBOL, self.range, "1d"),
        )

        btc = compute_composite_score(
            btc_chart.value.closes,
            btc_chart.value.volumes,
            self.btc_weights,
        )
        mstr = compute_composite_score(
            mstr_chart.value.closes,
            mstr_chart.value.volumes,
            self.mstr_weights,
            correlated=btc,
        )
        logger.info(
            "VaultSignal: BTC %.1f (%s), MSTR %.1f (%s)",
            btc.score, btc.label, mstr.score, mstr.label,
        )

        return VaultSignalResponse(
            btc=to_asset_signal(btc),
            mstr=to_asset_signal(mstr),
            sources={"btc": btc_chart.source, "mstr": mstr_chart.source},
        )
