"""Historical liquidity composite score from FRED series.

Each date on the merged timeline carries the last known value of every
series (forward fill). Net liquidity is the Fed balance sheet minus the
reverse repo facility and the Treasury General Account, in billions.
"""

import datetime
import math
from typing import Mapping

from pydantic import BaseModel, ConfigDict

# FRED series id -> (name, divisor to billions of dollars)
LIQUIDITY_SERIES: dict[str, tuple[str, float]] = {
    "WM2NS": ("us_m2", 1.0),
    "WALCL": ("fed_balance_sheet", 1000.0),
    "RRPONTSYD": ("reverse_repo", 1.0),
    "WTREGEN": ("tga", 1000.0),
    "BAMLH0A0HYM2": ("credit_spread", 1.0),  # percent, not dollars
}

BASELINE_SCORE = 50.0
MAX_POINTS = 200


class LiquidityPoint(BaseModel):
    """Composite score and its inputs on one date (dollar figures in billions)."""

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    composite_score: float
    btc_price: float
    us_m2: float
    fed_balance_sheet: float
    reverse_repo: float
    tga: float
    credit_spread: float
    net_liquidity: float


def liquidity_score(
    m2: float,
    reverse_repo: float,
    tga: float,
    credit_spread: float,
    net_liquidity: float,
) -> float:
    """
    Score 0-100 around a baseline of 50; higher is more expansionary.

    Args:
        m2: US M2 money stock (billions)
        reverse_repo: Overnight reverse repo usage (billions)
        tga: Treasury General Account (billions)
        credit_spread: High yield option-adjusted spread (percent)
        net_liquidity: Fed balance sheet - RRP - TGA (billions)
    """
    score = BASELINE_SCORE

    if m2 > 21000:
        score += 5
    if m2 > 22000:
        score += 5

    # A drained reverse repo releases liquidity
    if reverse_repo < 500:
        score += 10
    elif reverse_repo < 1000:
        score += 5
    elif reverse_repo > 2000:
        score -= 10

    if credit_spread < 3:
        score += 5
    elif credit_spread > 8:
        score -= 20
    elif credit_spread > 5:
        score -= 10

    if tga > 800:
        score -= 5
    if tga > 1000:
        score -= 5

    if net_liquidity > 5000:
        score += 5
    if net_liquidity > 6000:
        score += 5

    return max(0.0, min(100.0, score))


def _price_on_or_before(prices: list[tuple[datetime.date, float]], day: datetime.date) -> float:
    price = 0.0
    for price_day, value in prices:
        if price_day > day:
            break
        price = value
    return price


def downsample(points: list, limit: int = MAX_POINTS) -> list:
    """Keep every n-th point (and always the last) so at most ~``limit`` remain."""
    if len(points) <= limit:
        return list(points)
    step = math.ceil(len(points) / limit)
    return [p for i, p in enumerate(points) if i % step == 0 or i == len(points) - 1]


def liquidity_history(
    series: Mapping[str, Mapping[datetime.date, float]],
    btc_prices: Mapping[datetime.date, float],
) -> list[LiquidityPoint]:
    """
    Build the score timeline.

    Args:
        series: FRED series id -> {date: raw value}
        btc_prices: Daily BTC close by date

    Returns:
        One point per observation date, oldest first. Dates where neither
        M2 nor the Fed balance sheet has a value yet are skipped.
    """
    names = {series_id: LIQUIDITY_SERIES[series_id] for series_id in series if series_id in LIQUIDITY_SERIES}
    timeline = sorted({day for series_id in names for day in series[series_id]})
    prices = sorted(btc_prices.items())

    last: dict[str, float] = {}
    points: list[LiquidityPoint] = []
    for day in timeline:
        for series_id, (name, divisor) in names.items():
            value = series[series_id].get(day)
            if value is not None:
                last[name] = value / divisor

        m2 = last.get("us_m2", 0.0)
        fed = last.get("fed_balance_sheet", 0.0)
        if not m2 and not fed:
            continue
        rrp = last.get("reverse_repo", 0.0)
        tga = last.get("tga", 0.0)
        spread = last.get("credit_spread", 0.0)
        net = fed - rrp - tga

        points.append(LiquidityPoint(
            date=day,
            composite_score=round(liquidity_score(m2, rrp, tga, spread, net), 1),
            btc_price=round(_price_on_or_before(prices, day)),
            us_m2=m2,
            fed_balance_sheet=round(fed, 2),
            reverse_repo=round(rrp, 2),
            tga=round(tga, 2),
            credit_spread=round(spread, 2),
            net_liquidity=round(net, 2),
        ))
    return points
