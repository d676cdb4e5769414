"""Black-Scholes Greeks and a modelled options chain.

The Greeks are closed-form European option sensitivities with no
dividends. Theta is per calendar day and vega per one point (1%) of
implied volatility. Volumes and open interest are modelled, not
observed: they peak at the money and draw their noise from a seeded
numpy generator, so one seed always produces the same chain.
"""

import math

import numpy as np
from pydantic import BaseModel, ConfigDict

RISK_FREE_RATE = 0.045
IMPLIED_VOLATILITY = 1.20
DAYS_TO_EXPIRATION = 30
STRIKE_STEP = 10.0
STRIKES_EACH_SIDE = 4

# Volume model: base + uniform noise, scaled down away from the money
CALL_VOLUME_BASE = 500
CALL_VOLUME_SPREAD = 1000
PUT_VOLUME_BASE = 300
PUT_VOLUME_SPREAD = 800
MIN_VOLUME_MULTIPLIER = 0.1
MONEYNESS_DECAY = 3.0
IV_JITTER = 0.1

# Call/put volume ratio bands for the dominant sentiment
STRONG_BULLISH_RATIO = 1.8
STRONG_BEARISH_RATIO = 0.7
VOLUME_SKEW = 1.3


def _check_inputs(spot: float, strike: float, years: float, sigma: float) -> None:
    if spot <= 0 or strike <= 0:
        raise ValueError(f"spot and strike must be positive, got {spot} and {strike}")
    if years <= 0 or sigma <= 0:
        raise ValueError(f"time and volatility must be positive, got {years} and {sigma}")


def normal_cdf(x: float) -> float:
    return 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))


def normal_pdf(x: float) -> float:
    return math.exp(-0.5 * x * x) / math.sqrt(2.0 * math.pi)


def d1(spot: float, strike: float, years: float, rate: float, sigma: float) -> float:
    _check_inputs(spot, strike, years, sigma)
    return (math.log(spot / strike) + (rate + 0.5 * sigma * sigma) * years) / (sigma * math.sqrt(years))


def d2(spot: float, strike: float, years: float, rate: float, sigma: float) -> float:
    return d1(spot, strike, years, rate, sigma) - sigma * math.sqrt(years)


def call_delta(spot: float, strike: float, years: float, rate: float, sigma: float) -> float:
    return normal_cdf(d1(spot, strike, years, rate, sigma))


def put_delta(spot: float, strike: float, years: float, rate: float, sigma: float) -> float:
    """Call delta minus one, always in [-1, 0]."""
    return call_delta(spot, strike, years, rate, sigma) - 1.0


def gamma(spot: float, strike: float, years: float, rate: float, sigma: float) -> float:
    """Same for calls and puts."""
    return normal_pdf(d1(spot, strike, years, rate, sigma)) / (spot * sigma * math.sqrt(years))


def theta(
    spot: float,
    strike: float,
    years: float,
    rate: float,
    sigma: float,
    is_call: bool = True,
) -> float:
    """Time decay per calendar day."""
    first = d1(spot, strike, years, rate, sigma)
    second = first - sigma * math.sqrt(years)
    decay = -(spot * normal_pdf(first) * sigma) / (2.0 * math.sqrt(years))
    discounted = rate * strike * math.exp(-rate * years)
    if is_call:
        carry = -discounted * normal_cdf(second)
    else:
        carry = discounted * normal_cdf(-second)
    return (decay + carry) / 365.0


def vega(spot: float, strike: float, years: float, rate: float, sigma: float) -> float:
    """Price change for a one point (1%) move in implied volatility."""
    return spot * math.sqrt(years) * normal_pdf(d1(spot, strike, years, rate, sigma)) / 100.0


class OptionContract(BaseModel):
    """One modelled contract in the chain."""

    model_config = ConfigDict(frozen=True)

    type: str  # "CALL" or "PUT"
    strike: float
    volume: int
    delta: float
    gamma: float
    theta: float
    vega: float
    implied_volatility: float
    open_interest: int


class GreeksSummary(BaseModel):
    """Volume-weighted deltas and call/put volume totals."""

    model_config = ConfigDict(frozen=True)

    avg_call_delta: float = 0.0
    avg_put_delta: float = 0.0
    total_call_volume: int = 0
    total_put_volume: int = 0
    call_put_ratio: float = 0.0
    dominant_sentiment: str = "NEUTRAL"


def strike_ladder(
    spot: float,
    step: float = STRIKE_STEP,
    each_side: int = STRIKES_EACH_SIDE,
) -> list[float]:
    """Strikes around ``spot`` rounded (half up) to the step; non-positive strikes dropped."""
    center = math.floor(spot / step + 0.5) * step
    strikes = [center + i * step for i in range(-each_side, each_side + 1)]
    return [strike for strike in strikes if strike > 0]


def volume_multiplier(spot: float, strike: float) -> float:
    """1.0 at the money, falling 3x the relative distance, floored at 0.1."""
    moneyness = abs(strike - spot) / spot
    return max(MIN_VOLUME_MULTIPLIER, 1.0 - moneyness * MONEYNESS_DECAY)


def dominant_sentiment(call_volume: float, put_volume: float) -> str:
    if put_volume <= 0:
        return "NEUTRAL"
    ratio = call_volume / put_volume
    if ratio > STRONG_BULLISH_RATIO:
        return "BULLISH"
    if ratio < STRONG_BEARISH_RATIO:
        return "BEARISH"
    if call_volume > put_volume * VOLUME_SKEW:
        return "BULLISH"
    if put_volume > call_volume * VOLUME_SKEW:
        return "BEARISH"
    return "NEUTRAL"


def build_options_chain(
    spot: float,
    seed: int,
    sigma: float = IMPLIED_VOLATILITY,
    rate: float = RISK_FREE_RATE,
    days: int = DAYS_TO_EXPIRATION,
) -> tuple[list[OptionContract], GreeksSummary]:
    """
    Model a single-expiry chain around the current price.

    Args:
        spot: Underlying price
        seed: Seed for the volume, open interest and IV noise
        sigma: Implied volatility used for every strike's Greeks
        rate: Annual risk-free rate
        days: Calendar days to expiration

    Returns:
        (contracts, summary); calls and puts alternate strike by strike
    """
    if spot <= 0:
        raise ValueError(f"spot must be positive, got {spot}")
    rng = np.random.default_rng(seed)
    years = days / 365.0

    chain: list[OptionContract] = []
    call_volume = put_volume = 0
    call_delta_sum = put_delta_sum = 0.0

    for strike in strike_ladder(spot):
        scale = volume_multiplier(spot, strike)
        calls = round(scale * (CALL_VOLUME_BASE + rng.uniform() * CALL_VOLUME_SPREAD))
        puts = round(scale * (PUT_VOLUME_BASE + rng.uniform() * PUT_VOLUME_SPREAD))

        c_delta = call_delta(spot, strike, years, rate, sigma)
        p_delta = c_delta - 1.0
        g = gamma(spot, strike, years, rate, sigma)
        v = vega(spot, strike, years, rate, sigma)

        for kind, volume, delta, is_call in (("CALL", calls, c_delta, True), ("PUT", puts, p_delta, False)):
            chain.append(OptionContract(
                type=kind,
                strike=strike,
                volume=volume,
                delta=round(delta, 2),
                gamma=round(g, 4),
                theta=round(theta(spot, strike, years, rate, sigma, is_call=is_call), 2),
                vega=round(v, 2),
                implied_volatility=sigma + (rng.uniform() - 0.5) * IV_JITTER,
                open_interest=round(volume * (2 + rng.uniform() * 3)),
            ))

        call_volume += calls
        put_volume += puts
        call_delta_sum += c_delta * calls
        put_delta_sum += p_delta * puts

    summary = GreeksSummary(
        avg_call_delta=round(call_delta_sum / call_volume, 2) if call_volume else 0.0,
        avg_put_delta=round(put_delta_sum / put_volume, 2) if put_volume else 0.0,
        total_call_volume=call_volume,
        total_put_volume=put_volume,
        call_put_ratio=round(call_volume / put_volume, 2) if put_volume else 0.0,
        dominant_sentiment=dominant_sentiment(call_volume, put_volume),
    )
    return chain, summary
