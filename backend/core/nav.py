"""Net asset value arithmetic for a bitcoin treasury company.

NAV here is the market value of the company's bitcoin per share. Every
ratio returns 0.0 rather than dividing by zero so a missing share count
or price never breaks a response.
"""

from pydantic import BaseModel, ConfigDict


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


def btc_per_share(btc_holdings: float, shares: float) -> float:
    return _ratio(btc_holdings, shares)


def nav_per_share(btc_holdings: float, btc_price: float, shares: float) -> float:
    """Bitcoin holdings valued at ``btc_price``, per share."""
    return _ratio(btc_holdings * btc_price, shares)


def nav_premium_pct(price: float, nav: float) -> float:
    """Premium (positive) or discount (negative) of price over NAV, in percent."""
    return _ratio(price - nav, nav) * 100


def percent_change(start: float, end: float) -> float:
    return _ratio(end - start, start) * 100


def premium_from_multiple(multiple: float) -> float:
    """Premium implied by a price/NAV multiple (1.19x -> 19%)."""
    return (multiple - 1.0) * 100


class NavAnalysis(BaseModel):
    """Basic and fully diluted NAV figures derived from a NAV multiple."""

    model_config = ConfigDict(frozen=True)

    price: float
    nav_multiple: float
    basic_nav_per_share: float
    basic_premium_pct: float
    diluted_nav_per_share: float
    diluted_nav_multiple: float
    diluted_premium_pct: float


def analyze_nav(
    price: float,
    nav_multiple: float,
    basic_shares: float,
    diluted_shares: float,
) -> NavAnalysis:
    """
    Derive basic and diluted NAV from the published NAV multiple.

    The basic NAV per share is price / multiple. Spreading the same total
    NAV over the diluted share count gives the diluted NAV per share.

    Args:
        price: Share price
        nav_multiple: Published price/NAV multiple
        basic_shares: Basic shares outstanding
        diluted_shares: Fully diluted share count

    Returns:
        NavAnalysis
    """
    basic_nav = _ratio(price, nav_multiple)
    diluted_nav = _ratio(basic_nav * basic_shares, diluted_shares)
    diluted_multiple = _ratio(price, diluted_nav)
    return NavAnalysis(
        price=price,
        nav_multiple=nav_multiple,
        basic_nav_per_share=basic_nav,
        basic_premium_pct=premium_from_multiple(nav_multiple) if nav_multiple else 0.0,
        diluted_nav_per_share=diluted_nav,
        diluted_nav_multiple=diluted_multiple,
        diluted_premium_pct=premium_from_multiple(diluted_multiple) if diluted_multiple else 0.0,
    )
