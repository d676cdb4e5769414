"""Fallback market constants.

These are the values served when every provider in a fallback chain has
failed. They are plain data so callers and tests can swap in their own
``MarketDefaults``.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, Field


class GovernmentHolding(BaseModel):
    """Known sovereign bitcoin position."""

    country: str
    flag: str = ""
    btc: float
    type: str
    acquisition: str = ""
    notes: str = ""
    strategic: bool = False


# =============================================================================
# Sovereign holdings (bitcointreasuries.net + public reports)
# =============================================================================
GOVERNMENT_HOLDINGS: list[GovernmentHolding] = [
    GovernmentHolding(
        country="United States", flag="🇺🇸", btc=328372, type="Strategic Reserve",
        acquisition="Law enforcement seizures; Strategic Bitcoin Reserve (Executive Order, March 2025)",
        notes="Largest known sovereign holder. Established Strategic Bitcoin Reserve + Digital Asset Stockpile.",
        strategic=True,
    ),
    GovernmentHolding(
        country="China", flag="🇨🇳", btc=190000, type="Seized Assets",
        acquisition="Large-scale criminal seizures (PlusToken, other fraud cases)",
        notes="Not a strategic reserve. Crypto trading banned since 2021. Holdings in state custody.",
    ),
    GovernmentHolding(
        country="United Kingdom", flag="🇬🇧", btc=61245, type="Seized Assets",
        acquisition="Criminal asset seizures (major financial crime cases)",
        notes="Treasury-held assets. No reserve policy. Some portions may be liquidated.",
    ),
    GovernmentHolding(
        country="Ukraine", flag="🇺🇦", btc=46351, type="Mixed Holdings",
        acquisition="International donations + official disclosures by public officials",
        notes="Assets distributed across multiple agencies. Not a unified reserve.",
    ),
    GovernmentHolding(
        country="El Salvador", flag="🇸🇻", btc=7562, type="National Reserve",
        acquisition="Direct government purchases since 2021",
        notes="First country to adopt Bitcoin as legal tender and hold as sovereign reserve.",
        strategic=True,
    ),
    GovernmentHolding(
        country="United Arab Emirates", flag="🇦🇪", btc=6420, type="Sovereign Holdings",
        acquisition="Investment fund allocations",
        notes="Holdings through sovereign wealth / government investment entities.",
    ),
    GovernmentHolding(
        country="Bhutan", flag="🇧🇹", btc=5600, type="State Mining",
        acquisition="Hydropower-backed Bitcoin mining operations",
        notes="Generated through state-linked mining using cheap hydroelectric power.",
    ),
    GovernmentHolding(
        country="North Korea", flag="🇰🇵", btc=803, type="Illicit Holdings",
        acquisition="Cyberattacks and theft (Lazarus Group)",
        notes="Stolen via state-sponsored hacking. Not legitimate reserves.",
    ),
    GovernmentHolding(
        country="Venezuela", flag="🇻🇪", btc=240, type="Government Holdings",
        acquisition="State mining and Petro-related activities",
        notes="Small holdings. Previously launched Petro cryptocurrency (failed).",
    ),
    GovernmentHolding(
        country="Finland", flag="🇫🇮", btc=90, type="Seized Assets",
        acquisition="Criminal seizures",
        notes="Remaining after partial liquidation. Previously held ~1,981 BTC.",
    ),
    GovernmentHolding(
        country="Germany", flag="🇩🇪", btc=0, type="Liquidated",
        acquisition="Seized from Movie2k piracy case (~50,000 BTC)",
        notes="Sold entire ~50K BTC stash in July 2024. Widely criticized.",
    ),
]


class TreasuryMilestone(BaseModel):
    """Cumulative BTC holdings and share count after a disclosed purchase."""

    date: datetime.date
    btc_holdings: float
    shares_outstanding: float


def _milestones(rows: list[tuple[str, float, float]]) -> list[TreasuryMilestone]:
    return [
        TreasuryMilestone(date=day, btc_holdings=btc, shares_outstanding=shares)
        for day, btc, shares in rows
    ]


# =============================================================================
# MSTR purchase history (SEC filings + strategy.com), oldest first
# =============================================================================
TREASURY_HISTORY: list[TreasuryMilestone] = _milestones([
    ("2020-08-11", 21454, 165240000),
    ("2020-09-14", 38250, 165240000),
    ("2020-12-04", 40824, 165240000),
    ("2020-12-21", 70470, 165240000),
    ("2021-01-22", 70784, 165240000),
    ("2021-02-02", 71079, 165240000),
    ("2021-02-24", 90531, 177000000),
    ("2021-03-05", 91064, 177000000),
    ("2021-03-12", 91326, 177000000),
    ("2021-04-05", 91579, 177000000),
    ("2021-05-13", 92079, 177000000),
    ("2021-05-18", 92079, 177000000),
    ("2021-06-21", 105085, 195000000),
    ("2021-08-24", 108992, 195000000),
    ("2021-09-13", 114042, 195000000),
    ("2021-11-01", 114042, 195000000),
    ("2021-11-29", 121044, 197000000),
    ("2021-12-09", 122478, 197000000),
    ("2021-12-30", 124391, 197000000),
    ("2022-01-31", 125051, 197000000),
    ("2022-04-05", 129218, 197000000),
    ("2022-06-28", 129699, 197000000),
    ("2022-09-20", 130000, 197000000),
    ("2022-11-01", 130000, 197000000),
    ("2022-12-22", 132500, 197000000),
    ("2022-12-31", 132500, 197000000),
    ("2023-03-27", 138955, 197000000),
    ("2023-06-28", 152800, 199000000),
    ("2023-07-06", 152800, 199000000),
    ("2023-08-01", 152800, 199000000),
    ("2023-09-24", 158245, 199000000),
    ("2023-11-30", 174530, 199000000),
    ("2023-12-27", 189150, 199000000),
    ("2024-01-02", 189150, 199000000),
    ("2024-02-15", 190000, 199000000),
    ("2024-02-26", 193000, 213000000),
    ("2024-03-11", 205000, 213000000),
    ("2024-03-19", 214246, 213000000),
    ("2024-04-01", 214246, 213000000),
    ("2024-06-20", 226331, 218000000),
    ("2024-08-01", 226500, 218000000),
    ("2024-09-13", 244800, 232000000),
    ("2024-09-20", 252220, 232000000),
    ("2024-10-31", 252220, 244000000),
    ("2024-11-11", 279420, 260000000),
    ("2024-11-18", 331200, 280000000),
    ("2024-11-25", 386700, 296000000),
    ("2024-12-02", 402100, 305000000),
    ("2024-12-09", 423650, 310000000),
    ("2024-12-16", 439000, 315000000),
    ("2024-12-23", 444262, 318000000),
    ("2024-12-30", 446400, 320000000),
    ("2025-01-06", 450000, 322000000),
    ("2025-01-13", 461000, 325000000),
    ("2025-01-21", 471107, 327000000),
    ("2025-01-27", 471107, 328000000),
    ("2025-02-03", 478740, 330000000),
    ("2025-02-10", 499096, 332000000),
    ("2025-02-14", 714644, 332237825),
])

# Indicative dividend yields (%), updated quarterly
PREFERRED_DIVIDEND_YIELDS: dict[str, float] = {
    "STRC": 11.25,
    "STRF": 10.80,
    "STRD": 12.10,
    "STRK": 11.95,
}


class DilutionComponents(BaseModel):
    """Share counts added on top of basic shares in the dilution estimate."""

    convertible_notes: float = 85_000_000
    employee_options: float = 15_000_000
    warrants: float = 5_000_000

    @property
    def total(self) -> float:
        return self.convertible_notes + self.employee_options + self.warrants


class LiquiditySnapshot(BaseModel):
    """Last known global liquidity reading."""

    composite_score: float = 58.1
    btc_correlation: float = 0.285
    btc_price: float = 69386
    liquidity_state: str = "MILDLY_EXPANSIONARY"
    components: dict[str, float] = {
        "us_m2": 22.41,
        "fed_balance_sheet": 6.62,
        "net_fed_liquidity": 5707,
        "reverse_repo": 0.4,
        "tga": 915,
        "credit_spread": 2.92,
        "dxy": 96.88,
        "ecb_assets": 6.26,
        "boj_assets": 6.83,
    }
    analysis: str = (
        "Liquidity mildly expansionary, supportive for risk assets. "
        "RRP nearly fully drained (bullish). DXY weakening below 97 helps. "
        "Credit spreads tight at 2.92% = no stress."
    )


class MarketDefaults(BaseModel):
    """Terminal fallback values for every live endpoint."""

    # Bitcoin
    btc_price: float = 69851
    btc_change_24h: float = 2.5
    btc_volume_24h: float = 28_000_000_000
    btc_circulating_supply: float = 19_800_000
    btc_max_supply: float = 21_000_000

    # MSTR quote
    mstr_price: float = 133.88
    mstr_previous_close: float = 123.00
    mstr_volume: float = 23_739_692
    mstr_shares_outstanding: float = 332_300_000

    # MSTR treasury
    mstr_btc_holdings: float = 714_644
    mstr_btc_cost_basis: float = 75_543
    mstr_total_investment: float = 54_000_000_000

    # Share dilution
    basic_shares: float = 332_237_825
    dilution: DilutionComponents = Field(default_factory=DilutionComponents)

    # NAV multiple published by the company (price / NAV)
    nav_multiple: float = 1.19

    # Options model inputs
    options_implied_volatility: float = 1.20
    risk_free_rate: float = 0.045

    # Preferred shares (STRC, STRF, STRD, STRK)
    preferred_dividend_yields: dict[str, float] = Field(
        default_factory=lambda: dict(PREFERRED_DIVIDEND_YIELDS)
    )
    preferred_default_yield: float = 11.0

    liquidity: LiquiditySnapshot = Field(default_factory=LiquiditySnapshot)
    government_holdings: list[GovernmentHolding] = Field(
        default_factory=lambda: list(GOVERNMENT_HOLDINGS)
    )
    treasury_history: list[TreasuryMilestone] = Field(
        default_factory=lambda: list(TREASURY_HISTORY)
    )
