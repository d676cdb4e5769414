"""Tests for the dashboard services over mocked providers."""

import asyncio
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import orjson
import pytest

from app.clients import FredClient
from app.models import (
    ChartSeries,
    MarketDefaults,
    Observation,
    ObservationSeries,
    ShareCounts,
    SpotPrice,
    VolumeBar,
    VolumeHistory,
)
from app.services import (
    InsufficientLiveData,
    LiquidityHistoryService,
    MarketDataGateway,
    OptionsFlowService,
    PreferredsService,
    TechnicalService,
    TreasuryService,
    VaultSignalService,
)
from app.services.vault_signal import to_asset_signal
from core.models import CompositeScore, GovernmentHolding

RSI_SCENARIO = [100, 102, 104, 103, 105, 107, 108, 110, 112, 111, 113, 115, 117, 116, 118]


def charts_by_symbol(series: dict[str, ChartSeries]):
    """side_effect for YahooFinanceClient.get_chart keyed by symbol."""

    def get_chart(symbol, range_="30d", interval="1d"):
        return series[symbol]

    return get_chart


def write_json(path, data):
    path.write_bytes(orjson.dumps(data))
    return path


class TestTechnicalService:
    @pytest.mark.asyncio
    async def test_mstr_live(self, gateway, clients):
        yahoo, _, _ = clients
        yahoo.get_chart.side_effect = charts_by_symbol({
            "MSTR": ChartSeries(
                symbol="MSTR",
                closes=[float(p) for p in RSI_SCENARIO],
                volumes=[1000.0] * len(RSI_SCENARIO),
                price=133.88,
                previous_close=123.0,
            ),
        })

        panel = await TechnicalService(gateway).mstr_indicators()

        assert panel.symbol == "MSTR"
        assert panel.source == "live_calculation"
        assert panel.current_price == 133.88
        assert panel.price_change_percent == pytest.approx(8.845, abs=1e-3)
        assert panel.technical_indicators.rsi.value == 87.5
        assert panel.technical_indicators.rsi.signal == "OVERBOUGHT"
        assert panel.technical_indicators.rsi.period == 14
        assert panel.technical_indicators.institutional_bias.signal == "NEUTRAL"

    @pytest.mark.asyncio
    async def test_mstr_volume_bias(self, gateway, clients):
        yahoo, _, _ = clients
        closes = [100.0] * 14 + [105.0]
        yahoo.get_chart.side_effect = charts_by_symbol({
            "MSTR": ChartSeries(
                symbol="MSTR",
                closes=closes,
                volumes=[100.0] * 14 + [1000.0],
                price=105.0,
                previous_close=100.0,
            ),
        })

        panel = await TechnicalService(gateway).mstr_indicators()

        bias = panel.technical_indicators.institutional_bias
        assert bias.signal == "BULLISH"
        assert bias.description == "High volume buying pressure"

    @pytest.mark.asyncio
    async def test_mstr_fetches_history_and_quote_together(self, gateway, clients):
        yahoo, _, _ = clients
        started = {"1d": asyncio.Event(), "1m": asyncio.Event()}
        chart = ChartSeries(
            symbol="MSTR",
            closes=[float(p) for p in RSI_SCENARIO],
            volumes=[1000.0] * len(RSI_SCENARIO),
            price=133.88,
            previous_close=123.0,
        )

        async def get_chart(symbol, range_="30d", interval="1d"):
            # Each request waits until the other one is in flight
            started[interval].set()
            other = "1m" if interval == "1d" else "1d"
            await started[other].wait()
            return chart

        yahoo.get_chart.side_effect = get_chart

        panel = await TechnicalService(gateway).mstr_indicators()

        assert panel.source == "live_calculation"
        assert panel.current_price == 133.88

    @pytest.mark.asyncio
    async def test_mstr_all_providers_down(self, gateway, defaults):
        panel = await TechnicalService(gateway).mstr_indicators()

        assert panel.source == "fallback"
        assert panel.current_price == defaults.mstr_price
        assert panel.technical_indicators.rsi.value == 50.0
        assert panel.technical_indicators.macd.value == 0.0
        assert panel.technical_indicators.macd.signal == "NEUTRAL"
        assert panel.market_sentiment == "NEUTRAL"

    @pytest.mark.asyncio
    async def test_btc_live(self, gateway, clients):
        _, coingecko, coinbase = clients
        coinbase.get_spot.side_effect = None
        coinbase.get_spot.return_value = SpotPrice(price=70000.0, change_24h=4.0)
        coingecko.get_market_chart.side_effect = None
        coingecko.get_market_chart.return_value = ChartSeries(
            symbol="bitcoin",
            closes=[1000.0 * i for i in range(1, 31)],
        )

        panel = await TechnicalService(gateway).btc_indicators()

        assert panel.symbol == "BTC"
        assert panel.current_price == 70000.0
        assert panel.source == "live_calculation"
        assert panel.technical_indicators.rsi.value == 100.0
        assert panel.technical_indicators.macd.signal == "BULLISH"
        assert panel.technical_indicators.institutional_bias.signal == "BULLISH"
        assert panel.market_sentiment == "STRONG_BULLISH"

    @pytest.mark.asyncio
    async def test_btc_short_history(self, gateway, defaults):
        panel = await TechnicalService(gateway).btc_indicators()

        assert panel.source == "fallback"
        assert panel.current_price == defaults.btc_price
        assert panel.technical_indicators.rsi.value == 50.0


class TestVaultSignalService:
    @pytest.mark.asyncio
    async def test_mstr_blends_btc(self, gateway, clients):
        yahoo, _, _ = clients
        yahoo.get_chart.side_effect = charts_by_symbol({
            "BTC-USD": ChartSeries(
                symbol="BTC-USD",
                closes=[100.0, 100.5, 101.0, 101.0, 102.0],
                volumes=[1.0] * 5,
            ),
            "MSTR": ChartSeries(symbol="MSTR", closes=[50.0] * 5, volumes=[1.0] * 5),
        })

        result = await VaultSignalService(gateway).compute()

        assert result.btc.score == 25  # 24.95
        assert result.btc.signal == "BUY"
        assert result.mstr.score == 7  # 7.485
        assert result.mstr.signal == "NEUTRAL"
        assert result.mstr.price == 50.0
        assert result.sources == {"btc": "yahoo_finance", "mstr": "yahoo_finance"}
        assert result.version == "v0.1-beta"

    def test_half_point_scores_round_up(self):
        assert to_asset_signal(CompositeScore(score=12.5)).score == 13
        assert to_asset_signal(CompositeScore(score=-12.5)).score == -12

    @pytest.mark.asyncio
    async def test_requests_daily_range(self, gateway, clients):
        yahoo, _, _ = clients

        await VaultSignalService(gateway, range_="5d").compute()

        requested = {call.args for call in yahoo.get_chart.await_args_list}
        assert requested == {("BTC-USD", "5d", "1d"), ("MSTR", "5d", "1d")}

    @pytest.mark.asyncio
    async def test_all_down_is_neutral(self, gateway):
        result = await VaultSignalService(gateway).compute()

        for signal in (result.btc, result.mstr):
            assert signal.score == 0
            assert signal.signal == "NEUTRAL"
            assert signal.volume_trend == 1.0
        assert result.sources == {"btc": "fallback", "mstr": "fallback"}


class TestTreasuryService:
    @pytest.fixture
    def treasury(self, gateway, defaults, tmp_path):
        return TreasuryService(
            gateway,
            defaults,
            nav_snapshot_paths=[tmp_path / "mstr_nav_live.json"],
            liquidity_snapshot_paths=[tmp_path / "missing.json", tmp_path / "liquidity_data.json"],
        )

    @pytest.mark.asyncio
    async def test_btc_quote_fallback(self, treasury, defaults):
        quote = await treasury.btc_quote()

        assert quote.source == "fallback"
        assert quote.price_usd == defaults.btc_price
        assert quote.change_24h == defaults.btc_change_24h
        assert quote.market_cap == pytest.approx(defaults.btc_price * defaults.btc_circulating_supply)

    @pytest.mark.asyncio
    async def test_btc_quote_without_change(self, treasury, clients, defaults):
        _, _, coinbase = clients
        coinbase.get_spot.side_effect = None
        coinbase.get_spot.return_value = SpotPrice(price=80000.0)

        quote = await treasury.btc_quote()

        assert quote.source == "coinbase"
        assert quote.price_usd == 80000.0
        assert quote.change_24h == defaults.btc_change_24h

    @pytest.mark.asyncio
    async def test_mstr_quote_fallback(self, treasury, defaults):
        quote = await treasury.mstr_quote()

        shares = defaults.mstr_shares_outstanding
        nav = defaults.mstr_btc_holdings * defaults.btc_price / shares
        assert quote.source == "fallback"
        assert quote.price == defaults.mstr_price
        assert quote.change == pytest.approx(defaults.mstr_price - defaults.mstr_previous_close)
        assert quote.market_cap == pytest.approx(defaults.mstr_price * shares)
        assert quote.btc_per_share == pytest.approx(defaults.mstr_btc_holdings / shares)
        assert quote.nav_per_share == pytest.approx(nav)
        assert quote.nav_premium == pytest.approx((defaults.mstr_price - nav) / nav * 100)

    @pytest.mark.asyncio
    async def test_nav_without_snapshot(self, treasury):
        nav = await treasury.nav()

        assert nav.nav_multiple == 1.19
        assert nav.nav_multiple_formatted == "1.19x"
        assert nav.source == "confirmed_value"
        assert nav.method == "fallback_confirmed"

    @pytest.mark.asyncio
    async def test_nav_from_snapshot(self, treasury, tmp_path):
        write_json(
            tmp_path / "mstr_nav_live.json",
            {"nav": 1.42, "timestamp": "2025-01-01T00:00:00Z", "method": "playwright"},
        )

        nav = await treasury.nav()

        assert nav.nav_multiple == 1.42
        assert nav.nav_multiple_formatted == "1.42x"
        assert nav.source == "strategy_com_live"
        assert nav.method == "playwright"
        assert nav.data_age_seconds > 0

    @pytest.mark.asyncio
    async def test_nav_snapshot_without_value(self, treasury, tmp_path):
        write_json(tmp_path / "mstr_nav_live.json", {"nav": None})
        nav = await treasury.nav()
        assert nav.source == "confirmed_value"

    @pytest.mark.asyncio
    async def test_diluted_shares_estimate(self, treasury, defaults):
        shares = await treasury.diluted_shares()

        assert shares.source == "fallback_estimate"
        assert shares.basic_shares == defaults.basic_shares
        assert shares.diluted_shares == defaults.basic_shares + 105_000_000
        assert shares.conversion_data.convertible_notes == 85_000_000
        assert shares.dilution_factor == round(shares.diluted_shares / defaults.basic_shares, 3)

    @pytest.mark.asyncio
    async def test_diluted_shares_from_provider(self, treasury, clients):
        yahoo, _, _ = clients
        yahoo.get_share_counts.side_effect = None
        yahoo.get_share_counts.return_value = ShareCounts(basic_shares=300.0, diluted_shares=450.0)

        shares = await treasury.diluted_shares()

        assert shares.source == "yahoo_finance_api"
        assert shares.diluted_shares == 450.0
        assert shares.dilution_factor == 1.5
        assert shares.conversion_data is None

    @pytest.mark.asyncio
    async def test_diluted_shares_calculated(self, treasury, clients):
        yahoo, _, _ = clients
        yahoo.get_share_counts.side_effect = None
        yahoo.get_share_counts.return_value = ShareCounts(basic_shares=300_000_000.0)

        shares = await treasury.diluted_shares()

        assert shares.source == "calculated_with_convertibles"
        assert shares.diluted_shares == 405_000_000.0

    @pytest.mark.asyncio
    async def test_nav_analysis_fallback(self, treasury, defaults):
        analysis = await treasury.nav_analysis()

        assert analysis.price == defaults.mstr_price
        assert analysis.basic_nav_per_share == pytest.approx(defaults.mstr_price / 1.19)
        assert analysis.basic_premium_pct == pytest.approx(19.0)
        assert analysis.diluted_nav_per_share < analysis.basic_nav_per_share
        assert analysis.diluted_premium_pct > analysis.basic_premium_pct
        assert analysis.sources == {
            "nav": "confirmed_value",
            "price": "fallback",
            "shares": "fallback_estimate",
        }

    @pytest.mark.asyncio
    async def test_government_holdings(self, gateway):
        defaults = MarketDefaults(
            btc_price=50_000,
            btc_max_supply=21_000_000,
            government_holdings=[
                GovernmentHolding(country="A", btc=210_000, type="Strategic Reserve", strategic=True),
                GovernmentHolding(country="B", btc=21_000, type="Seized Assets"),
            ],
        )
        gateway.defaults = defaults
        result = await TreasuryService(gateway, defaults).government_holdings()

        assert result.btc_price == 50_000
        assert result.price_source == "fallback"
        assert result.total_btc == 231_000
        assert result.strategic_reserve_btc == 210_000
        assert result.total_value_usd == pytest.approx(231_000 * 50_000)
        assert result.pct_total_supply == pytest.approx(1.1)
        assert result.holdings[0].pct_supply == pytest.approx(1.0)
        assert result.holdings[1].value_usd == pytest.approx(21_000 * 50_000)

    @pytest.mark.asyncio
    async def test_liquidity_fallback(self, treasury, defaults):
        result = await treasury.liquidity()

        assert result.source == "fallback_current"
        assert result.composite_score == defaults.liquidity.composite_score
        assert result.liquidity_state == "MILDLY_EXPANSIONARY"

    @pytest.mark.asyncio
    async def test_liquidity_from_second_snapshot_path(self, treasury, tmp_path):
        write_json(
            tmp_path / "liquidity_data.json",
            {
                "composite_score": 61.0,
                "btc_correlation": 0.4,
                "btc_price": 71000,
                "liquidity_state": "EXPANSIONARY",
                "components": {"us_m2": 22.5},
                "timestamp": "2025-01-01T00:00:00",
            },
        )

        result = await treasury.liquidity()

        assert result.source == "global_liquidity_tracker_live"
        assert result.composite_score == 61.0
        assert result.components == {"us_m2": 22.5}

    @pytest.mark.asyncio
    async def test_liquidity_incomplete_snapshot(self, treasury, tmp_path):
        write_json(tmp_path / "liquidity_data.json", {"composite_score": 61.0})
        result = await treasury.liquidity()
        assert result.source == "fallback_current"

    def test_btc_per_share_history_all(self, treasury, defaults):
        history = treasury.btc_per_share_history()

        first, last = history.data[0], history.data[-1]
        assert history.data_points == len(defaults.treasury_history)
        assert first.date == date(2020, 8, 11)
        assert last.label == "Feb 25"
        assert history.stats.current_btc_per_share == pytest.approx(714644 / 332237825)
        assert history.stats.total_btc == 714644
        assert history.stats.growth_percent == pytest.approx(
            (last.btc_per_share / first.btc_per_share - 1) * 100
        )

    def test_btc_per_share_history_window_ends_at_latest_purchase(self, treasury):
        history = treasury.btc_per_share_history("1y")

        assert history.period == "1y"
        assert history.data[0].date == date(2024, 2, 15)
        assert history.data[-1].date == date(2025, 2, 14)
        assert history.stats.period_start_btc_per_share == pytest.approx(190000 / 199000000)

    def test_btc_per_share_history_unknown_period_is_everything(self, treasury):
        assert treasury.btc_per_share_history("10y").data == treasury.btc_per_share_history("all").data

    def test_btc_per_share_history_empty_table(self, gateway):
        history = TreasuryService(gateway, MarketDefaults(treasury_history=[])).btc_per_share_history()

        assert history.data == []
        assert history.stats.growth_percent == 0.0


def yahoo_symbols(series: dict[str, ChartSeries]):
    """side_effect for get_chart: listed symbols answer, the rest are down."""

    def get_chart(symbol, range_="30d", interval="1d"):
        if symbol not in series:
            raise httpx.ConnectError(f"{symbol} unavailable")
        return series[symbol]

    return get_chart


class TestOptionsFlowService:
    @pytest.mark.asyncio
    async def test_fallback_price(self, gateway, defaults):
        flow = await OptionsFlowService(gateway, defaults).flow(today=date(2026, 10, 19))

        assert flow.current_price == defaults.mstr_price
        assert flow.price_source == "fallback"
        assert flow.source == "black_scholes_calculated"
        assert len(flow.options_chain) == 18
        assert flow.market_data.expiration_date == date(2026, 11, 18)
        assert flow.market_data.time_to_expiration == pytest.approx(30 / 365)
        assert flow.market_data.implied_volatility == defaults.options_implied_volatility

    @pytest.mark.asyncio
    async def test_chain_stable_within_a_day(self, gateway, defaults):
        service = OptionsFlowService(gateway, defaults)

        first = await service.flow(today=date(2026, 10, 19))
        again = await service.flow(today=date(2026, 10, 19))
        next_day = await service.flow(today=date(2026, 10, 20))

        assert first.options_chain == again.options_chain
        assert [c.volume for c in first.options_chain] != [c.volume for c in next_day.options_chain]

    @pytest.mark.asyncio
    async def test_live_price_centers_strikes(self, gateway, clients, defaults):
        yahoo, _, _ = clients
        yahoo.get_chart.side_effect = yahoo_symbols(
            {"MSTR": ChartSeries(symbol="MSTR", closes=[150.0], price=152.0, previous_close=150.0)}
        )

        flow = await OptionsFlowService(gateway, defaults).flow(seed=1)

        strikes = sorted({c.strike for c in flow.options_chain})
        assert flow.price_source == "yahoo_finance"
        assert strikes[4] == 150
        assert strikes[0] == 110


class TestPreferredsService:
    @pytest.mark.asyncio
    async def test_two_live_symbols(self, gateway, clients, defaults):
        yahoo, _, _ = clients
        yahoo.get_chart.side_effect = yahoo_symbols({
            "STRC": ChartSeries(
                symbol="STRC", closes=[99.0], price=100.0, previous_close=98.0,
                volume=1000.0, market_state="REGULAR",
            ),
            "STRF": ChartSeries(symbol="STRF", closes=[90.0], price=90.0),
        })

        result = await PreferredsService(gateway, defaults).quotes()

        strc, strf = result.preferreds["STRC"], result.preferreds["STRF"]
        assert strc.change == 2.0
        assert strc.change_percent == pytest.approx(2.0408, abs=1e-4)
        assert strc.dividend_yield == 11.25
        assert strc.market_state == "REGULAR"
        assert strf.change == 0.0
        assert strf.volume == 0.0
        assert strf.market_state == "unknown"
        assert result.preferreds["STRD"] is None
        assert result.live_symbols == ["STRC", "STRF"]
        assert result.failed_symbols == ["STRD", "STRK"]
        assert result.summary.total_symbols == 2
        assert result.summary.symbols_requested == 4
        assert result.summary.total_volume == 1000.0
        assert result.summary.average_dividend_yield == pytest.approx((11.25 + 10.80) / 2)

    @pytest.mark.asyncio
    async def test_one_live_symbol_is_not_enough(self, gateway, clients, defaults):
        yahoo, _, _ = clients
        yahoo.get_chart.side_effect = yahoo_symbols(
            {"STRK": ChartSeries(symbol="STRK", closes=[80.0], price=80.0)}
        )

        with pytest.raises(InsufficientLiveData) as exc_info:
            await PreferredsService(gateway, defaults).quotes()

        assert exc_info.value.fetched == 1
        assert exc_info.value.required == 2

    @pytest.mark.asyncio
    async def test_unknown_symbol_uses_default_yield(self, gateway, clients, defaults):
        yahoo, _, _ = clients
        yahoo.get_chart.side_effect = yahoo_symbols({
            "STRC": ChartSeries(symbol="STRC", closes=[1.0], price=100.0),
            "STRX": ChartSeries(symbol="STRX", closes=[1.0], price=50.0),
        })

        result = await PreferredsService(gateway, defaults, symbols=("STRC", "STRX")).quotes()

        assert result.preferreds["STRX"].dividend_yield == defaults.preferred_default_yield

    @pytest.mark.asyncio
    async def test_volume_history(self, gateway, clients, defaults):
        yahoo, _, _ = clients
        yahoo.get_volume_history.side_effect = None
        yahoo.get_volume_history.return_value = VolumeHistory(
            symbol="STRC",
            bars=[
                VolumeBar(timestamp=datetime(2025, 3, 4, 14, 30, tzinfo=timezone.utc), volume=1500, close=101.2571),
                VolumeBar(timestamp=datetime(2025, 3, 5, 14, 30, tzinfo=timezone.utc), volume=900),
            ],
        )

        result = await PreferredsService(gateway, defaults).volume_history("STRC", "3mo")

        assert result.success
        assert result.error is None
        assert result.data_source == "yahoo_finance"
        assert result.data_points == 2
        assert [p.date for p in result.volume_history] == ["Mar 4", "Mar 5"]
        assert [p.price for p in result.volume_history] == [101.26, None]
        yahoo.get_volume_history.assert_awaited_once_with("STRC", "3mo", "1d")

    @pytest.mark.asyncio
    async def test_volume_history_unknown_period(self, gateway, clients, defaults):
        yahoo, _, _ = clients

        result = await PreferredsService(gateway, defaults).volume_history("STRF", "10y")

        assert result.period == "10y"
        yahoo.get_volume_history.assert_awaited_once_with("STRF", "1mo", "1d")

    @pytest.mark.asyncio
    async def test_volume_history_unavailable(self, gateway, defaults):
        result = await PreferredsService(gateway, defaults).volume_history("STRD")

        assert not result.success
        assert result.error == "Failed to fetch volume history"
        assert result.volume_history == []
        assert result.data_source == "fallback"


class TestLiquidityHistoryService:
    @pytest.mark.asyncio
    async def test_scores_with_btc_prices(self, defaults, clients):
        yahoo, coingecko, coinbase = clients
        d1, d2 = date(2024, 1, 3), date(2024, 1, 10)
        values = {
            "WM2NS": {d1: 21500.0},
            "WALCL": {d1: 7_000_000.0, d2: 7_100_000.0},
            "RRPONTSYD": {d1: 400.0},
            "WTREGEN": {d1: 800_000.0},
            "BAMLH0A0HYM2": {d1: 4.0, d2: 2.5},
        }

        def observations(series_id, start):
            return ObservationSeries(
                series_id=series_id,
                observations=[Observation(date=d, value=v) for d, v in values[series_id].items()],
            )

        fred = MagicMock(spec=FredClient)
        fred.get_observations = AsyncMock(side_effect=observations)
        coingecko.get_market_chart.side_effect = None
        coingecko.get_market_chart.return_value = ChartSeries(
            symbol="bitcoin",
            closes=[42000.0, 46000.0],
            timestamps=[
                datetime(2024, 1, 3, tzinfo=timezone.utc),
                datetime(2024, 1, 10, tzinfo=timezone.utc),
            ],
        )
        gateway = MarketDataGateway(defaults, yahoo, coingecko, coinbase, fred=fred, use_cache=False)

        result = await LiquidityHistoryService(gateway).history("1Y", today=date(2024, 1, 20))

        assert result.count == 2
        assert [p.composite_score for p in result.history] == [70, 75]
        assert [p.btc_price for p in result.history] == [42000, 46000]
        assert result.sources == {
            "WM2NS": "fred",
            "WALCL": "fred",
            "RRPONTSYD": "fred",
            "WTREGEN": "fred",
            "BAMLH0A0HYM2": "fred",
            "btc": "coingecko",
        }
        coingecko.get_market_chart.assert_awaited_once_with("bitcoin", 365)
        fred.get_observations.assert_any_await("WALCL", date(2023, 1, 20))

    @pytest.mark.asyncio
    async def test_without_fred_is_empty(self, gateway):
        result = await LiquidityHistoryService(gateway).history("MAX", today=date(2024, 1, 20))

        assert result.count == 0
        assert result.history == []
        assert set(result.sources.values()) == {"fallback"}
