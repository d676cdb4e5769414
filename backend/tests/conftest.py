"""Shared fixtures: a market data gateway over mocked provider clients."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.clients import CoinbaseClient, CoinGeckoClient, ProviderError, YahooFinanceClient
from app.models import MarketDefaults
from app.services import MarketDataGateway


def down(*args, **kwargs):
    raise httpx.ConnectError("provider down")


def make_clients():
    """Provider clients whose methods are AsyncMocks that fail by default."""
    yahoo = MagicMock(spec=YahooFinanceClient)
    coingecko = MagicMock(spec=CoinGeckoClient)
    coinbase = MagicMock(spec=CoinbaseClient)
    for client in (yahoo, coingecko, coinbase):
        client.close = AsyncMock()
    yahoo.get_chart = AsyncMock(side_effect=down)
    yahoo.get_volume_history = AsyncMock(side_effect=down)
    yahoo.get_share_counts = AsyncMock(side_effect=ProviderError("no share count"))
    coingecko.get_spot = AsyncMock(side_effect=down)
    coingecko.get_market_chart = AsyncMock(side_effect=down)
    coinbase.get_spot = AsyncMock(side_effect=down)
    return yahoo, coingecko, coinbase


@pytest.fixture
def defaults():
    return MarketDefaults()


@pytest.fixture
def clients():
    return make_clients()


@pytest.fixture
def gateway(defaults, clients):
    yahoo, coingecko, coinbase = clients
    return MarketDataGateway(
        defaults,
        yahoo=yahoo,
        coingecko=coingecko,
        coinbase=coinbase,
        timeout=1.0,
        use_cache=False,
    )
