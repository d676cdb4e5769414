"""Market data provider clients."""

from app.clients.base import ProviderClient, ProviderError, RateLimiter
from app.clients.coinbase import CoinbaseClient
from app.clients.coingecko import CoinGeckoClient
from app.clients.fred import FredClient
from app.clients.yahoo import YahooFinanceClient

__all__ = [
    "ProviderClient",
    "ProviderError",
    "RateLimiter",
    "CoinbaseClient",
    "CoinGeckoClient",
    "FredClient",
    "YahooFinanceClient",
]
