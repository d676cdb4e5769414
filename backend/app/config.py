"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BACKEND_DIR = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "VaultSignal"
    app_version: str = "2.14.09.15"

    # Redis (optional last-known-good cache for provider data)
    redis_url: str = "redis://localhost:6379/0"
    cache_enabled: bool = True
    cache_ttl_seconds: int = 3600

    # Market data providers
    yahoo_base_url: str = "https://query1.finance.yahoo.com"
    yahoo_summary_base_url: str = "https://query2.finance.yahoo.com"
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coinbase_base_url: str = "https://api.coinbase.com"
    fred_base_url: str = "https://api.stlouisfed.org"
    fred_api_key: str = ""  # liquidity history is unavailable without one
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    http_timeout: float = 10.0
    provider_timeout: float = 5.0  # per attempt in a fallback chain

    # Indicator parameters
    rsi_period: int = 14
    history_days: int = 30
    vault_signal_range: str = "5d"

    # Files
    data_dir: Path = BACKEND_DIR / "data"
    market_defaults_path: Path = BACKEND_DIR / "market_defaults.yaml"
    nav_snapshot_paths: list[Path] = [
        BACKEND_DIR.parent / "strategy-scraper" / "mstr_nav_live.json",
    ]
    liquidity_snapshot_paths: list[Path] = [
        BACKEND_DIR.parent / "global-liquidity-tracker" / "liquidity_data.json",
        BACKEND_DIR.parent.parent / "global-liquidity-tracker" / "liquidity_data.json",
    ]

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
