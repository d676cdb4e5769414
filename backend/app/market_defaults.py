"""Market fallback constants loaded from market_defaults.yaml.

Any key present in the YAML file overrides the built-in default; a
missing file means the built-in ``MarketDefaults`` are used as-is.
"""

import logging
from functools import lru_cache
from pathlib import Path

import yaml

from app.config import get_settings
from core.models.config import MarketDefaults

logger = logging.getLogger(__name__)


def load_market_defaults(path: Path | None = None) -> MarketDefaults:
    """Load fallback constants from YAML, falling back to built-ins."""
    config_path = path or get_settings().market_defaults_path

    if not config_path.exists():
        logger.info(
            "No market_defaults.yaml found at %s, using built-in defaults",
            config_path,
        )
        return MarketDefaults()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    defaults = MarketDefaults(**raw)
    logger.info(
        "Loaded market defaults: btc=%.0f mstr=%.2f holdings=%d",
        defaults.btc_price,
        defaults.mstr_price,
        len(defaults.government_holdings),
    )
    return defaults


@lru_cache
def get_market_defaults() -> MarketDefaults:
    """Get cached market defaults."""
    return load_market_defaults()
