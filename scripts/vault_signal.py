#!/usr/bin/env python3
"""
Print the current VaultSignal and technical panels.

Fetches live BTC and MSTR data through the same fallback chains as the
API and prints the composite score for both instruments.
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from app.config import get_settings
from app.market_defaults import load_market_defaults
from app.services import MarketDataGateway, TechnicalService, VaultSignalService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def print_signal(name: str, signal, source: str) -> None:
    print(f"{name:<6} {signal.signal:<12} score {signal.score:>4}  "
          f"price {signal.price:>12,.2f}  24h {signal.change_24h:+6.2f}%  "
          f"momentum {signal.momentum_5d:+6.2f}%  volume x{signal.volume_trend:.2f}  [{source}]")


async def main():
    parser = argparse.ArgumentParser(description="Show the current VaultSignal")
    parser.add_argument("--range", default=None, help="Chart range for the score (default from settings)")
    parser.add_argument("--defaults", type=Path, default=None, help="market_defaults.yaml path")
    parser.add_argument("--technical", action="store_true", help="Also print RSI and MACD panels")
    args = parser.parse_args()

    settings = get_settings()
    defaults = load_market_defaults(args.defaults)
    # No Redis outside the server
    gateway = MarketDataGateway.from_settings(defaults, settings)
    gateway.use_cache = False

    try:
        service = VaultSignalService(gateway, range_=args.range or settings.vault_signal_range)
        result = await service.compute()

        print("\n" + "=" * 60)
        print("VAULTSIGNAL")
        print("=" * 60)
        print_signal("BTC", result.btc, result.sources["btc"])
        print_signal("MSTR", result.mstr, result.sources["mstr"])

        if args.technical:
            technical = TechnicalService(gateway, settings.rsi_period, settings.history_days)
            for panel in (await technical.btc_indicators(), await technical.mstr_indicators()):
                ind = panel.technical_indicators
                print("-" * 60)
                print(f"{panel.symbol:<6} RSI {ind.rsi.value:5.1f} {ind.rsi.signal:<10} "
                      f"MACD {ind.macd.value:9.2f} {ind.macd.signal:<8} "
                      f"sentiment {panel.market_sentiment}  [{panel.source}]")
        print("=" * 60)
    finally:
        await gateway.close()


if __name__ == "__main__":
    asyncio.run(main())
