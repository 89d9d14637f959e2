#!/usr/bin/env python3
"""
Cross-Exchange Spot Arbitrage Scanner

Finds price discrepancies for the same asset across spot exchanges, adjusts
them for fees, and keeps only those executable given order book depth,
24h liquidity, deposit/withdraw networks and a minimum absolute profit.

Usage:
    python main.py scan                     # Scan and list validated opportunities
    python main.py scan --min-diff 1.5      # Custom net spread threshold (%)
    python main.py scan --show-rejected     # Also list rejected candidates with reasons
    python main.py scan --json              # Machine-readable output
    python main.py exchanges                # Show configured exchanges and fees
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

import aiohttp

from config.settings import Settings, get_settings
from config.strategy_params import StrategyParams
from arbscan import __version__
from arbscan.api.exchanges import build_providers
from arbscan.api.provider import Capability
from arbscan.scanner.market_scanner import ArbitrageScanner, ScanResult
from arbscan.scanner.opportunity import ArbitrageOpportunity
from arbscan.utils.logger import get_logger, setup_logger

logger = get_logger("arbscan.main")


class ScannerApp:
    """Command-line orchestrator."""

    def __init__(self, settings: Settings, strategy: StrategyParams):
        self.settings = settings
        self.strategy = strategy
        self.session: Optional[aiohttp.ClientSession] = None
        self.scanner: Optional[ArbitrageScanner] = None

    async def initialize(self) -> None:
        """Create the shared HTTP session and the venue providers."""
        timeout = aiohttp.ClientTimeout(total=self.settings.http_timeout_seconds)
        self.session = aiohttp.ClientSession(timeout=timeout)
        providers = build_providers(self.settings, session=self.session)
        self.scanner = ArbitrageScanner(providers, self.strategy)

        logger.info(
            f"Scanner ready: quote={self.strategy.settlement_currency}, "
            f"trade={self.strategy.trade_amount_usd}, "
            f"min_diff={self.strategy.min_diff_percent}%"
        )

    async def scan(
        self,
        min_diff_percent: Optional[float],
        show_rejected: bool,
        as_json: bool,
    ) -> None:
        """Run one scan and print the results."""
        result = await self.scanner.scan_all(min_diff_percent)

        if as_json:
            payload = result.to_dict() if show_rejected else {
                "validated": [o.to_dict() for o in result.validated]
            }
            print(json.dumps(payload, indent=2))
            return

        print_opportunities(result.validated, self.strategy.settlement_currency)
        if show_rejected:
            print_rejections(result)

    def show_exchanges(self) -> None:
        """Print configured venues with their fees and capabilities."""
        print(f"{'EXCHANGE':<10} {'TAKER %':>8} {'TRANSFER %':>11}  CAPABILITIES")
        print("-" * 60)
        for provider in self.scanner.providers:
            caps = ", ".join(
                c.value for c in Capability if provider.supports(c)
            ) or "-"
            print(
                f"{provider.name:<10} {provider.fees.taker_fee_percent:>8.3f} "
                f"{provider.fees.transfer_fee_percent:>11.3f}  {caps}"
            )

    async def cleanup(self) -> None:
        """Cleanup resources."""
        if self.scanner:
            await self.scanner.close()
        if self.session:
            await self.session.close()


def print_opportunities(opportunities: List[ArbitrageOpportunity], quote: str) -> None:
    if not opportunities:
        print("No executable opportunities found")
        return

    print(f"\n{'=' * 88}")
    print(f"Found {len(opportunities)} executable opportunities:")
    print(f"{'=' * 88}")
    print(
        f"{'SYMBOL':<14} {'NET %':>7} {'GROSS %':>8}  {'BUY':<22} {'SELL':<22} "
        f"{'PROFIT':>10}"
    )
    for opp in opportunities:
        buy = f"{opp.buy.exchange}@{opp.buy.price:.8g}"
        sell = f"{opp.sell.exchange}@{opp.sell.price:.8g}"
        profit = f"{opp.real_profit_usd:.2f} {quote}" if opp.real_profit_usd is not None else "-"
        print(
            f"{opp.symbol:<14} {opp.net_diff:>7.2f} {opp.diff:>8.2f}  {buy:<22} {sell:<22} "
            f"{profit:>10}"
        )


def print_rejections(result: ScanResult) -> None:
    if not result.rejected:
        return
    print(f"\nRejected candidates ({len(result.rejected)}):")
    print("-" * 60)
    for opp in result.rejected:
        reasons = opp.validation.reasons if opp.validation else []
        print(f"  {opp.symbol} ({opp.buy.exchange} -> {opp.sell.exchange}, {opp.net_diff:.2f}%)")
        for reason in reasons:
            print(f"    - {reason}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"Cross-Exchange Spot Arbitrage Scanner v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "command",
        choices=["scan", "exchanges"],
        help="Command to run",
    )
    parser.add_argument(
        "--min-diff",
        type=float,
        default=None,
        metavar="PCT",
        help="Minimum fee-adjusted spread in percent (default: MIN_DIFF_PERCENT)",
    )
    parser.add_argument(
        "--show-rejected",
        action="store_true",
        help="Also list rejected candidates with their reasons",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logger(level=settings.log_level)
    strategy = StrategyParams.from_settings(settings)

    app = ScannerApp(settings, strategy)
    try:
        await app.initialize()
        if args.command == "scan":
            await app.scan(args.min_diff, args.show_rejected, args.json)
        elif args.command == "exchanges":
            app.show_exchanges()
    except Exception as e:
        logger.error(f"Scan failed: {e}")
        return 1
    finally:
        await app.cleanup()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
