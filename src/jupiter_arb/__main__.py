"""
Entry point for the arbitrage engine.

Usage:
    python -m jupiter_arb run --config config.json
    python -m jupiter_arb trending --limit 10
    jupiter-arb run --config config.json  # if installed via pip
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from jupiter_arb.config.settings import Settings


# Try to use uvloop for better performance
try:
    import uvloop

    uvloop.install()
    UVLOOP_ENABLED = True
except ImportError:
    UVLOOP_ENABLED = False


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    from jupiter_arb.config.constants import JUPITER_TOKEN_API_URL

    parser = argparse.ArgumentParser(
        prog="jupiter-arb",
        description="Round-trip arbitrage engine for the Jupiter aggregator on Solana",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run the scan loop")
    run_parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.json"),
        help="Path to the JSON config file (default: config.json)",
    )

    trending_parser = subparsers.add_parser("trending", help="List trending tokens")
    trending_parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of tokens to list (default: 10)",
    )
    trending_parser.add_argument(
        "--token-api-url",
        default=JUPITER_TOKEN_API_URL,
        help="Token API base URL",
    )

    return parser.parse_args(argv)


def _print_settings(settings: "Settings") -> None:
    print("Configuration:")
    print(f"  Mode:           {'DRY RUN' if settings.dry_run else 'LIVE TRADING'}")
    print(f"  Trading:        {'Enabled' if settings.trading_enabled else 'Disabled'}")
    print(f"  RPC:            {settings.rpc_url}")
    print(f"  Base tokens:    {len(settings.base_tokens)}")
    print(f"  Quote tokens:   {len(settings.quote_tokens)}")
    print(f"  Trade size:     {settings.base_amount_ui}")
    print(f"  Min profit:     {settings.min_profit_percent:.3f}%")
    print(f"  Slippage:       {settings.slippage_bps} bps (execution {settings.execution_slippage_bps} bps)")
    print(f"  Interval:       {settings.interval_ms}ms")
    print(f"  uvloop:         {'Enabled' if UVLOOP_ENABLED else 'Disabled'}")
    print()

    if not settings.dry_run:
        print("WARNING: Live trading mode enabled!")
        print("    Real swaps will be signed and sent from the configured wallet.")
        print()


def run_command(config_path: Path) -> int:
    """Run the engine with a config file."""
    from jupiter_arb import __version__
    from jupiter_arb.config.settings import load_settings
    from jupiter_arb.core.engine import create_engine
    from jupiter_arb.core.errors import ConfigurationError

    print(f"JUPITER ARBITRAGE ENGINE v{__version__}\n")

    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    _print_settings(settings)

    async def run_engine() -> int:
        try:
            async with create_engine(settings) as engine:
                await engine.run()
            return 0

        except ConfigurationError as e:
            print(f"\nConfiguration error: {e}", file=sys.stderr)
            return 1

        except Exception as e:
            print(f"\nFatal error: {e}", file=sys.stderr)
            import traceback

            traceback.print_exc()
            return 1

    return asyncio.run(run_engine())


def trending_command(limit: int, token_api_url: str) -> int:
    """Print the trending tokens table."""
    from pydantic import ValidationError

    from jupiter_arb.gateway.client import JupiterClient, JupiterClientError
    from jupiter_arb.gateway.tokens import TokenRegistry

    async def fetch() -> int:
        async with JupiterClient(token_api_url=token_api_url) as client:
            try:
                tokens = await TokenRegistry(client).trending(limit)
            except (JupiterClientError, ValidationError) as e:
                print(f"Failed to fetch trending tokens: {e}", file=sys.stderr)
                return 1

        print(f"{'#':>3}  {'SYMBOL':<10} {'NAME':<24} {'ADDRESS':<44} {'DEC':>3} {'VOLUME 24H':>16} {'CHANGE 24H':>10}")
        for rank, token in enumerate(tokens, start=1):
            volume = f"{token.volume_24h:,.0f}" if token.volume_24h is not None else "-"
            change = f"{token.price_change_24h:+.2f}%" if token.price_change_24h is not None else "-"
            print(
                f"{rank:>3}  {token.symbol[:10]:<10} {token.name[:24]:<24} {token.address:<44} "
                f"{token.decimals:>3} {volume:>16} {change:>10}"
            )
        return 0

    return asyncio.run(fetch())


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 on configuration or fatal errors).
    """
    args = parse_args(argv)

    if args.command == "run":
        return run_command(args.config)
    if args.command == "trending":
        return trending_command(args.limit, args.token_api_url)
    return 2


if __name__ == "__main__":
    sys.exit(main())
