#!/usr/bin/env python3
"""
Supra Gas Tracker
Lifetime gas fee statistics for a Supra wallet, cached locally
"""

import argparse
import asyncio

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from gas_tracker.core.access import fetch_wallet_stats
from gas_tracker.core.cache_store import CACHE_PREFIX
from gas_tracker.core.config import DATABASE_PATH
from gas_tracker.core.errors import CooldownActiveError, SyncError
from gas_tracker.core.logger import enable_debug, logger
from gas_tracker.core.report import print_gas_stats, print_wallet_stats
from gas_tracker.core.supra_api import SupraAPI
from gas_tracker.core.tracker import GasTracker
from gas_tracker.database.database import Database

console = Console()


async def run_sync(tracker: GasTracker, address: str, manual: bool):
    """
    Cached stats or a first sync, or a manual re-sync when requested.

    Every re-aggregation of a cached address goes through the cooldown.
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("[cyan]Scanning coin transactions...", total=None)

        def on_page(p):
            progress.update(
                task,
                description=f"[cyan]Page {p.page}: {p.total_records} transactions",
            )

        if manual:
            return await tracker.sync(address, manual=True, on_page=on_page)
        return await tracker.refresh(address, on_page=on_page)


async def main_async(args):
    """Async main function"""
    db = Database(args.db)
    await db.init_db()

    try:
        async with SupraAPI() as api:
            tracker = GasTracker(api, db)

            if args.mode == "list":
                keys = await db.keys(CACHE_PREFIX)
                if not keys:
                    console.print("[dim]No cached addresses[/dim]\n")
                for key in keys:
                    console.print(f"  [cyan]{key[len(CACHE_PREFIX):]}[/cyan]")
                return

            if not args.address:
                console.print("[red]An address is required for this mode[/red]\n")
                return

            if args.mode == "clear":
                await tracker.disconnect(args.address)
                console.print(f"[green]Cooldown cleared for {args.address}[/green]\n")
                return

            if args.mode == "rank":
                stats = await fetch_wallet_stats(api, args.address)
                print_wallet_stats(stats)
                return

            try:
                await run_sync(tracker, args.address, manual=args.mode == "resync")
            except CooldownActiveError as e:
                console.print(
                    f"[yellow]Re-sync recharging, try again in {e.remaining_ms / 1000:.0f}s[/yellow]\n"
                )
                await tracker.load(args.address)
            except SyncError:
                # Keep showing whatever was cached before the failed run
                message = tracker.state.error
                await tracker.load(args.address)
                tracker.state.error = message

            price = None
            try:
                price = await api.fetch_supra_price()
            except SyncError as e:
                logger.debug(f"Price unavailable: {e}")

            cooldown = await tracker.cooldown_status(args.address)
            print_gas_stats(tracker.state, cooldown, price)
    finally:
        await db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Supra Gas Tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gas-tracker 0xabc...                  # Cached stats, or a first full scan
  gas-tracker 0xabc... --mode resync    # Manual re-sync (60s cooldown)
  gas-tracker 0xabc... --mode rank      # Balances and holder rank
  gas-tracker --mode list               # Addresses with cached stats
        """,
    )
    parser.add_argument("address", nargs="?", help="Supra wallet address")
    parser.add_argument(
        "--mode",
        choices=["show", "resync", "rank", "clear", "list"],
        default="show",
        help="Run mode (default: show)",
    )
    parser.add_argument("--db", default=DATABASE_PATH, help="SQLite cache path")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main():
    args = build_parser().parse_args()

    if args.debug:
        enable_debug(logger)

    try:
        asyncio.run(main_async(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        console.print("\n[yellow]Stopped by user[/yellow]\n")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        console.print(f"\n[red]Error: {e}[/red]\n")
        raise


if __name__ == "__main__":
    main()
