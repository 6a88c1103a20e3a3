"""Command-line interface for the LP portfolio monitor."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from .config import load_config
from .errors import WalletError
from .logging_setup import configure_logging
from .models import snapshot_to_dict
from .services import MonitorJobs, TaskScheduler
from .services.monitor import (
    CACHE_SWEEP,
    DAILY_ARCHIVE,
    DATA_CLEANUP,
    POSITION_UPDATES,
    PRICE_UPDATES,
)

logger = logging.getLogger(__name__)

TASK_NAMES = [PRICE_UPDATES, POSITION_UPDATES, CACHE_SWEEP, DATA_CLEANUP, DAILY_ARCHIVE]


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="lp-monitor",
        description="Liquidity position portfolio monitor",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("run", help="Run the scheduler until interrupted")

    portfolio_parser = sub.add_parser("portfolio", help="Print a wallet's LP portfolio")
    portfolio_parser.add_argument("wallet_id", help="Wallet id from the config")
    view = portfolio_parser.add_mutually_exclusive_group()
    view.add_argument("--summary", action="store_true", help="Token/pool breakdown only")
    view.add_argument("--fees", action="store_true", help="Unclaimed fees only")
    view.add_argument("--earnings", action="store_true", help="Earnings projection only")

    prices_parser = sub.add_parser("prices", help="Fetch token prices")
    prices_parser.add_argument(
        "mints",
        nargs="*",
        help="Token mints (default: configured watch-list)",
    )

    task_parser = sub.add_parser("task", help="Run one scheduled task now")
    task_parser.add_argument("name", choices=TASK_NAMES, help="Task name")

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


async def _run_scheduler(jobs: MonitorJobs) -> None:
    scheduler = TaskScheduler(jobs.build_task_specs())
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
        await scheduler.drain()


async def _show_portfolio(jobs: MonitorJobs, args: argparse.Namespace) -> int:
    service = jobs.portfolio
    try:
        if args.summary:
            result = await service.get_wallet_summary(args.wallet_id)
        elif args.fees:
            result = await service.get_unclaimed_fees_summary(args.wallet_id)
        elif args.earnings:
            result = await service.get_earnings_stats(args.wallet_id)
        else:
            result = await service.get_wallet_portfolio(args.wallet_id)
    except WalletError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _print_json(snapshot_to_dict(result))
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command; returns the process exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    jobs = MonitorJobs.from_config(config)

    if args.command == "run":
        await _run_scheduler(jobs)
        return 0
    if args.command == "portfolio":
        return await _show_portfolio(jobs, args)
    if args.command == "prices":
        prices = await jobs.price_cache.get_prices(args.mints or config.watch_list)
        _print_json({mint: snapshot_to_dict(price) for mint, price in prices.items()})
        return 0
    if args.command == "task":
        scheduler = TaskScheduler(jobs.build_task_specs())
        return 0 if await scheduler.execute_task(args.name) else 1

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(_run(args)))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
