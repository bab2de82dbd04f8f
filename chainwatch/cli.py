"""Command-line interface for the chain monitor."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import TX_FILTERS, load_config
from .logging_setup import configure_logging
from .models import TxFilter
from .services import Monitor


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="chainwatch",
        description="Read-only multi-chain balance and transaction monitor",
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
    parser.add_argument(
        "--filter",
        dest="tx_filter",
        default=None,
        choices=list(TX_FILTERS),
        help="Transaction filter (overrides config)",
    )
    parser.add_argument(
        "--privacy",
        action="store_true",
        help="Mask balances and addresses in the output",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("check", help="Poll every account once and print the report")
    sub.add_parser("rpc-status", help="Poll once and print endpoint health per chain")

    monitor_parser = sub.add_parser("monitor", help="Continuous polling loop")
    monitor_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Poll interval in seconds (overrides config)",
    )

    return parser


def _apply_view_flags(monitor: Monitor, args: argparse.Namespace) -> None:
    if args.tx_filter:
        monitor.tx_filter = TxFilter(args.tx_filter)
    if args.privacy:
        monitor.privacy_mode = True


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    monitor = Monitor(config)
    _apply_view_flags(monitor, args)

    if args.command == "check":
        await monitor.run_cycle()
        print(monitor.build_report())
    elif args.command == "rpc-status":
        await monitor.poll_all()
        print(monitor.build_rpc_status())
    elif args.command == "monitor":
        await monitor.run_continuous(args.interval, on_report=print)
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        pass
