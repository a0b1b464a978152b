"""Command-line interface for the stablecoin yield rotator."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys

from .config import load_config
from .logging_setup import configure_logging
from .services import Rotator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="stable-rotator",
        description="Rotate swarm stablecoin holdings into the best Base lending yield",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, else INFO)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Decide and preview swaps without executing them",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("rotate", help="Run one rotation pass (default)")

    inspect_parser = sub.add_parser("inspect", help="Show current stablecoin yields")
    inspect_parser.add_argument(
        "--top",
        type=int,
        default=20,
        help="Number of top pools to list (default: 20)",
    )

    return parser


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and return the process exit code."""
    command = args.command or "rotate"
    config = load_config(args.config, require_wallet=command == "rotate")
    configure_logging(args.log_level or config.log_level)

    if args.dry_run:
        config = dataclasses.replace(
            config, rotation=dataclasses.replace(config.rotation, dry_run=True)
        )

    rotator = Rotator(config)

    if command == "inspect":
        print(await rotator.inspect(args.top))
        return 0

    stats = await rotator.run()
    return stats.exit_code


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()
    configure_logging(args.log_level or "INFO")

    try:
        exit_code = asyncio.run(_run(args))
    except Exception as e:
        logger.error("Yield rotation failed: %s", e)
        sys.exit(1)

    if exit_code == 0:
        logger.info("Yield rotation completed successfully")
    sys.exit(exit_code)
