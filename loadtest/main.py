"""Load Test CLI - provisions accounts and drives them through upload/download cycles."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from common.exceptions import PlatformError
from common.utils import deep_merge, load_yaml
from loadtest import __version__
from loadtest.config import LoadTestSettings, init_settings
from loadtest.core.controller import LoadTestController
from loadtest.platform.client import PlatformClient

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loadtest",
        description="Load Test CLI: simulate concurrent users against the platform",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-u", "--username", help="Operator username used to log in to the platform")
    parser.add_argument("-p", "--password", help="Operator password")
    parser.add_argument(
        "-n", "--number",
        type=int,
        help="Simultaneous users to simulate load for (default: 5)",
    )
    parser.add_argument("-c", "--cycles", type=int, help="Number of sequential cycles (default: 1)")
    parser.add_argument("--host", help="Platform API URL (overrides LOADTEST_API_URL)")
    parser.add_argument("--config", type=Path, help="YAML file with settings")
    parser.add_argument("--report-dir", type=Path, help="Directory to write the report to")
    parser.add_argument("--log-level", help="Logging level")
    return parser


def load_settings(args: argparse.Namespace) -> LoadTestSettings:
    """Build settings from env, then the YAML file, then command-line flags."""
    overrides: dict = {}
    if args.config:
        overrides = load_yaml(args.config)

    cli_overrides = {
        "api_url": args.host,
        "report_dir": args.report_dir,
        "log_level": args.log_level,
    }
    overrides = deep_merge(overrides, {k: v for k, v in cli_overrides.items() if v is not None})
    return init_settings(**overrides)


def setup_logging(settings: LoadTestSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


async def run_load_test(
    settings: LoadTestSettings,
    username: str,
    password: str,
    cycles: int,
    concurrency: int,
) -> int:
    """Initialize the platform client, run every cycle, write the report."""
    async with PlatformClient(
        settings.api_url,
        username,
        password,
        timeout=settings.request_timeout,
    ) as client:
        try:
            await client.initialize()
        except PlatformError as e:
            logger.error(f"Error initializing platform: {e}")
            return 1

        controller = LoadTestController(client, settings)
        await controller.execute(cycles, concurrency)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not (args.username and args.password):
        parser.print_help()
        return 1

    settings = load_settings(args)
    setup_logging(settings)

    concurrency = args.number if args.number is not None else settings.default_concurrency
    cycles = args.cycles if args.cycles is not None else settings.default_cycles
    if concurrency < 1 or cycles < 1:
        parser.error("--number and --cycles must be positive")

    logger.info("Load Test CLI: Starting load test ...")
    return asyncio.run(run_load_test(settings, args.username, args.password, cycles, concurrency))


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
