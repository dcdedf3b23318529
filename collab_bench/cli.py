"""Command-line entry point.

Usage:
    collab-bench [-addr HOST:PORT] [--clients N] [--messages N]
                 [--settle-delay S] [--fast-interval S] [--pause S]
                 [--slow-interval S] [--final-pause S]
                 [--max-concurrency N] [--scheme {wss,ws}] [--insecure]
                 [--open-timeout S] [--quiet]
                 [--log-level {DEBUG,INFO,WARNING,ERROR}]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from ._logging import logger
from .constants import (
    CLIENT_COUNT,
    DEFAULT_ADDR,
    DEFAULT_SCHEME,
    FAST_INTERVAL,
    FINAL_PAUSE,
    MESSAGE_COUNT,
    OPEN_TIMEOUT,
    PAUSE,
    SETTLE_DELAY,
    SLOW_INTERVAL,
    SUPPORTED_SCHEMES,
)
from .driver import run_benchmark
from .errors import BenchConfigError
from .types import BenchConfig

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="collab-bench",
        description="Load generator for the collaborative editing WebSocket service",
    )
    parser.add_argument("-addr", "--addr", default=DEFAULT_ADDR,
                        help="service address (host:port)")
    parser.add_argument("--clients", type=int, default=CLIENT_COUNT,
                        help="number of simulated clients")
    parser.add_argument("--messages", type=int, default=MESSAGE_COUNT,
                        help="change events per batch")
    parser.add_argument("--settle-delay", type=float, default=SETTLE_DELAY,
                        help="seconds between login and the first change")
    parser.add_argument("--fast-interval", type=float, default=FAST_INTERVAL,
                        help="seconds between changes of the first batch")
    parser.add_argument("--pause", type=float, default=PAUSE,
                        help="seconds between the two batches")
    parser.add_argument("--slow-interval", type=float, default=SLOW_INTERVAL,
                        help="seconds between changes of the second batch")
    parser.add_argument("--final-pause", type=float, default=FINAL_PAUSE,
                        help="seconds between the last change and the close")
    parser.add_argument("--max-concurrency", type=int, default=None,
                        help="max clients running at once (default: all)")
    parser.add_argument("--scheme", choices=SUPPORTED_SCHEMES, default=DEFAULT_SCHEME)
    parser.add_argument("--insecure", action="store_true",
                        help="skip TLS certificate verification")
    parser.add_argument("--open-timeout", type=float, default=OPEN_TIMEOUT,
                        help="seconds allowed for the opening handshake")
    parser.add_argument("--quiet", action="store_true",
                        help="log each sent change at DEBUG instead of INFO")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS,
                        default="INFO", help="logging level")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> BenchConfig:
    return BenchConfig(
        addr=args.addr,
        scheme=args.scheme,
        client_count=args.clients,
        message_count=args.messages,
        settle_delay=args.settle_delay,
        fast_interval=args.fast_interval,
        pause=args.pause,
        slow_interval=args.slow_interval,
        final_pause=args.final_pause,
        max_concurrency=args.max_concurrency,
        open_timeout=args.open_timeout,
        verify_tls=not args.insecure,
        log_changes=not args.quiet,
    )


def setup_logging(level: str) -> None:
    logging.basicConfig(
        stream=sys.stdout,
        level=level,
        format="%(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = build_config(args)
    except BenchConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    report = asyncio.run(run_benchmark(config))
    print(report.tally())
    return 0


if __name__ == "__main__":
    sys.exit(main())
