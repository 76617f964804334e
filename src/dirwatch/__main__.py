"""Command-line entry point for the directory monitor."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, apply_overrides, default_config, load_config
from .monitor import DirectoryMonitor
from .notifier import build_notifier


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirwatch",
        description="Poll directories for changes and report them to a webhook",
    )
    parser.add_argument(
        "roots",
        nargs="*",
        help="Directories to monitor (default: the current directory)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to an optional YAML configuration file",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between polling cycles (default: 5)",
    )
    parser.add_argument(
        "--webhook-url",
        default=None,
        help="Endpoint that receives one JSON POST per change; omit to only log",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request webhook timeout in seconds (default: 10)",
    )
    parser.add_argument(
        "--queue-size",
        type=int,
        default=None,
        help="Deliver notifications from a background queue of this size (default: 0, synchronous)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    try:
        app_config = load_config(Path(args.config)) if args.config else default_config()
        app_config = apply_overrides(
            app_config,
            roots=args.roots,
            poll_interval=args.interval,
            webhook_url=args.webhook_url,
            timeout=args.timeout,
            queue_size=args.queue_size,
        )
    except ConfigError as exc:
        logging.error("%s", exc)
        raise SystemExit(2) from exc

    notifier = build_notifier(app_config.notifier)
    monitor = DirectoryMonitor(app_config.monitor, notifier)
    try:
        monitor.run()
    finally:
        notifier.close()


if __name__ == "__main__":
    main()
