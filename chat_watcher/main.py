#!/usr/bin/env python3
"""
chat-watcher - daemon entry point

Parses command line flags, configures logging and runs the capture
history loop until SIGINT/SIGTERM or until the watched directory is removed.

Usage:
    chat-watcher --dir ~/captures --quiet-period 10
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from chat_watcher import __version__
from chat_watcher.utils.config import Settings, get_settings
from domains.capture_history.lifecycle import LifecycleController

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"

# CLI flag -> Settings field
OVERRIDES = {
    "dir": "watch_dir",
    "pattern": "file_pattern",
    "quiet_period": "quiet_period",
    "cooldown": "min_commit_spacing",
    "probe_interval": "probe_interval",
    "prefix": "repo_prefix",
    "suffix": "repo_suffix",
    "marker": "commit_marker",
    "fossil": "fossil_bin",
    "log_level": "log_level",
}


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments. Unset flags fall back to environment settings."""

    parser = argparse.ArgumentParser(
        description="Watch a directory and auto-commit captured text files to a numbered Fossil repository.",
    )
    parser.add_argument(
        "--dir",
        type=Path,
        help="Directory to watch (default: current directory).",
    )
    parser.add_argument(
        "--pattern",
        help="Glob for capture files (default: *.txt).",
    )
    parser.add_argument(
        "--quiet-period",
        type=float,
        help="Seconds without changes before committing (default: 5).",
    )
    parser.add_argument(
        "--cooldown",
        type=float,
        help="Minimum seconds between commit attempts (default: 5).",
    )
    parser.add_argument(
        "--probe-interval",
        type=float,
        help="Seconds between checks of the repository for missed changes (default: 10).",
    )
    parser.add_argument("--prefix", help="Repository file name prefix.")
    parser.add_argument("--suffix", help="Repository file name suffix (default: .fossil).")
    parser.add_argument("--marker", help="Text prefixed to every commit message.")
    parser.add_argument("--fossil", help="Fossil executable (default: fossil).")
    parser.add_argument("--log-level", help="Log level (default: INFO).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    """Merge CLI flags over environment settings."""
    overrides = {
        field: getattr(args, flag)
        for flag, field in OVERRIDES.items()
        if getattr(args, flag) is not None
    }
    if not overrides:
        return get_settings()
    return Settings(**overrides)


def configure_logging(level: str):
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI."""

    args = parse_args(argv)

    try:
        settings = build_settings(args)
    except ValidationError as e:
        configure_logging("INFO")
        logger.error(f"Invalid configuration: {e}")
        return 2

    try:
        configure_logging(settings.log_level)
    except ValueError as e:
        configure_logging("INFO")
        logger.error(f"Invalid log level '{settings.log_level}': {e}")
        return 2

    logger.info(f"chat-watcher {__version__}")
    controller = LifecycleController(settings)

    def _signal_handler(signum, frame):  # noqa: D401
        # No logging here: the sink lock may already be held by the loop.
        controller.request_stop()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    exit_code = controller.run()
    logger.info("Watcher stopped.")
    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
