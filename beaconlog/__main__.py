"""Entry point for beaconlog: python -m beaconlog."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from .app import BeaconLogApp
from .config import load_config, parse_window_ms
from .i18n import init_lang
from .models import ConfigError

DEFAULT_CONFIG_PATH = Path("config.yaml")


def setup_logging(verbose: bool) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from libraries
    logging.getLogger("bleak").setLevel(logging.WARNING)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="beaconlog",
        description="Record iBeacon RSSI snapshots to a CSV file",
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "-l", "--label",
        default=None,
        help="Label written to the last column of each row",
    )

    parser.add_argument(
        "-i", "--interval",
        default=None,
        metavar="MS",
        help="Scan window in milliseconds (default: 2000)",
    )

    parser.add_argument(
        "-f", "--file",
        default=None,
        metavar="NAME",
        help="CSV file name inside the output directory (default: data.csv)",
    )

    parser.add_argument(
        "-d", "--output-dir",
        type=Path,
        default=None,
        metavar="DIR",
        help="Directory for CSV files (default: ~/Download)",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single scan session, print the row and exit",
    )

    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use a synthetic radio instead of Bluetooth hardware",
    )

    parser.add_argument(
        "--lang",
        choices=["fi", "en"],
        default=None,
        help="Console language: fi (Finnish, default) or en (English)",
    )

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    logger = logging.getLogger(__name__)

    config_path = args.config
    if config_path is None and DEFAULT_CONFIG_PATH.exists():
        config_path = DEFAULT_CONFIG_PATH

    try:
        config = load_config(config_path.resolve() if config_path else None)
        if args.label is not None:
            config.label = args.label
        if args.interval is not None:
            config.window_ms = parse_window_ms(args.interval)
        if args.file:
            config.file_name = args.file
        if args.output_dir:
            config.output_dir = args.output_dir.expanduser()
    except (FileNotFoundError, ConfigError) as e:
        logger.error("%s", e)
        return 1

    # CLI --lang overrides config file
    init_lang(args.lang or config.language)

    try:
        app = BeaconLogApp(config, demo=args.demo, once=args.once)
        return asyncio.run(app.run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
