#!/usr/bin/env python3
"""
Portfolio Capture - Command Line Entry Point

Runs one of the browser recipes against the portfolios site:
- capture (default): tab screenshots, merged JSON, and a PDF
- parse: merged JSON only
- print: PDF via the site's Print control

Exit code 0 on success, 1 on any uncaught failure.
"""
from __future__ import annotations

import sys
import logging
import argparse
from typing import Optional

from config.settings import get_config, LOG_FORMAT, LOG_DATE_FORMAT
from modules.portfolio_capture import build_capture

# Module logger
main_logger = logging.getLogger("portfolio_capture.main")

COMMANDS = ("capture", "parse", "print")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Capture a portfolio page: screenshots, PDF, and merged table JSON"
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        default="capture",
        help="Recipe to run (default: capture)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--quotes",
        action="store_true",
        default=None,
        help="Add quote data per symbol (also FETCH_QUOTES=true)"
    )
    parser.add_argument(
        "--news",
        action="store_true",
        default=None,
        help="Add up to 5 news articles per symbol (also FETCH_NEWS=true)"
    )
    return parser


def run(command: str, fetch_quotes: Optional[bool] = None,
        fetch_news: Optional[bool] = None) -> int:
    """Run one recipe; returns the process exit code."""
    config = get_config()
    for group, valid in config.validate_all().items():
        status = "✓" if valid else "✗"
        main_logger.info(f"  {status} {group} configured")

    runner = build_capture(config, fetch_quotes=fetch_quotes, fetch_news=fetch_news)

    try:
        if command == "parse":
            runner.parse()
        elif command == "print":
            runner.print_page()
        else:
            runner.capture()
    except Exception as e:
        main_logger.error(f"Script failed: {e}", exc_info=main_logger.isEnabledFor(logging.DEBUG))
        return 1

    main_logger.info("Script completed successfully")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format=LOG_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            force=True
        )

    return run(args.command, fetch_quotes=args.quotes, fetch_news=args.news)


def capture_main() -> None:
    sys.exit(main(["capture"]))


def parse_main() -> None:
    sys.exit(main(["parse"]))


def print_main() -> None:
    sys.exit(main(["print"]))


if __name__ == "__main__":
    sys.exit(main())
