from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from idsync.app import run_directory_sync
from idsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Mirror source directory identities into the target directory"
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Execute directory mutations (default is a dry run that only reports)",
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    # argparse exits with status 2 on invalid arguments.
    parsed_args = _parse_args(args_list)

    try:
        run_directory_sync(dry_run=not parsed_args.apply)
    except Exception:
        log.exception("Fatal error during directory sync")
        sys.exit(1)

    sys.exit(0)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
