from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from postscribe.app import initialise_store, reconcile_posts
from postscribe.config import ConfigurationError, configure_logging, get_logging_config
from postscribe.config.reconcile import parse_mode

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Keep bot summary comments in sync with published posts"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (defaults to LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("reconcile", help="Create, update and prune summary comments")
    run.add_argument(
        "--posts-dir",
        type=Path,
        help="Directory holding the markdown posts (defaults to POSTS_DIR)",
    )
    run.add_argument(
        "--mode",
        type=str,
        help="full (create/update/delete) or create-only (defaults to RECONCILE_MODE)",
    )
    run.add_argument(
        "--threshold-seconds",
        type=float,
        help="Minimum edit age before a summary is regenerated (defaults to config)",
    )

    subparsers.add_parser("init-db", help="Create the annotation table if missing")

    return parser.parse_args(list(argv))


def _threshold(args: argparse.Namespace) -> timedelta | None:
    if args.threshold_seconds is None:
        return None
    if args.threshold_seconds < 0:
        raise ValueError("Threshold seconds must be non-negative")
    return timedelta(seconds=args.threshold_seconds)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    try:
        logging_config = get_logging_config()
        configure_logging(
            level=(parsed_args.log_level or logging_config.level).upper(),
            log_file=logging_config.log_file,
        )
        mode = None
        threshold = None
        if parsed_args.command == "reconcile":
            mode = parse_mode(parsed_args.mode) if parsed_args.mode else None
            threshold = _threshold(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "reconcile":
            summary = reconcile_posts(
                posts_dir=parsed_args.posts_dir,
                mode=mode,
                update_threshold=threshold,
            )
            log.info(
                "Reconcile finished: processed=%s, skipped=%s, updated=%s, deleted=%s",
                summary.processed,
                summary.skipped,
                summary.updated,
                summary.deleted,
            )
        elif parsed_args.command == "init-db":
            initialise_store()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


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
