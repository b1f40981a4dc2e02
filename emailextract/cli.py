"""Command line entry point: extract e-mail addresses from files and folders."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def load_env(script_dir: Optional[Path] = None) -> None:
    """Load environment variables from .env files (working dir wins last)."""

    if script_dir is not None:
        load_dotenv(dotenv_path=script_dir / ".env")
    load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="emailextract",
        description="Extract e-mail addresses from text, PDF and office files.",
    )
    parser.add_argument("paths", nargs="+", help="files or directories to scan")
    parser.add_argument(
        "-o",
        "--output",
        help="file to write the addresses to (default: OUTPUT_PATH or emails.txt)",
    )
    parser.add_argument(
        "--report",
        help="also write a JSON report with the outcome of every file",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="print the addresses instead of writing a file",
    )
    parser.add_argument(
        "-j", "--workers", type=int, default=None, help="number of parallel workers"
    )
    parser.add_argument(
        "--no-recursive",
        action="store_true",
        help="do not descend into sub-directories",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_env(Path(__file__).resolve().parent.parent)

    # Imported after .env is loaded: settings are read at import time
    from emailextract import config
    from emailextract.pipeline import run
    from emailextract.sources import collect_files, iter_sources
    from emailextract.utils.errors import PatternEngineFault
    from emailextract.utils.logging_setup import setup_logging
    from emailextract.writer import write_emails, write_report

    setup_logging(logging.DEBUG if args.verbose else None)

    files = collect_files(args.paths, recursive=not args.no_recursive)
    if not files:
        logger.error("No input files found in: %s", ", ".join(args.paths))
        return 1

    try:
        result = run(iter_sources(files), max_workers=args.workers)
    except PatternEngineFault as exc:
        logger.critical("Aborting run: %s", exc)
        return 1

    emails = result.emails.sorted()
    if args.stdout:
        for email in emails:
            sys.stdout.write(email + "\n")
    elif emails:
        path = write_emails(emails, args.output or config.OUTPUT_PATH)
        logger.info("Extracted emails written to %s successfully.", path)
    if not emails:
        logger.warning("No email address found.")
    if args.report:
        report_path = write_report(result.reports, args.report)
        logger.info("Per-file report written to %s", report_path)
    logger.info(
        "%d unique addresses; %d files extracted, %d skipped, %d failed",
        len(emails),
        result.extracted,
        result.skipped,
        result.failed,
    )
    return 0


__all__ = ["build_parser", "load_env", "main"]
