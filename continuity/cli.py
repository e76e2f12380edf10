"""
continuity/cli.py -- Command-line entry point.

Checks the timeline stored in a wardrobe backup file and prints a
readable report.

Usage::

    python -m continuity wardrobe-backup.json
    python -m continuity wardrobe-backup.json --output report.json --parallel
    wardrobe-continuity wardrobe-backup.json --sort --verbose

Exit status: 0 when the check ran (whatever it found), 2 when the backup or
the settings file could not be used (including a timeline row with no id).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from continuity.adapter import InvalidTimelineEntryError
from continuity.backup_loader import BackupFormatError, load_timeline
from continuity.config import SettingsError, load_settings
from continuity.consistency_checker import TimelineConsistencyChecker
from continuity.utils import write_json_report

logger = logging.getLogger("continuity")

EXIT_OK = 0
EXIT_BAD_INPUT = 2


def _setup_logging(verbose: bool) -> None:
    """Configure logging for command-line runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wardrobe-continuity",
        description="Check a wardrobe timeline for continuity conflicts",
    )
    parser.add_argument("backup", help="Path to a wardrobe backup JSON file")
    parser.add_argument("-o", "--output", help="Also write the JSON report to this path")
    parser.add_argument("--settings", help="Path to a settings JSON file")
    parser.add_argument("--parallel", action="store_true", help="Run detectors on a thread pool")
    parser.add_argument("--sort", action="store_true", help="Sort entries by chapter and scene first")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    try:
        settings = load_settings(args.settings)
        overrides = {}
        if args.parallel:
            overrides["parallel"] = True
        if args.sort:
            overrides["sort_input"] = True
        if overrides:
            settings = settings.model_copy(update=overrides)

        rows = load_timeline(args.backup, sort=settings.sort_input)
        checker = TimelineConsistencyChecker(settings)
        report = checker.check(rows)
    except (BackupFormatError, SettingsError, InvalidTimelineEntryError) as exc:
        logger.error("%s", exc)
        return EXIT_BAD_INPUT

    print(checker.format_human_message(report))

    if args.output:
        write_json_report(args.output, report.to_dict())
        logger.info("Report written to %s", args.output)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
