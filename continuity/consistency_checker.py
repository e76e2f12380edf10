"""
continuity/consistency_checker.py -- Timeline Continuity Conflict Detection

Scans a full timeline of character/outfit assignments and reports:

    multiple_outfits (high):    a character assigned two or more distinct
                                outfits in the same (chapter, scene).
    item_conflict (medium):     one clothing item belonging to two or more
                                outfits assigned in the same scene.
    missing_data (high/low):    entries without an outfit, a character
                                (high) or a chapter (low).

Pipeline::

    normalize -> scene index -> 3 detectors -> merge, sort, summarize

The check is pure: it never touches storage and never modifies the
entries it is given.  The caller fetches the timeline with character,
outfit and item references already resolved.

Usage:
    from continuity.consistency_checker import check_timeline_consistency

    report = check_timeline_consistency(entries)
    # report.summary.total   -> number of issues
    # report.conflicts       -> issues, high severity first
    # report.to_dict()       -> JSON-ready response body
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from continuity.adapter import normalize_entries
from continuity.config import CheckerSettings
from continuity.detectors import (
    ItemSetCache,
    detect_item_conflicts,
    detect_multiple_outfits,
    detect_scene_item_conflicts,
    scan_missing_data,
)
from continuity.models.base import TimelineEntry
from continuity.models.report import ConflictIssue, ConsistencyReport
from continuity.reporter import build_report, format_report
from continuity.scene_grouper import SceneIndex, build_scene_index

logger = logging.getLogger(__name__)


class TimelineConsistencyChecker:
    """Runs the continuity detectors over a timeline snapshot.

    Parameters
    ----------
    settings : CheckerSettings, optional
        Execution settings; defaults to sequential execution.

    The checker holds no state between calls.  Every ``check()`` builds its
    own scene index and item-set cache, so one instance can serve
    concurrent callers working on different snapshots.
    """

    def __init__(self, settings: Optional[CheckerSettings] = None):
        self.settings = settings or CheckerSettings()

    def check(self, raw_entries: Iterable[Any]) -> ConsistencyReport:
        """Check *raw_entries* and return a severity-ordered report.

        Always returns a report; an empty timeline gives ``total == 0``.
        """
        entries = normalize_entries(raw_entries)
        scene_index = build_scene_index(entries)
        cache = ItemSetCache.from_entries(entries)

        if self.settings.parallel:
            outfit_issues, item_issues, missing_issues = self._detect_parallel(
                entries, scene_index, cache
            )
        else:
            outfit_issues = detect_multiple_outfits(scene_index)
            item_issues = detect_item_conflicts(scene_index, cache)
            missing_issues = scan_missing_data(entries)

        report = build_report(outfit_issues, item_issues, missing_issues)
        summary = report.summary
        logger.info(
            "Consistency check finished: %d entries, %d scenes, %d issue(s) "
            "(high=%d, medium=%d, low=%d)",
            len(entries), len(scene_index), summary.total,
            summary.high, summary.medium, summary.low,
        )
        return report

    def _detect_parallel(
        self,
        entries: list[TimelineEntry],
        scene_index: SceneIndex,
        cache: ItemSetCache,
    ) -> tuple[list[ConflictIssue], list[ConflictIssue], list[ConflictIssue]]:
        """Run the detectors on a thread pool.

        Item conflicts are computed as one task per scene bucket sharing
        *cache*.  Results are gathered in submission order, never in
        completion order, so output matches the sequential run.
        """
        with ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix="continuity",
        ) as pool:
            outfit_future = pool.submit(detect_multiple_outfits, scene_index)
            missing_future = pool.submit(scan_missing_data, entries)
            scene_futures = [
                pool.submit(detect_scene_item_conflicts, key, bucket, cache)
                for key, bucket in scene_index.items()
            ]

            item_issues: list[ConflictIssue] = []
            for future in scene_futures:
                item_issues.extend(future.result())
            logger.debug(
                "Parallel item_conflict: %d issue(s) over %d scene task(s)",
                len(item_issues), len(scene_futures),
            )
            return outfit_future.result(), item_issues, missing_future.result()

    def format_human_message(self, report: ConsistencyReport) -> str:
        """Readable multi-line summary of *report*."""
        return format_report(report)


def check_timeline_consistency(
    raw_entries: Iterable[Any],
    settings: Optional[CheckerSettings] = None,
) -> ConsistencyReport:
    """Check *raw_entries* with a fresh ``TimelineConsistencyChecker``."""
    return TimelineConsistencyChecker(settings).check(raw_entries)
