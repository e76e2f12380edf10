"""
continuity -- Wardrobe continuity conflict detection.

Scans a story timeline of character/outfit assignments for characters
wearing two outfits in one scene, clothing items shared by outfits worn in
the same scene, and entries missing the data needed to check either.

Submodules:
    adapter              Raw timeline records -> TimelineEntry snapshots.
    scene_grouper        (chapter, scene) buckets.
    detectors            The three continuity detectors and ItemSetCache.
    reporter             Merge, sort, summarize, render.
    consistency_checker  The pipeline (TimelineConsistencyChecker).
    backup_loader        Timeline hydration from a wardrobe backup file.
    config               CheckerSettings and settings-file loading.
    cli                  ``python -m continuity``.
"""

from continuity.consistency_checker import (
    TimelineConsistencyChecker,
    check_timeline_consistency,
)
from continuity.models import ConflictIssue, ConsistencyReport

__all__ = [
    "TimelineConsistencyChecker",
    "check_timeline_consistency",
    "ConflictIssue",
    "ConsistencyReport",
]
