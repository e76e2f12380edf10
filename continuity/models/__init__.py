"""
continuity/models/ -- Pydantic v2 models for the wardrobe continuity engine.

Submodules:
    base    Normalized timeline input (TimelineEntry and its references).
    report  Conflict issues, summary counts, and the consistency report.
"""

from continuity.models.base import (
    CharacterRef,
    OutfitItemRef,
    OutfitSummary,
    TimelineEntry,
)
from continuity.models.report import (
    SEVERITY_RANK,
    ConflictDetails,
    ConflictIssue,
    ConflictType,
    ConsistencyReport,
    ConsistencySummary,
    Severity,
    severity_rank,
)

__all__ = [
    "CharacterRef",
    "OutfitItemRef",
    "OutfitSummary",
    "TimelineEntry",
    "SEVERITY_RANK",
    "ConflictDetails",
    "ConflictIssue",
    "ConflictType",
    "ConsistencyReport",
    "ConsistencySummary",
    "Severity",
    "severity_rank",
]
