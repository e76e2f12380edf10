"""
continuity/models/report.py -- Consistency report output models.

Serialized shape (``ConsistencyReport.to_dict()``)::

    {
        "success": True,
        "conflicts": [
            {
                "type": "multiple_outfits",
                "severity": "high",
                "message": "Character wearing 2 different outfits in the same scene",
                "details": {"characterId": "...", "chapter": "5", "outfitIds": [...], ...}
            },
            ...
        ],
        "summary": {
            "total": 1, "high": 1, "medium": 0, "low": 0,
            "byType": {"multiple_outfits": 1, "item_conflict": 0, "missing_data": 0}
        }
    }

Detail keys that do not apply to an issue are omitted rather than sent as
``null``.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConflictType(str, Enum):
    MULTIPLE_OUTFITS = "multiple_outfits"
    ITEM_CONFLICT = "item_conflict"
    MISSING_DATA = "missing_data"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Sort rank: lower sorts first.
SEVERITY_RANK: dict[Severity, int] = {
    Severity.HIGH: 0,
    Severity.MEDIUM: 1,
    Severity.LOW: 2,
}


def severity_rank(severity: Severity | str) -> int:
    """Return the sort rank of *severity* (high=0, medium=1, low=2)."""
    return SEVERITY_RANK[Severity(severity)]


class ConflictDetails(BaseModel):
    """Type-specific bag of identifiers attached to an issue.

    ``outfit_names`` is index-aligned with ``outfit_ids``; an outfit with no
    name is listed under its id.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    character_id: Optional[str] = Field(default=None, alias="characterId")
    character_name: Optional[str] = Field(default=None, alias="characterName")
    chapter: Optional[str] = None
    scene: Optional[str] = None
    outfit_ids: Optional[list[str]] = Field(default=None, alias="outfitIds")
    outfit_names: Optional[list[str]] = Field(default=None, alias="outfitNames")
    item_id: Optional[str] = Field(default=None, alias="itemId")
    item_name: Optional[str] = Field(default=None, alias="itemName")
    entry_ids: Optional[list[str]] = Field(default=None, alias="entryIds")


class ConflictIssue(BaseModel):
    """One reportable continuity finding."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: ConflictType
    severity: Severity
    message: str
    details: ConflictDetails = Field(default_factory=ConflictDetails)

    @property
    def rank(self) -> int:
        return severity_rank(self.severity)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ConsistencySummary(BaseModel):
    """Issue counts by severity and by type."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    by_type: dict[str, int] = Field(
        default_factory=lambda: {t.value: 0 for t in ConflictType},
        alias="byType",
    )


class ConsistencyReport(BaseModel):
    """Severity-ordered issues plus their summary."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    conflicts: list[ConflictIssue] = Field(default_factory=list)
    summary: ConsistencySummary = Field(default_factory=ConsistencySummary)

    @property
    def passed(self) -> bool:
        return self.summary.total == 0

    def issues_of_type(self, conflict_type: ConflictType | str) -> list[ConflictIssue]:
        wanted = ConflictType(conflict_type)
        return [c for c in self.conflicts if c.type == wanted]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the response body the timeline UI consumes."""
        return {
            "success": True,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "summary": self.summary.model_dump(mode="json", by_alias=True),
        }

    def to_json(self, indent: int | None = 2) -> str:
        """Deterministic JSON text of ``to_dict()``."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
