"""
continuity/models/base.py -- Normalized timeline input models.

These are the value types the detectors work on.  Raw timeline records
(whatever shape the caller fetched them in) are turned into these by
``continuity.adapter.normalize_entries``; nothing downstream ever looks at
the raw dicts again.

All models are frozen: the engine reads a snapshot and never writes back.

Absence is meaningful.  ``TimelineEntry.character_ref``, ``outfit_ref``,
``chapter`` and ``scene`` may all be ``None`` and every detector handles
that explicitly.  ``OutfitSummary.items`` is ``None`` when the outfit was
referenced by id only and its item list was never resolved.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Snapshot(BaseModel):
    """Shared config: immutable, accepts both field names and aliases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class CharacterRef(_Snapshot):
    """A character referenced by a timeline entry."""

    id: str
    name: Optional[str] = None


class OutfitItemRef(_Snapshot):
    """One clothing item inside an outfit."""

    item_id: str = Field(alias="itemId")
    item_name: Optional[str] = Field(default=None, alias="itemName")


class OutfitSummary(_Snapshot):
    """An outfit referenced by a timeline entry, with its item list."""

    id: str
    name: Optional[str] = None
    items: Optional[tuple[OutfitItemRef, ...]] = None

    @property
    def is_resolved(self) -> bool:
        """True when the outfit's item list was supplied (even if empty)."""
        return self.items is not None

    def item_ids(self) -> tuple[str, ...]:
        """Distinct item ids in first-seen order (empty when unresolved)."""
        if not self.items:
            return ()
        return tuple(dict.fromkeys(item.item_id for item in self.items))


class TimelineEntry(_Snapshot):
    """A single character/outfit assignment at a point in the story."""

    id: str
    character_ref: Optional[CharacterRef] = Field(default=None, alias="characterRef")
    outfit_ref: Optional[OutfitSummary] = Field(default=None, alias="outfitRef")
    chapter: Optional[str] = None
    scene: Optional[str] = None

    @property
    def character_name(self) -> Optional[str]:
        return self.character_ref.name if self.character_ref else None
