"""
continuity/detectors.py -- The three continuity detectors.

    detect_multiple_outfits   A character assigned more than one distinct
                              outfit within one scene bucket.  (high)
    detect_item_conflicts     A clothing item belonging to more than one
                              outfit assigned within one scene bucket, no
                              matter which characters wear them.  (medium)
    scan_missing_data         Entries missing a chapter (low), an outfit
                              reference (high) or a character reference
                              (high).

The first two read the scene index; the integrity scanner reads the full
normalized entry list because entries without a chapter are not indexed.
None of them mutate their input, so they can run in any order or
concurrently.

Outfit item sets are resolved through ``ItemSetCache``: one cache per
check, each outfit id resolved at most once.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Optional

from continuity.models.base import OutfitSummary, TimelineEntry
from continuity.models.report import ConflictDetails, ConflictIssue, ConflictType, Severity
from continuity.scene_grouper import SceneIndex, SceneKey

logger = logging.getLogger(__name__)

MISSING_CHAPTER_MESSAGE = "Timeline entry missing chapter information"
MISSING_OUTFIT_MESSAGE = "Timeline entry missing outfit reference"
MISSING_CHARACTER_MESSAGE = "Timeline entry missing character reference"


# ---------------------------------------------------------------------------
# Outfit item-set cache
# ---------------------------------------------------------------------------

class ItemSetCache:
    """Outfit id -> distinct item ids, computed once per outfit id.

    Parameters
    ----------
    outfits : Mapping[str, OutfitSummary], optional
        The outfit summaries seen in this check, keyed by outfit id.

    An outfit id with no summary, or whose item list was never resolved,
    maps to an empty item set.  Lookups are serialized with a lock so the
    cache can be shared by concurrent per-scene tasks.
    """

    def __init__(self, outfits: Optional[Mapping[str, OutfitSummary]] = None):
        self._outfits: dict[str, OutfitSummary] = dict(outfits or {})
        self._item_sets: dict[str, tuple[str, ...]] = {}
        self._lock = threading.Lock()
        # Number of outfit ids actually resolved (not served from cache)
        self.resolutions = 0

    @classmethod
    def from_entries(cls, entries: Iterable[TimelineEntry]) -> "ItemSetCache":
        """Build a cache over every outfit referenced by *entries*.

        When the same outfit id appears several times, the first summary
        that carries an item list wins over bare-id references.
        """
        outfits: dict[str, OutfitSummary] = {}
        for entry in entries:
            outfit = entry.outfit_ref
            if outfit is None:
                continue
            known = outfits.get(outfit.id)
            if known is None or (not known.is_resolved and outfit.is_resolved):
                outfits[outfit.id] = outfit
        return cls(outfits)

    def __len__(self) -> int:
        return len(self._item_sets)

    def item_ids(self, outfit_id: str) -> tuple[str, ...]:
        """Return the distinct item ids of *outfit_id* (resolved once)."""
        with self._lock:
            cached = self._item_sets.get(outfit_id)
            if cached is not None:
                return cached
            outfit = self._outfits.get(outfit_id)
            item_ids = outfit.item_ids() if outfit is not None else ()
            self._item_sets[outfit_id] = item_ids
            self.resolutions += 1
            return item_ids

    def outfit_name(self, outfit_id: str) -> Optional[str]:
        outfit = self._outfits.get(outfit_id)
        return outfit.name if outfit is not None else None

    def item_name(self, item_id: str, outfit_ids: Iterable[str]) -> Optional[str]:
        """Name of *item_id* as recorded by the first of *outfit_ids* that names it."""
        for outfit_id in outfit_ids:
            outfit = self._outfits.get(outfit_id)
            if outfit is None or not outfit.items:
                continue
            for item in outfit.items:
                if item.item_id == item_id and item.item_name:
                    return item.item_name
        return None


# ---------------------------------------------------------------------------
# Character-outfit conflicts
# ---------------------------------------------------------------------------

def detect_multiple_outfits(scene_index: SceneIndex) -> list[ConflictIssue]:
    """Find characters wearing more than one distinct outfit in a scene."""
    issues: list[ConflictIssue] = []

    for key, entries in scene_index.items():
        by_character: dict[str, list[TimelineEntry]] = {}
        for entry in entries:
            if entry.character_ref is None:
                continue
            by_character.setdefault(entry.character_ref.id, []).append(entry)

        for character_id, group in by_character.items():
            if len(group) < 2:
                continue

            # Distinct outfits in first-seen order
            outfits: dict[str, OutfitSummary] = {}
            for entry in group:
                if entry.outfit_ref is not None:
                    outfits.setdefault(entry.outfit_ref.id, entry.outfit_ref)
            if len(outfits) < 2:
                continue

            character_name = next(
                (e.character_name for e in group if e.character_name), None
            )
            issues.append(ConflictIssue(
                type=ConflictType.MULTIPLE_OUTFITS,
                severity=Severity.HIGH,
                message=f"Character wearing {len(outfits)} different outfits in the same scene",
                details=ConflictDetails(
                    character_id=character_id,
                    character_name=character_name,
                    chapter=key.chapter,
                    scene=key.scene,
                    outfit_ids=list(outfits),
                    outfit_names=[o.name or o.id for o in outfits.values()],
                    entry_ids=[e.id for e in group if e.outfit_ref is not None],
                ),
            ))

    logger.debug("multiple_outfits: %d issue(s)", len(issues))
    return issues


# ---------------------------------------------------------------------------
# Shared-item conflicts
# ---------------------------------------------------------------------------

def detect_scene_item_conflicts(
    key: SceneKey,
    entries: list[TimelineEntry],
    cache: ItemSetCache,
) -> list[ConflictIssue]:
    """Find items shared by two or more outfits assigned in one scene.

    Emits one issue per shared item, listing every outfit in the scene that
    contains it.
    """
    # outfit id -> ids of the entries assigning it, first-seen order
    outfit_entries: dict[str, list[str]] = {}
    for entry in entries:
        if entry.outfit_ref is not None:
            outfit_entries.setdefault(entry.outfit_ref.id, []).append(entry.id)

    if len(outfit_entries) < 2:
        return []

    usage: dict[str, list[str]] = {}
    for outfit_id in outfit_entries:
        for item_id in cache.item_ids(outfit_id):
            usage.setdefault(item_id, []).append(outfit_id)

    issues: list[ConflictIssue] = []
    for item_id, outfit_ids in usage.items():
        if len(outfit_ids) < 2:
            continue
        issues.append(ConflictIssue(
            type=ConflictType.ITEM_CONFLICT,
            severity=Severity.MEDIUM,
            message=f"Same clothing item used in {len(outfit_ids)} outfits in the same scene",
            details=ConflictDetails(
                chapter=key.chapter,
                scene=key.scene,
                item_id=item_id,
                item_name=cache.item_name(item_id, outfit_ids),
                outfit_ids=list(outfit_ids),
                outfit_names=[cache.outfit_name(o) or o for o in outfit_ids],
                entry_ids=[eid for o in outfit_ids for eid in outfit_entries[o]],
            ),
        ))
    return issues


def detect_item_conflicts(scene_index: SceneIndex, cache: ItemSetCache) -> list[ConflictIssue]:
    """Run ``detect_scene_item_conflicts`` over every bucket, in index order."""
    issues: list[ConflictIssue] = []
    for key, entries in scene_index.items():
        issues.extend(detect_scene_item_conflicts(key, entries, cache))
    logger.debug(
        "item_conflict: %d issue(s), %d outfit item set(s) resolved",
        len(issues), cache.resolutions,
    )
    return issues


# ---------------------------------------------------------------------------
# Data integrity
# ---------------------------------------------------------------------------

def scan_missing_data(entries: Iterable[TimelineEntry]) -> list[ConflictIssue]:
    """Flag entries missing a chapter, an outfit or a character.

    An entry missing several fields yields one issue per missing field.
    """
    issues: list[ConflictIssue] = []
    for entry in entries:
        if not entry.chapter:
            issues.append(ConflictIssue(
                type=ConflictType.MISSING_DATA,
                severity=Severity.LOW,
                message=MISSING_CHAPTER_MESSAGE,
                details=ConflictDetails(
                    character_name=entry.character_name,
                    entry_ids=[entry.id],
                ),
            ))

        if entry.outfit_ref is None:
            issues.append(ConflictIssue(
                type=ConflictType.MISSING_DATA,
                severity=Severity.HIGH,
                message=MISSING_OUTFIT_MESSAGE,
                details=ConflictDetails(
                    character_name=entry.character_name,
                    chapter=entry.chapter,
                    scene=entry.scene,
                    entry_ids=[entry.id],
                ),
            ))

        if entry.character_ref is None:
            issues.append(ConflictIssue(
                type=ConflictType.MISSING_DATA,
                severity=Severity.HIGH,
                message=MISSING_CHARACTER_MESSAGE,
                details=ConflictDetails(
                    chapter=entry.chapter,
                    scene=entry.scene,
                    entry_ids=[entry.id],
                ),
            ))

    logger.debug("missing_data: %d issue(s)", len(issues))
    return issues
