"""
continuity/adapter.py -- Input Model Adapter

Normalizes raw timeline records into ``TimelineEntry`` snapshots.

Two raw shapes are understood:

    Engine-native::

        {"id": "e1", "characterRef": {"id": "c1", "name": "Alice"},
         "outfitRef": {"id": "o1", "name": "Gala", "items": [{"itemId": "i1", "itemName": "Shirt"}]},
         "chapter": "5", "scene": "2"}

    Populated document-store rows (as the wardrobe app fetches them)::

        {"_id": "e1", "characterId": {"_id": "c1", "name": "Alice"},
         "outfitId": {"_id": "o1", "name": "Gala",
                      "items": [{"itemId": {"_id": "i1", "name": "Shirt"}, "layer": 0}]},
         "chapter": 5, "scene": "2"}

A reference given as a bare id (not populated) keeps its id and loses its
name; an outfit given as a bare id has ``items=None`` and is treated as
having no items by the shared-item detector.

Usage::

    from continuity.adapter import normalize_entries

    entries = normalize_entries(raw_rows)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from continuity.models.base import CharacterRef, OutfitItemRef, OutfitSummary, TimelineEntry
from continuity.utils import coerce_label, document_id

logger = logging.getLogger(__name__)

_CHARACTER_KEYS = ("characterRef", "character_ref", "characterId", "character")
_OUTFIT_KEYS = ("outfitRef", "outfit_ref", "outfitId", "outfit")


class InvalidTimelineEntryError(ValueError):
    """Raised when a raw record cannot be identified as a timeline entry."""


def _first_present(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _display_name(value: Any) -> Optional[str]:
    if isinstance(value, Mapping):
        return coerce_label(value.get("name"))
    return None


def _normalize_character(value: Any) -> Optional[CharacterRef]:
    if value is None or isinstance(value, CharacterRef):
        return value
    ref_id = document_id(value)
    if ref_id is None:
        logger.debug("Character reference without an id treated as absent: %r", value)
        return None
    return CharacterRef(id=ref_id, name=_display_name(value))


def _normalize_item(row: Any) -> Optional[OutfitItemRef]:
    """Normalize one outfit item row; returns ``None`` when it has no id."""
    if isinstance(row, OutfitItemRef):
        return row
    if isinstance(row, Mapping):
        if "itemId" in row or "item_id" in row:
            target = row.get("itemId", row.get("item_id"))
        else:
            # A populated item document given directly in the list
            target = row
        item_id = document_id(target)
        item_name = coerce_label(row.get("itemName", row.get("item_name"))) or _display_name(target)
    else:
        item_id = document_id(row)
        item_name = None

    if item_id is None:
        return None
    return OutfitItemRef(item_id=item_id, item_name=item_name)


def _normalize_outfit(value: Any) -> Optional[OutfitSummary]:
    if value is None or isinstance(value, OutfitSummary):
        return value
    outfit_id = document_id(value)
    if outfit_id is None:
        logger.debug("Outfit reference without an id treated as absent: %r", value)
        return None
    if not isinstance(value, Mapping):
        return OutfitSummary(id=outfit_id)

    raw_items = value.get("items")
    items: Optional[tuple[OutfitItemRef, ...]] = None
    if isinstance(raw_items, (list, tuple)):
        normalized = []
        for row in raw_items:
            item = _normalize_item(row)
            if item is None:
                logger.warning("Skipping item without an id in outfit %s", outfit_id)
                continue
            normalized.append(item)
        items = tuple(normalized)

    return OutfitSummary(id=outfit_id, name=_display_name(value), items=items)


def normalize_entry(raw: Any, position: int = 0) -> TimelineEntry:
    """Normalize a single raw record.

    Parameters
    ----------
    raw : Mapping or TimelineEntry
        The raw timeline record.
    position : int
        Index of the record in the caller's list (used in error messages).

    Raises
    ------
    InvalidTimelineEntryError
        If *raw* is not a mapping or carries no id at all.
    """
    if isinstance(raw, TimelineEntry):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidTimelineEntryError(
            f"Timeline record #{position + 1} is not a record "
            f"(got {type(raw).__name__}). Each entry must be a JSON object."
        )

    entry_id = document_id(raw)
    if entry_id is None:
        raise InvalidTimelineEntryError(
            f"Timeline record #{position + 1} has no id, so any issue found in "
            f"it could not be traced back. Every entry needs an 'id' or '_id'."
        )

    return TimelineEntry(
        id=entry_id,
        character_ref=_normalize_character(_first_present(raw, _CHARACTER_KEYS)),
        outfit_ref=_normalize_outfit(_first_present(raw, _OUTFIT_KEYS)),
        chapter=coerce_label(raw.get("chapter")),
        scene=coerce_label(raw.get("scene")),
    )


def normalize_entries(raw_entries: Iterable[Any]) -> list[TimelineEntry]:
    """Normalize *raw_entries*, keeping cardinality and order.

    No entry is dropped, merged or reordered; missing fields stay ``None``.
    """
    entries = [normalize_entry(raw, position) for position, raw in enumerate(raw_entries)]
    logger.debug("Normalized %d timeline entries", len(entries))
    return entries
