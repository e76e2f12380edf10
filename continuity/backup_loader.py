"""
continuity/backup_loader.py -- Timeline hydration from a wardrobe backup.

The wardrobe app exports its whole database as one JSON document::

    {
        "version": "1.0",
        "timestamp": "...",
        "items":      [{"_id": "i1", "name": "White shirt", "category": "Torso Upper"}, ...],
        "outfits":    [{"_id": "o1", "name": "Gala", "items": [{"itemId": "i1", "layer": 0}]}, ...],
        "characters": [{"_id": "c1", "name": "Alice"}, ...],
        "timeline":   [{"_id": "e1", "characterId": "c1", "outfitId": "o1",
                        "chapter": 5, "scene": "2"}, ...],
        "metadata":   {...}
    }

``hydrate_timeline()`` joins the timeline rows with their character,
outfit and item documents, producing the populated rows the checker
expects.  References to documents missing from the backup are kept as bare
ids, which the checker treats as unresolved.

Usage::

    from continuity.backup_loader import load_backup, hydrate_timeline

    backup = load_backup("wardrobe-backup.json")
    rows = hydrate_timeline(backup, sort=True)
"""

from __future__ import annotations

import logging
import math
from typing import Any

try:
    import jsonschema
except ImportError:
    raise ImportError(
        "The 'jsonschema' package is required but not installed. "
        "Install it with: pip install jsonschema"
    )

from continuity.utils import UNREADABLE, coerce_label, document_id, read_json_document

logger = logging.getLogger(__name__)

_DOCUMENT_LIST = {"type": "array", "items": {"type": "object"}}

BACKUP_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["timeline"],
    "properties": {
        "version": {"type": "string"},
        "timestamp": {"type": "string"},
        "items": _DOCUMENT_LIST,
        "characters": _DOCUMENT_LIST,
        "outfits": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"items": {"type": "array"}},
            },
        },
        "timeline": _DOCUMENT_LIST,
    },
}


class BackupFormatError(ValueError):
    """Raised when a backup file is unreadable or not shaped like a backup."""


# ---------------------------------------------------------------------------
# Loading and validation
# ---------------------------------------------------------------------------

def _humanize_error(error) -> str:
    """Convert a ``jsonschema.ValidationError`` into plain English."""
    path = " -> ".join(str(p) for p in error.absolute_path) if error.absolute_path else "(root)"
    msg = error.message
    if error.validator == "required":
        return f"Missing required section at {path}: {msg}"
    if error.validator == "type":
        return f"Wrong data type at '{path}': {msg}"
    return f"Issue at '{path}': {msg}"


def validate_backup(data: Any) -> list[str]:
    """Return human-readable structural problems with *data* (empty if valid)."""
    validator = jsonschema.Draft202012Validator(BACKUP_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    return [_humanize_error(err) for err in errors]


def load_backup(path) -> dict:
    """Read and validate a backup file.

    Raises
    ------
    BackupFormatError
        If the file is missing, is not valid JSON, or does not have the
        structure of a wardrobe backup.
    """
    data = read_json_document(path)
    if data is UNREADABLE:
        raise BackupFormatError(
            f"Could not read the backup file '{path}'. Check that the file "
            f"exists and contains valid JSON."
        )

    problems = validate_backup(data)
    if problems:
        lines = [f"The backup file '{path}' is not in the expected format:"]
        lines.extend(f"  {i}. {p}" for i, p in enumerate(problems, 1))
        raise BackupFormatError("\n".join(lines))

    logger.debug(
        "Loaded backup %s: %d timeline entries, %d outfits, %d characters, %d items",
        path, len(data["timeline"]), len(data.get("outfits", [])),
        len(data.get("characters", [])), len(data.get("items", [])),
    )
    return data


# ---------------------------------------------------------------------------
# Hydration (join timeline rows with their referenced documents)
# ---------------------------------------------------------------------------

def _index_by_id(documents: list[dict]) -> dict[str, dict]:
    index: dict[str, dict] = {}
    for doc in documents:
        doc_id = document_id(doc)
        if doc_id is not None:
            index.setdefault(doc_id, doc)
    return index


def _populate_item(value: Any, items: dict[str, dict]) -> Any:
    if isinstance(value, dict) and "name" in value:
        return value
    item_id = document_id(value)
    if item_id is None:
        return None
    item = items.get(item_id)
    if item is None:
        return item_id
    return {"_id": item_id, "name": item.get("name"), "category": item.get("category")}


def _populate_outfit(value: Any, outfits: dict[str, dict], items: dict[str, dict]) -> Any:
    if isinstance(value, dict) and "items" in value:
        return value
    outfit_id = document_id(value)
    if outfit_id is None:
        return None
    outfit = outfits.get(outfit_id)
    if outfit is None:
        logger.debug("Outfit %s is not in the backup; left unresolved", outfit_id)
        return outfit_id

    rows = []
    for row in outfit.get("items") or []:
        if not isinstance(row, dict):
            row = {"itemId": row}
        populated = dict(row)
        populated["itemId"] = _populate_item(row.get("itemId"), items)
        rows.append(populated)
    return {"_id": outfit_id, "name": outfit.get("name"), "items": rows}


def _populate_character(value: Any, characters: dict[str, dict]) -> Any:
    if isinstance(value, dict) and "name" in value:
        return value
    character_id = document_id(value)
    if character_id is None:
        return None
    character = characters.get(character_id)
    if character is None:
        return character_id
    return {"_id": character_id, "name": character.get("name")}


def _sort_part(value: Any) -> tuple:
    """Sort numbers before text and missing values last."""
    label = coerce_label(value)
    if label is None:
        return (2, 0.0, "")
    try:
        number = float(label)
    except ValueError:
        return (1, 0.0, label.lower())
    if math.isnan(number):
        return (1, 0.0, label.lower())
    return (0, number, label)


def timeline_sort_key(row: dict) -> tuple:
    """Chapter, then scene, then page."""
    return (_sort_part(row.get("chapter")), _sort_part(row.get("scene")), _sort_part(row.get("page")))


def hydrate_timeline(backup: dict, sort: bool = False) -> list[dict]:
    """Return the backup's timeline rows with references populated.

    Parameters
    ----------
    backup : dict
        A backup document (see ``load_backup``).
    sort : bool
        If True, order rows by chapter, scene and page; otherwise keep the
        backup's order.
    """
    characters = _index_by_id(backup.get("characters", []))
    outfits = _index_by_id(backup.get("outfits", []))
    items = _index_by_id(backup.get("items", []))

    rows = []
    for raw in backup.get("timeline", []):
        row = dict(raw)
        row["characterId"] = _populate_character(raw.get("characterId"), characters)
        row["outfitId"] = _populate_outfit(raw.get("outfitId"), outfits, items)
        rows.append(row)

    if sort:
        rows.sort(key=timeline_sort_key)
    return rows


def load_timeline(path, sort: bool = False) -> list[dict]:
    """``load_backup`` followed by ``hydrate_timeline``."""
    return hydrate_timeline(load_backup(path), sort=sort)
