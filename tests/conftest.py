"""
Shared pytest fixtures for the wardrobe continuity test suite.

Provides:
    - make_entry: builds an engine-native raw timeline entry
    - make_outfit: builds an engine-native outfit reference with items
    - sample_backup_data: a small wardrobe backup document with one
      multiple-outfit conflict, one shared item and one incomplete entry
    - backup_file: sample_backup_data written to a temporary JSON file
"""

import json
import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Ensure continuity/ is importable regardless of where pytest is invoked
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def make_outfit():
    """Return a factory: ``make_outfit("A", ["shirt", "hat"])``.

    Items may be given as ids or as ``(id, name)`` tuples.  Passing
    ``items=None`` builds an outfit whose item list was never resolved.
    """
    def _make(outfit_id, items=(), name=None):
        outfit = {"id": outfit_id, "name": name or f"Outfit {outfit_id}"}
        if items is not None:
            rows = []
            for item in items:
                if isinstance(item, tuple):
                    rows.append({"itemId": item[0], "itemName": item[1]})
                else:
                    rows.append({"itemId": item})
            outfit["items"] = rows
        return outfit
    return _make


@pytest.fixture
def make_entry():
    """Return a factory for raw engine-native timeline entries.

    ``character`` may be an id string (the name is derived from it) or
    ``None``; ``outfit`` is a dict from ``make_outfit`` or ``None``.
    """
    def _make(entry_id, character="alice", outfit=None, chapter="1", scene=None):
        entry = {"id": entry_id, "chapter": chapter, "scene": scene}
        if character is not None:
            entry["characterRef"] = {"id": character, "name": character.title()}
        if outfit is not None:
            entry["outfitRef"] = outfit
        return entry
    return _make


@pytest.fixture
def sample_backup_data():
    """A wardrobe backup in the app's export format.

    Chapter 3 scene 1: Alice appears in both the Gala and Travel outfits
    (multiple_outfits), and Gala and Travel share the silver watch
    (item_conflict).  Bob's chapter 4 entry has no outfit (missing_data).
    """
    return {
        "version": "1.0",
        "timestamp": "2025-01-01T00:00:00.000Z",
        "storageProvider": "local",
        "items": [
            {"_id": "item-watch", "name": "Silver watch", "category": "Hands"},
            {"_id": "item-gown", "name": "Blue gown", "category": "Full Body"},
            {"_id": "item-coat", "name": "Grey coat", "category": "Torso Upper"},
        ],
        "outfits": [
            {
                "_id": "outfit-gala",
                "name": "Gala",
                "items": [
                    {"itemId": "item-gown", "layer": 1, "category": "Full Body"},
                    {"itemId": "item-watch", "layer": 2, "category": "Hands"},
                ],
            },
            {
                "_id": "outfit-travel",
                "name": "Travel",
                "items": [
                    {"itemId": "item-coat", "layer": 2},
                    {"itemId": "item-watch", "layer": 2},
                ],
            },
        ],
        "characters": [
            {"_id": "char-alice", "name": "Alice"},
            {"_id": "char-bob", "name": "Bob"},
        ],
        "timeline": [
            {"_id": "entry-1", "characterId": "char-alice", "outfitId": "outfit-gala",
             "chapter": 3, "scene": "1"},
            {"_id": "entry-2", "characterId": "char-alice", "outfitId": "outfit-travel",
             "chapter": 3, "scene": "1"},
            {"_id": "entry-3", "characterId": "char-bob", "chapter": 4},
        ],
        "metadata": {
            "itemCount": 3,
            "outfitCount": 2,
            "characterCount": 2,
            "timelineCount": 3,
        },
    }


@pytest.fixture
def backup_file(tmp_path, sample_backup_data):
    """Write sample_backup_data to a temp file and return its path."""
    path = tmp_path / "wardrobe-backup.json"
    with open(str(path), "w", encoding="utf-8") as fh:
        json.dump(sample_backup_data, fh, indent=2)
    return path
