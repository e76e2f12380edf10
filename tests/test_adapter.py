"""
Tests for continuity/adapter.py -- raw record normalization.

Validates:
    - Engine-native and populated document-store rows both normalize
    - Bare-id references keep their id and have no name / unresolved items
    - Chapter and scene coercion (numbers, blanks)
    - Cardinality and order are preserved; missing fields are not errors
    - Unidentifiable records raise InvalidTimelineEntryError
"""

import pytest

from continuity.adapter import InvalidTimelineEntryError, normalize_entries, normalize_entry
from continuity.models.base import TimelineEntry


class TestNativeShape:
    """Engine-native records (id / characterRef / outfitRef)."""

    def test_full_entry(self, make_entry, make_outfit):
        raw = make_entry("e1", "alice", make_outfit("A", [("shirt", "White shirt")]), "5", "2")
        entry = normalize_entry(raw)
        assert entry.id == "e1"
        assert entry.character_ref.id == "alice"
        assert entry.character_ref.name == "Alice"
        assert entry.outfit_ref.id == "A"
        assert entry.outfit_ref.items[0].item_id == "shirt"
        assert entry.outfit_ref.items[0].item_name == "White shirt"
        assert entry.chapter == "5"
        assert entry.scene == "2"

    def test_missing_fields_are_none(self):
        entry = normalize_entry({"id": "e1"})
        assert entry.character_ref is None
        assert entry.outfit_ref is None
        assert entry.chapter is None
        assert entry.scene is None

    def test_timeline_entry_passes_through(self):
        entry = TimelineEntry(id="e1", chapter="2")
        assert normalize_entry(entry) is entry


class TestPopulatedShape:
    """Rows as the wardrobe app fetches them (_id / characterId / outfitId)."""

    def test_populated_references(self):
        raw = {
            "_id": "e1",
            "characterId": {"_id": "c1", "name": "Alice"},
            "outfitId": {
                "_id": "o1",
                "name": "Gala",
                "items": [
                    {"itemId": {"_id": "i1", "name": "Blue gown", "category": "Full Body"},
                     "layer": 1, "_id": "row-1"},
                ],
            },
            "chapter": 5,
            "scene": "2",
        }
        entry = normalize_entry(raw)
        assert entry.id == "e1"
        assert entry.character_ref.name == "Alice"
        assert entry.outfit_ref.name == "Gala"
        assert entry.outfit_ref.item_ids() == ("i1",)
        assert entry.outfit_ref.items[0].item_name == "Blue gown"
        assert entry.chapter == "5"

    def test_object_id_wrappers(self):
        raw = {"_id": {"$oid": "e1"}, "characterId": {"$oid": "c1"}}
        entry = normalize_entry(raw)
        assert entry.id == "e1"
        assert entry.character_ref.id == "c1"

    def test_bare_id_references(self):
        entry = normalize_entry({"_id": "e1", "characterId": "c1", "outfitId": "o1"})
        assert entry.character_ref.id == "c1"
        assert entry.character_ref.name is None
        assert entry.outfit_ref.id == "o1"
        assert entry.outfit_ref.items is None
        assert entry.outfit_ref.is_resolved is False
        assert entry.outfit_ref.item_ids() == ()

    def test_item_row_with_null_item_is_dropped(self):
        """A row whose item was deleted must not fall back to the row's own _id."""
        raw = {
            "_id": "e1",
            "outfitId": {
                "_id": "o1",
                "items": [{"itemId": None, "_id": "row-1"}, {"itemId": "i2"}],
            },
        }
        entry = normalize_entry(raw)
        assert entry.outfit_ref.item_ids() == ("i2",)

    def test_duplicate_items_collapse_in_item_ids(self):
        raw = {"_id": "e1", "outfitId": {"_id": "o1", "items": ["i1", "i2", "i1"]}}
        assert normalize_entry(raw).outfit_ref.item_ids() == ("i1", "i2")


class TestLabelCoercion:
    """Chapter and scene values."""

    @pytest.mark.parametrize("value, expected", [
        (5, "5"),
        (5.0, "5"),
        ("  7 ", "7"),
        ("Prologue", "Prologue"),
        ("", None),
        ("   ", None),
        (None, None),
    ])
    def test_chapter(self, value, expected):
        assert normalize_entry({"id": "e1", "chapter": value}).chapter == expected

    def test_blank_scene_is_unspecified(self):
        assert normalize_entry({"id": "e1", "chapter": "1", "scene": ""}).scene is None


class TestNormalizeEntries:
    """List-level behaviour."""

    def test_preserves_cardinality_and_order(self, make_entry):
        raws = [
            make_entry("e3", chapter=None),
            make_entry("e1", character=None),
            {"id": "e2"},
        ]
        entries = normalize_entries(raws)
        assert [e.id for e in entries] == ["e3", "e1", "e2"]

    def test_empty(self):
        assert normalize_entries([]) == []

    def test_accepts_generator(self, make_entry):
        entries = normalize_entries(make_entry(f"e{i}") for i in range(3))
        assert len(entries) == 3

    def test_non_mapping_raises(self):
        with pytest.raises(InvalidTimelineEntryError, match="#2"):
            normalize_entries([{"id": "e1"}, "not-a-record"])

    def test_missing_id_raises(self):
        with pytest.raises(InvalidTimelineEntryError, match="no id"):
            normalize_entries([{"chapter": "1"}])

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            normalize_entry(42)
