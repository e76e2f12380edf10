"""
continuity/scene_grouper.py -- Scene Grouper

Buckets normalized timeline entries by (chapter, scene).  The index is
built once per check and shared read-only by the detectors.

Entries without a chapter have no scene key and are left out of the index
entirely; the integrity scanner is the only place they surface.  Entries
with a chapter but no character or no outfit *are* indexed; each detector
filters for what it needs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from continuity.models.base import TimelineEntry

logger = logging.getLogger(__name__)

UNSPECIFIED_SCENE = "unspecified"


@dataclass(frozen=True)
class SceneKey:
    """Composite (chapter, scene) grouping key.

    ``scene is None`` means the entry did not name a scene.  That is a
    bucket of its own within the chapter, distinct from every named scene
    (including one literally called "unspecified").
    """

    chapter: str
    scene: Optional[str] = None

    @classmethod
    def for_entry(cls, entry: TimelineEntry) -> Optional["SceneKey"]:
        """Return the entry's key, or ``None`` if it has no chapter."""
        if not entry.chapter:
            return None
        return cls(chapter=entry.chapter, scene=entry.scene or None)

    @property
    def label(self) -> str:
        """Display form, e.g. ``"5-2"`` or ``"5-unspecified"``."""
        return f"{self.chapter}-{self.scene or UNSPECIFIED_SCENE}"

    def __str__(self) -> str:
        return self.label


SceneIndex = dict[SceneKey, list[TimelineEntry]]


def build_scene_index(entries: Iterable[TimelineEntry]) -> SceneIndex:
    """Group *entries* by ``SceneKey``.

    Buckets appear in the order their first entry appears, and entries keep
    their input order inside a bucket.
    """
    index: SceneIndex = {}
    skipped = 0
    for entry in entries:
        key = SceneKey.for_entry(entry)
        if key is None:
            skipped += 1
            continue
        index.setdefault(key, []).append(entry)

    logger.debug(
        "Built scene index: %d buckets (%d entries without a chapter left out)",
        len(index), skipped,
    )
    return index
