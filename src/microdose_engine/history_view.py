"""Helpers over the engine's recent-history view (real sessions + skips)."""

from __future__ import annotations

from typing import Iterable

from microdose_engine.models.enums import CATEGORY_MARKERS, MicrodoseCategory
from microdose_engine.models.session import SessionRecord


def newest_first(records: Iterable[SessionRecord]) -> list[SessionRecord]:
    """Sort records by timestamp, newest first. Stable for equal timestamps."""
    return sorted(records, key=lambda r: r.timestamp, reverse=True)


def infer_category(definition_id: str) -> MicrodoseCategory | None:
    """Infer a category from definition-id substrings, or None if unrecognised."""
    lowered = definition_id.lower()
    for category, markers in CATEGORY_MARKERS.items():
        if any(marker in lowered for marker in markers):
            return category
    return None


def find_last_by_category(
    records: Iterable[SessionRecord], category: MicrodoseCategory
) -> SessionRecord | None:
    """Most recent record whose definition id denotes *category*.

    *records* must already be sorted newest first.
    """
    for record in records:
        if infer_category(record.definition_id) == category:
            return record
    return None
