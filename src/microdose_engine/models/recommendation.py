"""Category recommendation: what a single category rule suggests."""

from __future__ import annotations

from dataclasses import dataclass

from microdose_engine.models.enums import MicrodoseCategory


@dataclass(frozen=True)
class CategoryRecommendation:
    """A rule's verdict on which category to prescribe next."""

    rule_id: str
    rule_version: str
    category: MicrodoseCategory
    explanation: str = ""
