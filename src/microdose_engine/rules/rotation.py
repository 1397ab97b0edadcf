"""Rule 3: rotate VO2 -> GTG -> Mobility -> VO2 from the latest entry."""

from __future__ import annotations

from microdose_engine.history_view import infer_category
from microdose_engine.models.context import UserContext
from microdose_engine.models.enums import NEXT_CATEGORY, MicrodoseCategory
from microdose_engine.models.recommendation import CategoryRecommendation
from microdose_engine.models.session import SessionRecord
from microdose_engine.rules.base import CategoryRule


class RotationFallbackRule(CategoryRule):
    """Always fires. Defaults to VO2 when the latest entry is unknown."""

    rule_id = "rotation_fallback"
    version = "1.0.0"

    def evaluate(
        self, context: UserContext, history: list[SessionRecord]
    ) -> CategoryRecommendation | None:
        last_category = infer_category(history[0].definition_id) if history else None
        if last_category is None:
            return self._recommend(
                MicrodoseCategory.VO2, "No recognisable last session: default to VO2."
            )

        next_category = NEXT_CATEGORY[last_category]
        return self._recommend(
            next_category,
            f"Round-robin: last was {last_category.name}, next is {next_category.name}.",
        )
