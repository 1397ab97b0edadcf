"""Rule 2: prescribe VO2 when none is recent."""

from __future__ import annotations

from datetime import timedelta

from microdose_engine.history_view import find_last_by_category
from microdose_engine.models.context import UserContext
from microdose_engine.models.enums import VO2_RECENCY_HOURS, MicrodoseCategory
from microdose_engine.models.recommendation import CategoryRecommendation
from microdose_engine.models.session import SessionRecord
from microdose_engine.rules.base import CategoryRule


class Vo2RecencyRule(CategoryRule):
    """Fires when there is no VO2 entry, or the latest is older than 4 hours."""

    rule_id = "vo2_recency"
    version = "1.0.0"

    def evaluate(
        self, context: UserContext, history: list[SessionRecord]
    ) -> CategoryRecommendation | None:
        last_vo2 = find_last_by_category(history, MicrodoseCategory.VO2)
        if last_vo2 is None:
            return self._recommend(
                MicrodoseCategory.VO2, "No recent VO2 session found: prescribe VO2."
            )

        age = context.now - last_vo2.timestamp
        if age > timedelta(hours=VO2_RECENCY_HOURS):
            hours = age.total_seconds() / 3600
            return self._recommend(
                MicrodoseCategory.VO2,
                f"Last VO2 session was {hours:.1f}h ago (> {VO2_RECENCY_HOURS}h): prescribe VO2.",
            )
        return None
