"""Rule 1: recent lower-body strength work steers toward GTG."""

from __future__ import annotations

from datetime import timedelta

from microdose_engine.models.context import UserContext
from microdose_engine.models.enums import (
    STRENGTH_OVERRIDE_WINDOW_HOURS,
    MicrodoseCategory,
    StrengthSessionType,
)
from microdose_engine.models.recommendation import CategoryRecommendation
from microdose_engine.models.session import SessionRecord
from microdose_engine.rules.base import CategoryRule


class StrengthOverrideRule(CategoryRule):
    """Fires when a lower-body strength session is under 24 hours old."""

    rule_id = "strength_override"
    version = "1.0.0"

    def evaluate(
        self, context: UserContext, history: list[SessionRecord]
    ) -> CategoryRecommendation | None:
        signal = context.external_strength
        if signal is None or signal.session_type != StrengthSessionType.LOWER:
            return None

        age = context.now - signal.last_session_at
        if age >= timedelta(hours=STRENGTH_OVERRIDE_WINDOW_HOURS):
            return None

        hours = age.total_seconds() / 3600
        return self._recommend(
            MicrodoseCategory.GTG,
            f"Lower-body strength session {hours:.1f}h ago "
            f"(< {STRENGTH_OVERRIDE_WINDOW_HOURS}h): prefer GTG.",
        )
