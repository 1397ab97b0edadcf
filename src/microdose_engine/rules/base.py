"""Abstract base class for category-selection rules."""

from __future__ import annotations

from abc import ABC, abstractmethod

from microdose_engine.models.context import UserContext
from microdose_engine.models.enums import MicrodoseCategory
from microdose_engine.models.recommendation import CategoryRecommendation
from microdose_engine.models.session import SessionRecord


class CategoryRule(ABC):
    """One guard/result pair of the category decision list.

    The engine evaluates rules in list order and the first one returning
    a recommendation wins.

    Subclasses must define:
        rule_id: unique identifier (e.g. "strength_override")
        version: semantic version string
        evaluate(): the rule's guard and result
    """

    rule_id: str
    version: str

    @abstractmethod
    def evaluate(
        self, context: UserContext, history: list[SessionRecord]
    ) -> CategoryRecommendation | None:
        """Return a recommendation if the guard matches, otherwise None.

        Args:
            context: Frozen decision context.
            history: ``context.recent_sessions`` sorted newest first.
        """
        ...

    def _recommend(self, category: MicrodoseCategory, explanation: str) -> CategoryRecommendation:
        return CategoryRecommendation(
            rule_id=self.rule_id,
            rule_version=self.version,
            category=category,
            explanation=explanation,
        )
