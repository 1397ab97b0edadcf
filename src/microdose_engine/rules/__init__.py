"""Ordered category-selection rules. First match wins."""

from microdose_engine.rules.base import CategoryRule
from microdose_engine.rules.rotation import RotationFallbackRule
from microdose_engine.rules.strength_override import StrengthOverrideRule
from microdose_engine.rules.vo2_recency import Vo2RecencyRule


def default_rules() -> tuple[CategoryRule, ...]:
    """The decision list in precedence order."""
    return (StrengthOverrideRule(), Vo2RecencyRule(), RotationFallbackRule())


__all__ = [
    "CategoryRule",
    "RotationFallbackRule",
    "StrengthOverrideRule",
    "Vo2RecencyRule",
    "default_rules",
]
