"""Data models for the microdose engine."""

from microdose_engine.models.catalog import Catalog
from microdose_engine.models.context import UserContext
from microdose_engine.models.decision_trace import DecisionTrace, RuleResult
from microdose_engine.models.enums import (
    BurpeeStyle,
    MicrodoseCategory,
    MovementKind,
    RuleStatus,
    StrengthSessionType,
)
from microdose_engine.models.movement import (
    Band,
    BandMetric,
    MetricSpec,
    MicrodoseBlock,
    MicrodoseDefinition,
    Movement,
    MovementStyle,
    RepsMetric,
)
from microdose_engine.models.prescription import Prescription
from microdose_engine.models.progression_state import ProgressionState, UserMicrodoseState
from microdose_engine.models.recommendation import CategoryRecommendation
from microdose_engine.models.session import Session, SessionRecord, ShownButSkipped
from microdose_engine.models.strength import ExternalStrengthSignal

__all__ = [
    "Band",
    "BandMetric",
    "BurpeeStyle",
    "Catalog",
    "CategoryRecommendation",
    "DecisionTrace",
    "ExternalStrengthSignal",
    "MetricSpec",
    "MicrodoseBlock",
    "MicrodoseCategory",
    "MicrodoseDefinition",
    "Movement",
    "MovementKind",
    "MovementStyle",
    "Prescription",
    "ProgressionState",
    "RepsMetric",
    "RuleResult",
    "RuleStatus",
    "Session",
    "SessionRecord",
    "ShownButSkipped",
    "StrengthSessionType",
    "UserContext",
    "UserMicrodoseState",
]
