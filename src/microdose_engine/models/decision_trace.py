"""Decision trace: audit trail of how the engine reached its prescription."""

from __future__ import annotations

from dataclasses import dataclass, field

from microdose_engine.models.enums import MicrodoseCategory, RuleStatus
from microdose_engine.models.prescription import Prescription
from microdose_engine.models.recommendation import CategoryRecommendation


@dataclass(frozen=True)
class RuleResult:
    """Record of a single category rule's evaluation."""

    rule_id: str
    status: RuleStatus
    recommendation: CategoryRecommendation | None = None
    explanation: str = ""


@dataclass(frozen=True)
class DecisionTrace:
    """Complete audit trail for a single engine.prescribe() call."""

    rule_results: tuple[RuleResult, ...] = field(default_factory=tuple)
    category: MicrodoseCategory | None = None
    selection_notes: str = ""
    final_prescription: Prescription | None = None

    @property
    def deciding_rule(self) -> str | None:
        """rule_id of the rule that fired, or None for an explicit target."""
        for result in self.rule_results:
            if result.status == RuleStatus.FIRED:
                return result.rule_id
        return None
