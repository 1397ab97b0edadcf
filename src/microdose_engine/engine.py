"""MicrodoseEngine: picks the next workout and its intensity."""

from __future__ import annotations

import logging

from microdose_engine.catalog import get_default_catalog
from microdose_engine.exceptions import CatalogValidationError, PrescriptionError
from microdose_engine.history_view import find_last_by_category, newest_first
from microdose_engine.models.catalog import Catalog
from microdose_engine.models.context import UserContext
from microdose_engine.models.decision_trace import DecisionTrace, RuleResult
from microdose_engine.models.enums import MicrodoseCategory, RuleStatus
from microdose_engine.models.movement import MicrodoseDefinition, MovementStyle
from microdose_engine.models.prescription import Prescription
from microdose_engine.models.recommendation import CategoryRecommendation
from microdose_engine.models.session import SessionRecord
from microdose_engine.rules import CategoryRule, default_rules

logger = logging.getLogger(__name__)


class MicrodoseEngine:
    """Evaluates the category decision list and selects a definition.

    The engine is pure: it performs no I/O and never mutates its inputs.

    Usage:
        engine = MicrodoseEngine()
        prescription, trace = engine.prescribe(context)
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        rules: tuple[CategoryRule, ...] | None = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else get_default_catalog()
        self.rules = rules if rules is not None else default_rules()

        errors = self.catalog.validate()
        if errors:
            raise CatalogValidationError(errors)

    def prescribe(
        self,
        context: UserContext,
        target_category: MicrodoseCategory | None = None,
    ) -> tuple[Prescription, DecisionTrace]:
        """Choose the next microdose.

        Args:
            context: Frozen decision context.
            target_category: Skip the decision list and use this category.

        Returns:
            A tuple of (Prescription, DecisionTrace).

        Raises:
            PrescriptionError: the chosen category has no definitions, or
                no rule produced a category.
        """
        history = newest_first(context.recent_sessions)

        if target_category is not None:
            category = target_category
            rule_results: tuple[RuleResult, ...] = ()
            logger.info("Prescribing from requested category %s", category.name)
        else:
            winner, rule_results = self._select_category(context, history)
            category = winner.category
            logger.info("Prescribing from category %s (%s)", category.name, winner.rule_id)

        definition, notes = self._select_definition(category, context, history)
        reps, style = compute_intensity(definition, context)

        prescription = Prescription(
            definition=definition,
            reps=reps,
            style=style,
            description=notes,
        )
        trace = DecisionTrace(
            rule_results=rule_results,
            category=category,
            selection_notes=notes,
            final_prescription=prescription,
        )
        return prescription, trace

    def _select_category(
        self, context: UserContext, history: list[SessionRecord]
    ) -> tuple[CategoryRecommendation, tuple[RuleResult, ...]]:
        """Evaluate rules top to bottom; the first recommendation wins."""
        results: list[RuleResult] = []
        winner: CategoryRecommendation | None = None

        for rule in self.rules:
            if winner is not None:
                results.append(
                    RuleResult(
                        rule_id=rule.rule_id,
                        status=RuleStatus.NOT_EVALUATED,
                        explanation=f"Shadowed by {winner.rule_id}.",
                    )
                )
                continue

            recommendation = rule.evaluate(context, history)
            if recommendation is None:
                results.append(
                    RuleResult(
                        rule_id=rule.rule_id,
                        status=RuleStatus.SKIPPED,
                        explanation="Guard did not match.",
                    )
                )
                continue

            winner = recommendation
            results.append(
                RuleResult(
                    rule_id=rule.rule_id,
                    status=RuleStatus.FIRED,
                    recommendation=recommendation,
                    explanation=recommendation.explanation,
                )
            )

        if winner is None:
            raise PrescriptionError("No category rule produced a recommendation")
        return winner, tuple(results)

    def _select_definition(
        self,
        category: MicrodoseCategory,
        context: UserContext,
        history: list[SessionRecord],
    ) -> tuple[MicrodoseDefinition, str]:
        candidates = self.catalog.definitions_in(category)
        if not candidates:
            raise PrescriptionError(f"No microdoses found in category {category.name}")

        if category == MicrodoseCategory.VO2:
            return _select_vo2(candidates, history)
        if category == MicrodoseCategory.MOBILITY:
            return _select_mobility(candidates, context.user_state.last_mobility_def_id)
        # GTG: always the first candidate by id
        return candidates[0], f"GTG: {candidates[0].id}."


def _select_vo2(
    candidates: list[MicrodoseDefinition], history: list[SessionRecord]
) -> tuple[MicrodoseDefinition, str]:
    """Round-robin: first candidate that differs from the last VO2 performed."""
    last = find_last_by_category(history, MicrodoseCategory.VO2)
    if last is None:
        return candidates[0], f"VO2: no previous VO2, picked {candidates[0].id}."

    for candidate in candidates:
        if candidate.id != last.definition_id:
            return candidate, f"VO2: last was {last.definition_id}, picked {candidate.id}."
    return candidates[0], f"VO2: only {candidates[0].id} available."


def _select_mobility(
    candidates: list[MicrodoseDefinition], cursor: str | None
) -> tuple[MicrodoseDefinition, str]:
    """Round-robin driven by the persisted ``last_mobility_def_id`` cursor."""
    ids = [c.id for c in candidates]
    if cursor is None or cursor not in ids:
        return candidates[0], f"Mobility: no cursor, picked {candidates[0].id}."

    chosen = candidates[(ids.index(cursor) + 1) % len(candidates)]
    return chosen, f"Mobility: cursor at {cursor}, picked {chosen.id}."


def compute_intensity(
    definition: MicrodoseDefinition, context: UserContext
) -> tuple[int | None, MovementStyle]:
    """Stored progression if present, else the first block's declared defaults."""
    state = context.user_state.progressions.get(definition.id)
    if state is not None:
        return state.reps, state.style
    return definition.default_reps(), definition.default_style()


def prescribe_next(
    catalog: Catalog,
    context: UserContext,
    target_category: MicrodoseCategory | None = None,
) -> Prescription:
    """Functional entry point: prescription only, no trace."""
    prescription, _ = MicrodoseEngine(catalog).prescribe(context, target_category)
    return prescription
