"""Progression rules for increasing workout intensity.

Upgrades are triggered explicitly by the user ("harder"), never by
completion. Each movement kind has its own monotonic rule:

    Burpees:   reps climb to the ceiling, then the style steps up
               (4-count -> 6-count -> 6-count-2-pump -> seal) and reps reset.
    KB swings: reps = min(base + level + 1, max).
    Pull-ups:  reps climb to a fixed ceiling; band choice stays manual.

Every rule returns a new ProgressionState; a successful upgrade bumps
``level`` and stamps ``last_upgraded``. A rule already at its limit
returns the state unchanged.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone

from microdose_engine.catalog import get_default_catalog
from microdose_engine.config import ProgressionConfig
from microdose_engine.models.catalog import Catalog
from microdose_engine.models.enums import BURPEE_STYLE_LADDER, BurpeeStyle, MovementKind
from microdose_engine.models.movement import MicrodoseDefinition
from microdose_engine.models.progression_state import ProgressionState, UserMicrodoseState

logger = logging.getLogger(__name__)

# Where a burpee progression restarts if its stored style is not a burpee style
_BURPEE_FALLBACK = (BurpeeStyle.FOUR_COUNT, 3)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _bump(state: ProgressionState, now: datetime | None, **changes) -> ProgressionState:
    return dataclasses.replace(
        state, level=state.level + 1, last_upgraded=now or _utcnow(), **changes
    )


def upgrade_burpee(
    state: ProgressionState, rep_ceiling: int, now: datetime | None = None
) -> ProgressionState:
    """Add a rep below the ceiling; at the ceiling step up the style ladder."""
    if state.reps < rep_ceiling:
        return _bump(state, now, reps=state.reps + 1)

    if state.style == BurpeeStyle.SEAL:
        logger.debug("Burpee progression: at max level (seal @ %d)", rep_ceiling)
        if state.reps != rep_ceiling:
            return dataclasses.replace(state, reps=rep_ceiling)
        return state

    if isinstance(state.style, BurpeeStyle):
        new_style, reset_reps = BURPEE_STYLE_LADDER[state.style]
    else:
        new_style, reset_reps = _BURPEE_FALLBACK

    upgraded = _bump(state, now, style=new_style, reps=min(reset_reps, rep_ceiling))
    logger.debug(
        "Burpee progression: style %s, reps reset to %d", new_style.name, upgraded.reps
    )
    return upgraded


def upgrade_kb_swing(
    state: ProgressionState, base_reps: int, max_reps: int, now: datetime | None = None
) -> ProgressionState:
    """Linear progression: base + level + 1, capped at *max_reps*."""
    if state.reps >= max_reps:
        logger.debug("KB swing progression: already at max (%d reps)", max_reps)
        return state
    return _bump(state, now, reps=min(base_reps + state.level + 1, max_reps))


def upgrade_pullup(
    state: ProgressionState, max_reps: int, now: datetime | None = None
) -> ProgressionState:
    """One more rep up to *max_reps*. The band is never changed here."""
    if state.reps >= max_reps:
        logger.debug("Pullup progression: already at max (%d reps)", max_reps)
        return state
    return _bump(state, now, reps=state.reps + 1)


def initial_progression(definition: MicrodoseDefinition) -> ProgressionState:
    """Starting state for a definition: its first block's declared defaults."""
    return ProgressionState(
        reps=definition.default_reps() or 0,
        style=definition.default_style(),
    )


def increase_intensity(
    definition_id: str,
    user_state: UserMicrodoseState,
    config: ProgressionConfig | None = None,
    catalog: Catalog | None = None,
    now: datetime | None = None,
) -> UserMicrodoseState:
    """Apply the upgrade rule for *definition_id* and return the new user state.

    The rule is chosen by the kind of the definition's first-block movement.
    Unknown or non-progressable definitions leave the state unchanged.
    """
    config = config or ProgressionConfig()
    catalog = catalog or get_default_catalog()

    definition = catalog.microdoses.get(definition_id)
    if definition is None:
        logger.warning("Unknown definition ID for progression: %s", definition_id)
        return user_state

    movement = catalog.movement_for(definition)
    kind = movement.kind if movement is not None else None
    current = user_state.progressions.get(definition_id) or initial_progression(definition)

    if kind == MovementKind.BURPEE:
        upgraded = upgrade_burpee(current, config.burpee_rep_ceiling, now)
    elif kind == MovementKind.KETTLEBELL_SWING:
        base = definition.default_reps() or 0
        upgraded = upgrade_kb_swing(current, base, config.kb_swing_max_reps, now)
    elif kind == MovementKind.PULLUP:
        upgraded = upgrade_pullup(current, config.pullup_max_reps, now)
    else:
        logger.warning("Definition %s has no progression rule", definition_id)
        return user_state

    logger.info(
        "Increased intensity for %s: level %d, %d reps",
        definition_id,
        upgraded.level,
        upgraded.reps,
    )
    return user_state.with_progression(definition_id, upgraded)
