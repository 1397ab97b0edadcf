"""Frozen decision context: the sole input to the engine besides the catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from microdose_engine.models.progression_state import UserMicrodoseState
from microdose_engine.models.session import SessionRecord
from microdose_engine.models.strength import ExternalStrengthSignal


@dataclass(frozen=True)
class UserContext:
    """Immutable snapshot of everything the engine needs for one decision.

    ``recent_sessions`` may mix real sessions and skip markers, in any
    order; the engine sorts them newest first.
    """

    now: datetime
    user_state: UserMicrodoseState = field(default_factory=UserMicrodoseState)
    recent_sessions: tuple[SessionRecord, ...] = field(default_factory=tuple)
    external_strength: ExternalStrengthSignal | None = None
    # Informational only; no rule filters on equipment yet
    equipment_available: tuple[str, ...] = field(default_factory=tuple)
