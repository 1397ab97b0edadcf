"""Per-definition progression state and the persisted user aggregate."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime

from microdose_engine.models.movement import MovementStyle


@dataclass(frozen=True)
class ProgressionState:
    """Current intensity for one definition.

    Upgrades produce a new instance; ``level`` only ever increases.
    """

    reps: int
    style: MovementStyle = None
    level: int = 0
    last_upgraded: datetime | None = None


@dataclass(frozen=True)
class UserMicrodoseState:
    """Everything persisted in the progression-state file."""

    progressions: dict[str, ProgressionState] = field(default_factory=dict)
    last_mobility_def_id: str | None = None

    def with_progression(self, definition_id: str, state: ProgressionState) -> UserMicrodoseState:
        """Return a copy with *definition_id*'s progression replaced."""
        progressions = dict(self.progressions)
        progressions[definition_id] = state
        return dataclasses.replace(self, progressions=progressions)

    def with_mobility_cursor(self, definition_id: str) -> UserMicrodoseState:
        return dataclasses.replace(self, last_mobility_def_id=definition_id)
