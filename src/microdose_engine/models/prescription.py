"""Prescription: the engine's output."""

from __future__ import annotations

from dataclasses import dataclass

from microdose_engine.models.enums import MicrodoseCategory
from microdose_engine.models.movement import MicrodoseDefinition, MovementStyle


@dataclass(frozen=True)
class Prescription:
    """The chosen definition plus its intensity for right now."""

    definition: MicrodoseDefinition
    reps: int | None
    style: MovementStyle
    description: str = ""

    @property
    def category(self) -> MicrodoseCategory:
        return self.definition.category
