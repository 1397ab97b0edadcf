"""Performed sessions and the transient "shown but skipped" marker.

Only :class:`Session` is persistable. :class:`ShownButSkipped` exists to
perturb the in-memory history during one decision session and is
rejected by every store.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from microdose_engine.models.movement import MetricSpec


@dataclass(frozen=True)
class Session:
    """A microdose the user confirmed as done. Immutable once created."""

    id: uuid.UUID
    definition_id: str
    performed_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    actual_duration_seconds: int | None = None
    metrics_realized: tuple[MetricSpec, ...] = field(default_factory=tuple)
    perceived_rpe: int | None = None
    avg_hr: int | None = None
    max_hr: int | None = None

    @classmethod
    def new(
        cls,
        definition_id: str,
        performed_at: datetime,
        **kwargs,
    ) -> Session:
        """Create a session with a fresh random (version 4) id."""
        return cls(id=uuid.uuid4(), definition_id=definition_id, performed_at=performed_at, **kwargs)

    @property
    def timestamp(self) -> datetime:
        return self.performed_at


@dataclass(frozen=True)
class ShownButSkipped:
    """A prescription the user declined. In-memory only."""

    definition_id: str
    shown_at: datetime

    @property
    def timestamp(self) -> datetime:
        return self.shown_at


# Entries of the engine's recent-history view
SessionRecord = Union[Session, ShownButSkipped]
