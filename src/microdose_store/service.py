"""MicrodoseService: wires the pure engine to the durable stores.

Usage:
    service = MicrodoseService(Config.from_env())
    prescription, trace = service.prescribe()
    service.complete(prescription)   # or service.skip(prescription)
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timedelta, timezone

from microdose_engine.catalog import build_catalog
from microdose_engine.config import Config
from microdose_engine.engine import MicrodoseEngine
from microdose_engine.models.catalog import Catalog
from microdose_engine.models.context import UserContext
from microdose_engine.models.decision_trace import DecisionTrace
from microdose_engine.models.enums import MicrodoseCategory
from microdose_engine.models.movement import MetricSpec, RepsMetric
from microdose_engine.models.prescription import Prescription
from microdose_engine.models.progression_state import ProgressionState, UserMicrodoseState
from microdose_engine.models.session import Session, ShownButSkipped
from microdose_engine.progression import increase_intensity
from microdose_store.history import load_recent_sessions
from microdose_store.paths import DataPaths
from microdose_store.rollup import cleanup_processed_wals, wal_to_csv_and_archive
from microdose_store.state_store import load_user_state, update_user_state
from microdose_store.strength import load_external_strength
from microdose_store.wal import JsonlSink

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _realized_metrics(prescription: Prescription) -> tuple[MetricSpec, ...]:
    block = prescription.definition.first_block
    if block is None:
        return ()
    if prescription.reps is None:
        return block.metrics
    return tuple(
        dataclasses.replace(metric, default=prescription.reps)
        if isinstance(metric, RepsMetric)
        else metric
        for metric in block.metrics
    )


class MicrodoseService:
    """One user's prescribe / complete / skip / upgrade cycle on a data dir."""

    def __init__(self, config: Config | None = None, catalog: Catalog | None = None) -> None:
        self.config = config or Config()
        self.catalog = catalog if catalog is not None else build_catalog(self.config.custom_mobility)
        self.engine = MicrodoseEngine(self.catalog)
        self.paths = DataPaths(self.config.data_dir)
        self.sink = JsonlSink(self.paths.wal, self.config.lock_timeout_s)
        # Skips live only for this service instance
        self.skipped: list[ShownButSkipped] = []

    def build_context(self, now: datetime | None = None) -> UserContext:
        now = now or _utcnow()
        sessions = load_recent_sessions(
            self.paths.wal,
            self.paths.archive,
            days=self.config.history_window_days,
            now=now,
            lock_timeout_s=self.config.lock_timeout_s,
        )
        cutoff = now - timedelta(days=self.config.history_window_days)
        skipped = [s for s in self.skipped if s.shown_at >= cutoff]
        return UserContext(
            now=now,
            user_state=load_user_state(self.paths.state, self.config.lock_timeout_s),
            recent_sessions=tuple(sessions) + tuple(skipped),
            external_strength=load_external_strength(self.paths.strength_signal),
            equipment_available=self.config.equipment_available,
        )

    def prescribe(
        self,
        target_category: MicrodoseCategory | None = None,
        now: datetime | None = None,
    ) -> tuple[Prescription, DecisionTrace]:
        return self.engine.prescribe(self.build_context(now), target_category)

    def complete(
        self,
        prescription: Prescription,
        now: datetime | None = None,
        perceived_rpe: int | None = None,
        avg_hr: int | None = None,
        max_hr: int | None = None,
        actual_duration_seconds: int | None = None,
    ) -> Session:
        """Record *prescription* as done: WAL append, then state update.

        The state update moves the mobility cursor and creates the
        definition's progression entry from the prescribed intensity if it
        does not exist yet.

        Raises:
            LockTimeoutError, PersistenceError: nothing was recorded if the
                WAL append failed. A failed state update leaves the
                session recorded.
        """
        now = now or _utcnow()
        definition = prescription.definition
        session = Session.new(
            definition.id,
            performed_at=now,
            completed_at=now,
            actual_duration_seconds=(
                actual_duration_seconds
                if actual_duration_seconds is not None
                else definition.suggested_duration_seconds
            ),
            metrics_realized=_realized_metrics(prescription),
            perceived_rpe=perceived_rpe,
            avg_hr=avg_hr,
            max_hr=max_hr,
        )
        self.paths.ensure_dirs()
        self.sink.append(session)
        logger.info("Recorded session %s for %s", session.id, definition.id)

        def _record_completion(state: UserMicrodoseState) -> UserMicrodoseState:
            if definition.category == MicrodoseCategory.MOBILITY:
                state = state.with_mobility_cursor(definition.id)
            if definition.id not in state.progressions:
                seeded = ProgressionState(reps=prescription.reps or 0, style=prescription.style)
                state = state.with_progression(definition.id, seeded)
            return state

        update_user_state(self.paths.state, _record_completion, self.config.lock_timeout_s)
        return session

    def skip(self, prescription: Prescription, now: datetime | None = None) -> ShownButSkipped:
        """Note a declined prescription in memory. Nothing is persisted."""
        marker = ShownButSkipped(definition_id=prescription.definition.id, shown_at=now or _utcnow())
        self.skipped.append(marker)
        logger.info("Skipped %s", marker.definition_id)
        return marker

    def upgrade(self, definition_id: str, now: datetime | None = None) -> ProgressionState | None:
        """Apply the progression rule for *definition_id* and persist it."""
        self.paths.ensure_dirs()
        state = update_user_state(
            self.paths.state,
            lambda current: increase_intensity(
                definition_id,
                current,
                self.config.progression,
                self.catalog,
                now or _utcnow(),
            ),
            self.config.lock_timeout_s,
        )
        return state.progressions.get(definition_id)

    def rollup(self, cleanup: bool = False) -> int:
        """Archive the WAL; optionally delete retired segments afterwards."""
        count = wal_to_csv_and_archive(
            self.paths.wal, self.paths.archive, self.config.lock_timeout_s
        )
        if cleanup:
            cleanup_processed_wals(self.paths.wal_dir)
        return count
