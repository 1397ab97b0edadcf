"""Tests for MicrodoseService: the prescribe / complete / skip / upgrade cycle."""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest

from microdose_engine.config import Config, CustomMobilityDrill
from microdose_engine.models.enums import BurpeeStyle, MicrodoseCategory
from microdose_store.archive import read_archive
from microdose_store.service import MicrodoseService
from microdose_store.state_store import load_user_state
from microdose_store.wal import read_sessions


@pytest.fixture
def service(config: Config) -> MicrodoseService:
    return MicrodoseService(config)


class TestMicrodoseService:
    def test_first_prescription_is_vo2(self, service: MicrodoseService, now: datetime) -> None:
        prescription, trace = service.prescribe(now=now)
        assert prescription.category == MicrodoseCategory.VO2
        assert trace.deciding_rule == "vo2_recency"

    def test_complete_appends_to_wal(self, service: MicrodoseService, now: datetime) -> None:
        prescription, _ = service.prescribe(now=now)
        session = service.complete(prescription, now=now, perceived_rpe=7)

        assert read_sessions(service.paths.wal) == [session]
        assert session.definition_id == "emom_burpee_5m"
        assert session.actual_duration_seconds == 300
        assert session.metrics_realized[0].default == 3

    def test_complete_seeds_progression_entry(
        self, service: MicrodoseService, now: datetime
    ) -> None:
        prescription, _ = service.prescribe(now=now)
        service.complete(prescription, now=now)
        progression = load_user_state(service.paths.state).progressions["emom_burpee_5m"]
        assert progression.reps == 3
        assert progression.style == BurpeeStyle.FOUR_COUNT
        assert progression.level == 0

    def test_completed_vo2_rotates_to_gtg(self, service: MicrodoseService, now: datetime) -> None:
        prescription, _ = service.prescribe(now=now)
        service.complete(prescription, now=now)
        following, _ = service.prescribe(now=now + timedelta(minutes=30))
        assert following.category == MicrodoseCategory.GTG

    def test_skip_never_touches_disk(self, service: MicrodoseService, now: datetime) -> None:
        prescription, _ = service.prescribe(now=now)
        service.complete(prescription, now=now)
        wal_before = service.paths.wal.read_bytes()
        state_before = service.paths.state.read_bytes()

        gtg, _ = service.prescribe(now=now + timedelta(minutes=5))
        marker = service.skip(gtg, now=now + timedelta(minutes=5))

        assert marker.definition_id == "gtg_pullup_band"
        assert service.paths.wal.read_bytes() == wal_before
        assert service.paths.state.read_bytes() == state_before

        # The skip still steers the next decision in this session
        after_skip, _ = service.prescribe(now=now + timedelta(minutes=6))
        assert after_skip.category == MicrodoseCategory.MOBILITY

    def test_mobility_completion_moves_cursor(
        self, service: MicrodoseService, now: datetime
    ) -> None:
        first, _ = service.prescribe(MicrodoseCategory.MOBILITY, now=now)
        service.complete(first, now=now)
        assert load_user_state(service.paths.state).last_mobility_def_id == first.definition.id

        second, _ = service.prescribe(MicrodoseCategory.MOBILITY, now=now)
        assert second.definition.id != first.definition.id

    def test_upgrade_persists_and_changes_intensity(
        self, service: MicrodoseService, now: datetime
    ) -> None:
        progression = service.upgrade("emom_burpee_5m", now=now)
        assert progression is not None
        assert progression.reps == 4
        assert progression.style == BurpeeStyle.FOUR_COUNT

        prescription, _ = service.prescribe(MicrodoseCategory.VO2, now=now)
        assert prescription.reps == 4

    def test_upgrade_non_progressable(self, service: MicrodoseService) -> None:
        assert service.upgrade("mobility_hip_cars") is None

    def test_strength_signal_is_read(self, service: MicrodoseService, now: datetime) -> None:
        service.paths.strength_signal.parent.mkdir(parents=True)
        service.paths.strength_signal.write_text(
            json.dumps(
                {
                    "last_session_at": (now - timedelta(hours=3)).isoformat(),
                    "session_type": "lower",
                }
            )
        )
        prescription, trace = service.prescribe(now=now)
        assert prescription.category == MicrodoseCategory.GTG
        assert trace.deciding_rule == "strength_override"

    def test_rollup_keeps_history_visible(self, service: MicrodoseService, now: datetime) -> None:
        prescription, _ = service.prescribe(now=now)
        session = service.complete(prescription, now=now)

        assert service.rollup(cleanup=True) == 1
        assert [s.id for s in read_archive(service.paths.archive)] == [session.id]
        assert list(service.paths.wal_dir.glob("*.processed")) == []

        following, _ = service.prescribe(now=now + timedelta(minutes=30))
        assert following.category == MicrodoseCategory.GTG

    def test_custom_mobility_from_config(self, data_dir) -> None:
        config = Config(
            data_dir=data_dir, custom_mobility=(CustomMobilityDrill("ankle", "Ankle CARs"),)
        )
        assert "mobility_ankle" in MicrodoseService(config).catalog.microdoses
