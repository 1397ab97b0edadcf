"""Tests for record codecs used by the WAL, archive and state file."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from microdose_engine.models.enums import BurpeeStyle
from microdose_engine.models.movement import Band, BandMetric, RepsMetric
from microdose_engine.models.progression_state import ProgressionState, UserMicrodoseState
from microdose_engine.models.session import Session
from microdose_engine.serialization import (
    RecordFormatError,
    session_from_dict,
    session_from_row,
    session_to_dict,
    session_to_row,
    state_from_dict,
    state_to_dict,
)
from microdose_engine.serialization.records import parse_timestamp


@pytest.fixture
def full_session(now: datetime) -> Session:
    return Session(
        id=uuid.UUID("12345678-1234-4678-9234-567812345678"),
        definition_id="gtg_pullup_band",
        performed_at=now,
        started_at=now - timedelta(seconds=30),
        completed_at=now,
        actual_duration_seconds=30,
        metrics_realized=(RepsMetric("reps", 4, 1, 8), BandMetric("band", "red")),
        perceived_rpe=6,
        avg_hr=110,
        max_hr=128,
    )


class TestTimestamps:
    def test_z_suffix(self) -> None:
        assert parse_timestamp("2024-03-05T12:00:00Z") == datetime(
            2024, 3, 5, 12, tzinfo=timezone.utc
        )

    def test_naive_is_utc(self) -> None:
        assert parse_timestamp("2024-03-05T12:00:00").tzinfo == timezone.utc

    @pytest.mark.parametrize("value", ["", "yesterday", None, 17])
    def test_invalid(self, value) -> None:
        with pytest.raises(RecordFormatError):
            parse_timestamp(value)


class TestSessionCodec:
    def test_dict_round_trip(self, full_session: Session) -> None:
        assert session_from_dict(session_to_dict(full_session)) == full_session

    def test_dict_field_names(self, full_session: Session) -> None:
        data = session_to_dict(full_session)
        assert data["id"] == "12345678-1234-4678-9234-567812345678"
        assert data["performed_at"] == "2024-03-05T12:00:00+00:00"
        assert data["metrics_realized"][1] == {
            "type": "band",
            "key": "band",
            "default": "red",
            "progressable": False,
        }

    def test_row_drops_metrics(self, full_session: Session) -> None:
        row = session_to_row(full_session)
        assert row["duration"] == 30
        restored = session_from_row(row)
        assert restored.metrics_realized == ()
        assert restored.id == full_session.id
        assert restored.max_hr == 128

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"id": "not-a-uuid", "definition_id": "x", "performed_at": "2024-03-05T12:00:00Z"},
            {"id": str(uuid.uuid4()), "definition_id": "x", "performed_at": "nope"},
            {
                "id": str(uuid.uuid4()),
                "definition_id": "x",
                "performed_at": "2024-03-05T12:00:00Z",
                "metrics_realized": "reps",
            },
            [],
        ],
    )
    def test_malformed_dicts(self, data) -> None:
        with pytest.raises(RecordFormatError):
            session_from_dict(data)


class TestStateCodec:
    def test_round_trip(self, now: datetime) -> None:
        state = UserMicrodoseState(
            progressions={
                "emom_burpee_5m": ProgressionState(6, BurpeeStyle.SIX_COUNT, 8, now),
                "gtg_pullup_band": ProgressionState(4, Band("red"), 1, None),
                "emom_kb_swing_5m": ProgressionState(7, None, 2, now),
            },
            last_mobility_def_id="mobility_hip_cars",
        )
        assert state_from_dict(state_to_dict(state)) == state

    def test_empty_document(self) -> None:
        assert state_from_dict({}) == UserMicrodoseState()

    def test_rejects_non_object(self) -> None:
        with pytest.raises(RecordFormatError):
            state_from_dict(["progressions"])
