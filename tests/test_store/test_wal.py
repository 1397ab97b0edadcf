"""Tests for the JSON Lines session WAL."""

from __future__ import annotations

import json
import logging
import multiprocessing
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from microdose_engine.models.movement import RepsMetric
from microdose_engine.models.session import Session, ShownButSkipped
from microdose_store.exceptions import LockTimeoutError, PersistenceError
from microdose_store.locking import locked
from microdose_store.paths import DataPaths
from microdose_store.wal import JsonlSink, encode_session, parse_wal_bytes, read_sessions


def _append_many(wal_path: str, worker: int, count: int) -> None:
    sink = JsonlSink(wal_path, lock_timeout_s=30.0)
    for i in range(count):
        sink.append(Session.new(f"emom_worker{worker}_{i}", datetime.now().astimezone()))


class TestJsonlSink:
    def test_append_and_read_back(self, paths: DataPaths, now: datetime) -> None:
        sink = JsonlSink(paths.wal)
        first = Session.new("emom_burpee_5m", now, metrics_realized=(RepsMetric("reps", 4, 2, 10),))
        second = Session.new("gtg_pullup_band", now, avg_hr=120)
        sink.append(first)
        sink.append(second)
        assert read_sessions(paths.wal) == [first, second]

    def test_one_json_object_per_line(self, paths: DataPaths, now: datetime) -> None:
        sink = JsonlSink(paths.wal)
        sink.append(Session.new("emom_burpee_5m", now))
        sink.append(Session.new("emom_kb_swing_5m", now))
        lines = paths.wal.read_bytes().split(b"\n")
        assert lines[-1] == b""
        assert [json.loads(line)["definition_id"] for line in lines[:-1]] == [
            "emom_burpee_5m",
            "emom_kb_swing_5m",
        ]

    def test_creates_missing_directory(self, tmp_path: Path, now: datetime) -> None:
        wal = tmp_path / "deep" / "wal" / "s.wal"
        JsonlSink(wal).append(Session.new("emom_burpee_5m", now))
        assert len(read_sessions(wal)) == 1

    def test_rejects_skip_marker(self, paths: DataPaths, now: datetime) -> None:
        with pytest.raises(TypeError):
            JsonlSink(paths.wal).append(ShownButSkipped("emom_burpee_5m", now))
        assert not paths.wal.exists()

    def test_repairs_torn_tail(self, paths: DataPaths, now: datetime) -> None:
        paths.wal.write_bytes(b'{"id": "abc", "definit')
        session = Session.new("emom_burpee_5m", now)
        JsonlSink(paths.wal).append(session)
        assert read_sessions(paths.wal) == [session]

    def test_failed_write_rolls_back(self, paths: DataPaths, now: datetime) -> None:
        sink = JsonlSink(paths.wal)
        sink.append(Session.new("emom_burpee_5m", now))
        before = paths.wal.read_bytes()

        with patch("microdose_store.wal.os.fsync", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError, match="disk full"):
                sink.append(Session.new("emom_kb_swing_5m", now))

        assert paths.wal.read_bytes() == before

    def test_lock_timeout(self, paths: DataPaths, now: datetime) -> None:
        paths.wal.touch()
        sink = JsonlSink(paths.wal, lock_timeout_s=0.1)
        with open(paths.wal, "rb") as holder, locked(holder, True):
            with pytest.raises(LockTimeoutError) as excinfo:
                sink.append(Session.new("emom_burpee_5m", now))
        assert excinfo.value.retryable is True

    def test_concurrent_appenders_lose_nothing(self, paths: DataPaths) -> None:
        ctx = multiprocessing.get_context("spawn")
        workers = [
            ctx.Process(target=_append_many, args=(str(paths.wal), w, 25)) for w in range(4)
        ]
        for proc in workers:
            proc.start()
        for proc in workers:
            proc.join(timeout=120)
            assert proc.exitcode == 0

        sessions = read_sessions(paths.wal)
        assert len(sessions) == 100
        assert len({s.id for s in sessions}) == 100
        for line in paths.wal.read_bytes().splitlines():
            json.loads(line)


class TestReadSessions:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert read_sessions(tmp_path / "absent.wal") == []

    def test_skips_malformed_lines(self, paths: DataPaths, now: datetime, caplog) -> None:
        good = Session.new("emom_burpee_5m", now)
        JsonlSink(paths.wal).append(good)
        with open(paths.wal, "ab") as fh:
            fh.write(b"not json\n")
            fh.write(b'{"definition_id": "x"}\n')
        JsonlSink(paths.wal).append(good)

        with caplog.at_level(logging.WARNING):
            assert read_sessions(paths.wal) == [good, good]
        assert "Failed to parse session at line 2" in caplog.text

    def test_truncated_final_line(self, now: datetime, caplog) -> None:
        session = Session.new("emom_burpee_5m", now)
        data = encode_session(session) + b'{"id": "1234'
        with caplog.at_level(logging.WARNING):
            assert parse_wal_bytes(data) == [session]
        assert "Dropping truncated final line" in caplog.text
