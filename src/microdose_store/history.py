"""Recent-session view: WAL + archive, deduplicated, windowed, newest first."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from microdose_engine.config import DEFAULT_LOCK_TIMEOUT_S
from microdose_engine.models.enums import DEFAULT_HISTORY_WINDOW_DAYS
from microdose_engine.models.session import Session
from microdose_store.archive import read_archive
from microdose_store.exceptions import LockTimeoutError
from microdose_store.wal import read_sessions

logger = logging.getLogger(__name__)


def _read_or_empty(reader, path: Path, lock_timeout_s: float, label: str) -> list[Session]:
    try:
        return reader(path, lock_timeout_s)
    except LockTimeoutError as exc:
        logger.warning("Skipping %s for this read: %s", label, exc)
        return []


def load_recent_sessions(
    wal_path: Path | str,
    csv_path: Path | str,
    days: int = DEFAULT_HISTORY_WINDOW_DAYS,
    now: datetime | None = None,
    lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S,
) -> list[Session]:
    """Sessions performed in the last *days* days, newest first.

    A session present in both sources is taken from the WAL. Missing
    sources contribute nothing; malformed records are skipped.
    """
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)
    sessions: list[Session] = []
    seen_ids = set()

    wal_sessions = _read_or_empty(read_sessions, Path(wal_path), lock_timeout_s, "WAL")
    for session in wal_sessions:
        if session.performed_at >= cutoff and session.id not in seen_ids:
            seen_ids.add(session.id)
            sessions.append(session)
    wal_count = len(sessions)

    archived = _read_or_empty(read_archive, Path(csv_path), lock_timeout_s, "archive")
    for session in archived:
        if session.performed_at >= cutoff and session.id not in seen_ids:
            seen_ids.add(session.id)
            sessions.append(session)

    sessions.sort(key=lambda s: s.performed_at, reverse=True)
    logger.info(
        "Loaded %d sessions from last %d days (%d from WAL, %d from archive)",
        len(sessions),
        days,
        wal_count,
        len(sessions) - wal_count,
    )
    return sessions
