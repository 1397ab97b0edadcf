"""Write-ahead log of performed sessions.

One compact JSON object per line. Appends take an exclusive flock and are
fsynced before the lock is released; reads take a shared flock and skip
any line that does not decode, so a torn final line from a crash never
fails the whole read.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from microdose_engine.config import DEFAULT_LOCK_TIMEOUT_S
from microdose_engine.models.session import Session
from microdose_engine.serialization import RecordFormatError, session_from_dict, session_to_dict
from microdose_store.exceptions import PersistenceError
from microdose_store.locking import is_same_file, locked

logger = logging.getLogger(__name__)

# How often an appender re-opens the WAL after losing a race with a rollup rename
_MAX_REOPEN_ATTEMPTS = 5


class SessionSink(Protocol):
    """Anything that durably records performed sessions."""

    def append(self, session: Session) -> None: ...


def encode_session(session: Session) -> bytes:
    """Serialize a session as one newline-terminated WAL record."""
    line = json.dumps(session_to_dict(session), separators=(",", ":"), sort_keys=True)
    return line.encode("utf-8") + b"\n"


class JsonlSink:
    """Appends sessions to a JSON Lines WAL under an exclusive file lock."""

    def __init__(self, path: Path | str, lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S) -> None:
        self.path = Path(path)
        self.lock_timeout_s = lock_timeout_s

    def append(self, session: Session) -> None:
        """Durably append one session.

        Raises:
            TypeError: *session* is not a real Session (e.g. a skip marker).
            LockTimeoutError: the WAL stayed locked past the timeout.
            PersistenceError: the write or fsync failed. The WAL is
                truncated back to its previous length where possible.
        """
        if not isinstance(session, Session):
            raise TypeError(f"Only performed sessions can be logged, got {type(session).__name__}")

        record = encode_session(session)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Cannot create WAL directory {self.path.parent}: {exc}") from exc

        for _ in range(_MAX_REOPEN_ATTEMPTS):
            try:
                with open(self.path, "a+b") as fh, locked(fh, True, self.lock_timeout_s):
                    if not is_same_file(fh, self.path):
                        # A rollup renamed this segment while we waited for the lock
                        logger.debug("WAL %s was rotated, reopening", self.path)
                        continue
                    self._write_locked(fh, record)
                    logger.debug("Appended session %s to WAL", session.id)
                    return
            except OSError as exc:
                raise PersistenceError(f"Failed to append to WAL {self.path}: {exc}") from exc

        raise PersistenceError(f"WAL {self.path} kept rotating; append not recorded")

    @staticmethod
    def _write_locked(fh, record: bytes) -> None:
        fd = fh.fileno()
        size_before = os.fstat(fd).st_size
        # Terminate a torn record left by an earlier crash so ours stays parseable
        if size_before > 0 and os.pread(fd, 1, size_before - 1) != b"\n":
            record = b"\n" + record
        try:
            fh.write(record)
            fh.flush()
            os.fsync(fd)
        except OSError:
            try:
                os.ftruncate(fd, size_before)
            except OSError as trunc_exc:
                logger.error("Could not roll back partial WAL write: %s", trunc_exc)
            raise


def parse_wal_bytes(data: bytes, source: object = "<wal>") -> list[Session]:
    """Decode every well-formed record in *data*, in file order."""
    lines = data.split(b"\n")
    sessions: list[Session] = []

    for index, raw in enumerate(lines):
        if not raw.strip():
            continue
        try:
            sessions.append(session_from_dict(json.loads(raw.decode("utf-8"))))
        except (UnicodeDecodeError, json.JSONDecodeError, RecordFormatError) as exc:
            if index == len(lines) - 1:
                logger.warning("Dropping truncated final line %d of %s: %s", index + 1, source, exc)
            else:
                logger.warning("Failed to parse session at line %d of %s: %s", index + 1, source, exc)

    return sessions


def read_sessions(path: Path | str, lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S) -> list[Session]:
    """Read all parseable sessions from the WAL, in append order.

    A missing WAL is empty. Raises LockTimeoutError if the file stays
    exclusively locked past the timeout.
    """
    path = Path(path)
    try:
        fh = open(path, "rb")
    except FileNotFoundError:
        return []

    with fh, locked(fh, False, lock_timeout_s):
        data = fh.read()

    sessions = parse_wal_bytes(data, source=path)
    logger.debug("Read %d sessions from WAL %s", len(sessions), path)
    return sessions
