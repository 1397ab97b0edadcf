"""Tabular CSV archive of rolled-up sessions, read and written with pandas.

Header: id,definition_id,performed_at,started_at,completed_at,duration,
perceived_rpe,avg_hr,max_hr. Realized metrics are not archived.
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import IO, Iterable

import pandas as pd

from microdose_engine.config import DEFAULT_LOCK_TIMEOUT_S
from microdose_engine.models.session import Session
from microdose_engine.serialization import (
    ARCHIVE_COLUMNS,
    RecordFormatError,
    session_from_row,
    session_to_row,
)
from microdose_store.exceptions import ArchiveFormatError
from microdose_store.locking import locked

logger = logging.getLogger(__name__)

_INT_COLUMNS = frozenset({"duration", "perceived_rpe", "avg_hr", "max_hr"})
_REQUIRED_COLUMNS = ("id", "definition_id", "performed_at")


def sessions_to_frame(sessions: Iterable[Session]) -> pd.DataFrame:
    """One archive row per session, in ARCHIVE_COLUMNS order."""
    rows = [session_to_row(s) for s in sessions]
    columns = {}
    for name in ARCHIVE_COLUMNS:
        values = [row[name] for row in rows]
        dtype = "Int64" if name in _INT_COLUMNS else "string"
        columns[name] = pd.array(values, dtype=dtype)
    return pd.DataFrame(columns, columns=list(ARCHIVE_COLUMNS))


def frame_to_csv_bytes(frame: pd.DataFrame, header: bool) -> bytes:
    buffer = io.StringIO()
    frame.to_csv(buffer, header=header, index=False, na_rep="", lineterminator="\n")
    return buffer.getvalue().encode("utf-8")


def parse_archive_bytes(data: bytes, source: object = "<archive>") -> pd.DataFrame | None:
    """Parse archive content into a string-typed frame, or None if unusable.

    Rows with too many fields are logged and dropped by the parser.
    """
    if not data.strip():
        return None

    def _skip_bad_line(fields: list[str]) -> None:
        logger.warning("Skipping malformed archive row in %s: %s", source, fields)
        return None

    try:
        frame = pd.read_csv(
            io.BytesIO(data),
            dtype=str,
            keep_default_na=False,
            engine="python",
            on_bad_lines=_skip_bad_line,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        logger.warning("Unable to parse archive %s: %s", source, exc)
        return None

    missing = [c for c in _REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        logger.warning("Archive %s is missing columns %s; ignoring it", source, missing)
        return None
    return frame


def frame_to_sessions(frame: pd.DataFrame, source: object = "<archive>") -> list[Session]:
    """Convert frame rows to sessions, skipping rows that do not decode."""
    sessions: list[Session] = []
    for index, row in enumerate(frame.to_dict(orient="records")):
        cleaned = {key: (None if pd.isna(value) else value) for key, value in row.items()}
        try:
            sessions.append(session_from_row(cleaned))
        except RecordFormatError as exc:
            # +2: header line and 1-based numbering
            logger.warning("Failed to parse archive row %d of %s: %s", index + 2, source, exc)
    return sessions


def read_archive(path: Path | str, lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S) -> list[Session]:
    """Read every decodable session from the archive. Missing file -> []."""
    path = Path(path)
    try:
        fh = open(path, "rb")
    except FileNotFoundError:
        return []

    with fh, locked(fh, False, lock_timeout_s):
        data = fh.read()

    frame = parse_archive_bytes(data, source=path)
    if frame is None:
        return []
    sessions = frame_to_sessions(frame, source=path)
    logger.debug("Read %d sessions from archive %s", len(sessions), path)
    return sessions


def append_locked(fh: IO[bytes], sessions: list[Session], source: object = "<archive>") -> int:
    """Append *sessions* to an archive handle the caller holds exclusively.

    *fh* must be opened ``a+b``. Sessions whose id is already archived
    (a replay after a crash between archive write and WAL rename) are not
    written again. The data is fsynced before returning. Returns the
    number of rows written.

    Raises:
        ArchiveFormatError: the archive is non-empty but unparseable.
    """
    fd = fh.fileno()
    fh.seek(0)
    existing = fh.read()

    archived_ids: set[str] = set()
    frame = parse_archive_bytes(existing, source=source)
    if frame is not None:
        archived_ids = set(frame["id"])
    elif existing.strip():
        # Rows appended here would be unreadable and replays undetectable
        raise ArchiveFormatError(f"Archive {source} exists but cannot be parsed; not appending")

    fresh = [s for s in sessions if str(s.id) not in archived_ids]
    if len(fresh) < len(sessions):
        logger.info("%d sessions already archived, not re-appending", len(sessions) - len(fresh))
    if not fresh:
        return 0

    payload = frame_to_csv_bytes(sessions_to_frame(fresh), header=not existing.strip())
    if existing and not existing.endswith(b"\n"):
        payload = b"\n" + payload

    size_before = len(existing)
    try:
        fh.write(payload)
        fh.flush()
        os.fsync(fd)
    except OSError:
        try:
            os.ftruncate(fd, size_before)
        except OSError as trunc_exc:
            logger.error("Could not roll back partial archive write: %s", trunc_exc)
        raise
    return len(fresh)
