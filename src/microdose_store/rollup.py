"""Roll WAL sessions into the CSV archive and retire the WAL segment.

Ordering is the safety invariant: the archive is written and fsynced
before the WAL is renamed (never deleted) to ``*.processed``. A crash
between the two leaves the WAL intact and the next rollup replays it.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from microdose_engine.config import DEFAULT_LOCK_TIMEOUT_S
from microdose_store import archive
from microdose_store.exceptions import PersistenceError
from microdose_store.locking import fsync_directory, is_same_file, locked
from microdose_store.paths import PROCESSED_SUFFIX
from microdose_store.wal import parse_wal_bytes

logger = logging.getLogger(__name__)


def processed_path_for(wal_path: Path) -> Path:
    """``<wal>.processed``, or a timestamped name if that is already taken."""
    candidate = wal_path.with_name(wal_path.name + PROCESSED_SUFFIX)
    if not candidate.exists():
        return candidate
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    return wal_path.with_name(f"{wal_path.stem}.{stamp}{wal_path.suffix}{PROCESSED_SUFFIX}")


def wal_to_csv_and_archive(
    wal_path: Path | str,
    csv_path: Path | str,
    lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S,
) -> int:
    """Move every WAL session into the archive and retire the WAL.

    The WAL's exclusive lock is held from the read through the rename, so
    appenders either land in this segment before the read or in a fresh
    segment afterwards.

    Returns:
        Number of sessions read from the WAL (0 if absent or empty).

    Raises:
        LockTimeoutError: the WAL or archive stayed locked.
        PersistenceError: the archive write or the rename failed; the
            WAL is left in place.
    """
    wal_path = Path(wal_path)
    csv_path = Path(csv_path)

    try:
        wal_fh = open(wal_path, "rb")
    except FileNotFoundError:
        logger.info("No WAL at %s, nothing to roll up", wal_path)
        return 0

    with wal_fh, locked(wal_fh, True, lock_timeout_s):
        if not is_same_file(wal_fh, wal_path):
            logger.info("WAL %s was rolled up concurrently", wal_path)
            return 0

        sessions = parse_wal_bytes(wal_fh.read(), source=wal_path)
        if not sessions:
            logger.info("No sessions in WAL to roll up")
            return 0

        try:
            csv_path.parent.mkdir(parents=True, exist_ok=True)
            with open(csv_path, "a+b") as csv_fh, locked(csv_fh, True, lock_timeout_s):
                written = archive.append_locked(csv_fh, sessions, source=csv_path)
            fsync_directory(csv_path.parent)
        except OSError as exc:
            raise PersistenceError(f"Failed to write archive {csv_path}: {exc}") from exc
        logger.info("Wrote %d sessions to CSV %s", written, csv_path)

        processed = processed_path_for(wal_path)
        try:
            os.rename(wal_path, processed)
            fsync_directory(wal_path.parent)
        except OSError as exc:
            raise PersistenceError(f"Failed to retire WAL {wal_path}: {exc}") from exc
        logger.info("Archived WAL to %s", processed)

    return len(sessions)


def cleanup_processed_wals(directory: Path | str) -> int:
    """Delete every ``*.processed`` file in *directory*. Irreversible.

    Returns the number of files removed; a second call is a no-op.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    count = 0
    for path in sorted(directory.iterdir()):
        if path.is_file() and path.name.endswith(PROCESSED_SUFFIX):
            path.unlink()
            logger.debug("Removed processed WAL %s", path)
            count += 1

    if count:
        logger.info("Cleaned up %d processed WAL files", count)
    return count
