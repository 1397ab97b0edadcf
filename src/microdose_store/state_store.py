"""Durable user progression state (JSON document, atomic replace).

Readers never see a partially written file: saves go to a temp file in
the same directory which is fsynced and then renamed over the target.
A sidecar ``.lock`` file serializes writers and read-modify-write cycles.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable

from microdose_engine.config import DEFAULT_LOCK_TIMEOUT_S
from microdose_engine.models.progression_state import UserMicrodoseState
from microdose_engine.serialization import RecordFormatError, state_from_dict, state_to_dict
from microdose_store.exceptions import LockTimeoutError, PersistenceError
from microdose_store.locking import fsync_directory, lock_file

logger = logging.getLogger(__name__)


def _lock_path(path: Path) -> Path:
    return path.with_name(path.name + ".lock")


def _read_state(path: Path) -> UserMicrodoseState:
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No state file at %s, using defaults", path)
        return UserMicrodoseState()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read state file %s: %s. Using defaults.", path, exc)
        return UserMicrodoseState()

    try:
        return state_from_dict(json.loads(contents))
    except (json.JSONDecodeError, RecordFormatError) as exc:
        logger.warning("Failed to parse state file %s: %s. Using defaults.", path, exc)
        return UserMicrodoseState()


def _write_state(path: Path, state: UserMicrodoseState) -> None:
    payload = json.dumps(state_to_dict(state), indent=2, sort_keys=True) + "\n"
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
        fsync_directory(path.parent)
    except OSError as exc:
        raise PersistenceError(f"Failed to save state to {path}: {exc}") from exc
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)


def load_user_state(
    path: Path | str,
    lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S,
) -> UserMicrodoseState:
    """Load persisted state; any failure degrades to defaults with a warning."""
    path = Path(path)
    if not path.exists():
        logger.debug("No state file at %s, using defaults", path)
        return UserMicrodoseState()
    try:
        with lock_file(_lock_path(path), exclusive=False, timeout_s=lock_timeout_s):
            return _read_state(path)
    except LockTimeoutError as exc:
        logger.warning("%s. Using default state.", exc)
        return UserMicrodoseState()
    except OSError as exc:
        logger.warning("Failed to lock state file %s: %s. Using defaults.", path, exc)
        return UserMicrodoseState()


def save_user_state(
    path: Path | str,
    state: UserMicrodoseState,
    lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S,
) -> None:
    """Atomically replace the state file.

    Raises:
        LockTimeoutError: another writer held the lock too long.
        PersistenceError: the write failed; the previous file is intact.
    """
    path = Path(path)
    try:
        with lock_file(_lock_path(path), exclusive=True, timeout_s=lock_timeout_s):
            _write_state(path, state)
    except OSError as exc:
        raise PersistenceError(f"Failed to lock state file {path}: {exc}") from exc
    logger.debug("Saved user state to %s", path)


def update_user_state(
    path: Path | str,
    mutator: Callable[[UserMicrodoseState], UserMicrodoseState],
    lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S,
) -> UserMicrodoseState:
    """Load, apply *mutator* and save while holding the writer lock.

    Concurrent updaters are serialized, so none of their changes are lost.
    Returns the state that was saved.
    """
    path = Path(path)
    try:
        with lock_file(_lock_path(path), exclusive=True, timeout_s=lock_timeout_s):
            updated = mutator(_read_state(path))
            _write_state(path, updated)
    except OSError as exc:
        raise PersistenceError(f"Failed to lock state file {path}: {exc}") from exc
    return updated
