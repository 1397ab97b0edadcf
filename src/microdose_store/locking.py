"""Advisory cross-process file locks (``flock``) with a bounded wait."""

from __future__ import annotations

import contextlib
import fcntl
import logging
import os
import time
from pathlib import Path
from typing import IO, Iterator

from microdose_engine.config import DEFAULT_LOCK_TIMEOUT_S
from microdose_store.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)

_POLL_INTERVAL_S = 0.02


@contextlib.contextmanager
def locked(
    fh: IO,
    exclusive: bool,
    timeout_s: float = DEFAULT_LOCK_TIMEOUT_S,
    label: object | None = None,
) -> Iterator[IO]:
    """Hold a shared or exclusive flock on *fh* for the duration of the block.

    Polls with LOCK_NB until *timeout_s* elapses, then raises
    LockTimeoutError. The lock is released on every exit path.
    """
    operation = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
    deadline = time.monotonic() + timeout_s

    while True:
        try:
            fcntl.flock(fh.fileno(), operation | fcntl.LOCK_NB)
            break
        except BlockingIOError:
            if time.monotonic() >= deadline:
                raise LockTimeoutError(label or getattr(fh, "name", fh), timeout_s) from None
            time.sleep(_POLL_INTERVAL_S)

    try:
        yield fh
    finally:
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)


@contextlib.contextmanager
def lock_file(
    lock_path: Path,
    exclusive: bool,
    timeout_s: float = DEFAULT_LOCK_TIMEOUT_S,
) -> Iterator[None]:
    """Lock a sidecar ``*.lock`` file, for resources replaced by rename."""
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "a+b") as fh:
        with locked(fh, exclusive, timeout_s, label=lock_path):
            yield


def is_same_file(fh: IO, path: Path) -> bool:
    """True if *path* still names the inode open in *fh* (not renamed away)."""
    try:
        on_disk = os.stat(path)
    except FileNotFoundError:
        return False
    opened = os.fstat(fh.fileno())
    return (on_disk.st_dev, on_disk.st_ino) == (opened.st_dev, opened.st_ino)


def fsync_directory(directory: Path) -> None:
    """Make a rename or create inside *directory* durable."""
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
