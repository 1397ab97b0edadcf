"""Exception hierarchy for persistence failures."""

from __future__ import annotations

from microdose_engine.exceptions import MicrodoseError


class StoreError(MicrodoseError):
    """Base exception for all microdose_store errors."""

    retryable: bool = False


class LockTimeoutError(StoreError):
    """A file lock could not be acquired within the bounded wait."""

    retryable = True

    def __init__(self, path: object, timeout_s: float) -> None:
        super().__init__(f"Timed out after {timeout_s:.1f}s waiting for lock on {path}")
        self.path = path
        self.timeout_s = timeout_s


class PersistenceError(StoreError):
    """A durable write (append, save, archive, rename) failed.

    Prior durable state is left unchanged; retrying is safe.
    """

    retryable = True


class ArchiveFormatError(PersistenceError):
    """The existing archive cannot be parsed, so rows cannot be appended safely.

    Needs manual repair (or moving the file aside); retrying will not help.
    """

    retryable = False
