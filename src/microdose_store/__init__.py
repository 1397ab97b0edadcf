"""Durable storage for microdose sessions and user progression state."""

from microdose_store.exceptions import (
    ArchiveFormatError,
    LockTimeoutError,
    PersistenceError,
    StoreError,
)
from microdose_store.history import load_recent_sessions
from microdose_store.paths import DataPaths
from microdose_store.rollup import cleanup_processed_wals, wal_to_csv_and_archive
from microdose_store.service import MicrodoseService
from microdose_store.state_store import load_user_state, save_user_state, update_user_state
from microdose_store.strength import load_external_strength, parse_session_type
from microdose_store.wal import JsonlSink, SessionSink, read_sessions

__all__ = [
    "ArchiveFormatError",
    "DataPaths",
    "JsonlSink",
    "LockTimeoutError",
    "MicrodoseService",
    "PersistenceError",
    "SessionSink",
    "StoreError",
    "cleanup_processed_wals",
    "load_external_strength",
    "load_recent_sessions",
    "load_user_state",
    "parse_session_type",
    "read_sessions",
    "save_user_state",
    "update_user_state",
    "wal_to_csv_and_archive",
]
