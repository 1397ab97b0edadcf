"""Serialization module: dict codecs for WAL, archive and state records."""

from microdose_engine.serialization.records import (
    ARCHIVE_COLUMNS,
    RecordFormatError,
    session_from_dict,
    session_from_row,
    session_to_dict,
    session_to_row,
    state_from_dict,
    state_to_dict,
)

__all__ = [
    "ARCHIVE_COLUMNS",
    "RecordFormatError",
    "session_from_dict",
    "session_from_row",
    "session_to_dict",
    "session_to_row",
    "state_from_dict",
    "state_to_dict",
]
