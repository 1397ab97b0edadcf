"""Loader for the externally produced strength-training signal.

Never raises: a missing or malformed file means "no signal".
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from microdose_engine.models.enums import StrengthSessionType
from microdose_engine.models.strength import ExternalStrengthSignal
from microdose_engine.serialization import RecordFormatError
from microdose_engine.serialization.records import parse_timestamp

logger = logging.getLogger(__name__)

_TYPE_ALIASES: dict[str, StrengthSessionType] = {
    "lower": StrengthSessionType.LOWER,
    "upper": StrengthSessionType.UPPER,
    "full": StrengthSessionType.FULL,
    "full_body": StrengthSessionType.FULL,
    "fullbody": StrengthSessionType.FULL,
}


def parse_session_type(label: str) -> tuple[StrengthSessionType, str | None]:
    """Map a label to a session type; unknown labels become OTHER(label)."""
    lowered = label.strip().lower()
    if lowered in _TYPE_ALIASES:
        return _TYPE_ALIASES[lowered], None
    return StrengthSessionType.OTHER, lowered


def load_external_strength(path: Path | str) -> ExternalStrengthSignal | None:
    """Read ``{"last_session_at": ..., "session_type": ...}`` from *path*."""
    path = Path(path)
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No strength signal file found at %s", path)
        return None
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read strength signal at %s: %s. Ignoring signal.", path, exc)
        return None

    try:
        data = json.loads(contents)
        if not isinstance(data, dict) or not isinstance(data.get("session_type"), str):
            raise RecordFormatError("expected an object with a string 'session_type'")
        last_session_at = parse_timestamp(data.get("last_session_at"))
    except (json.JSONDecodeError, RecordFormatError) as exc:
        logger.warning("Failed to parse strength signal at %s: %s. Ignoring signal.", path, exc)
        return None

    session_type, other_label = parse_session_type(data["session_type"])
    logger.info("Loaded strength signal: %s at %s", session_type.name, last_session_at.isoformat())
    return ExternalStrengthSignal(
        last_session_at=last_session_at,
        session_type=session_type,
        other_label=other_label,
    )
