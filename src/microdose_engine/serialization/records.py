"""Dict codecs for persisted records: WAL sessions, archive rows, user state.

All functions are pure (no I/O). Decoders raise RecordFormatError on any
malformed input so callers can skip the record with a single except.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Mapping

from microdose_engine.models.enums import BurpeeStyle
from microdose_engine.models.movement import Band, BandMetric, MetricSpec, MovementStyle, RepsMetric
from microdose_engine.models.progression_state import ProgressionState, UserMicrodoseState
from microdose_engine.models.session import Session

# Column order of the tabular archive.
ARCHIVE_COLUMNS: tuple[str, ...] = (
    "id",
    "definition_id",
    "performed_at",
    "started_at",
    "completed_at",
    "duration",
    "perceived_rpe",
    "avg_hr",
    "max_hr",
)


class RecordFormatError(ValueError):
    """A persisted record could not be decoded."""


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def format_timestamp(value: datetime | None) -> str | None:
    """RFC 3339 in UTC. Naive datetimes are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        raise RecordFormatError(f"Invalid timestamp: {value!r}")
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise RecordFormatError(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_timestamp(value: Any) -> datetime | None:
    return None if value is None or value == "" else parse_timestamp(value)


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise RecordFormatError(f"Invalid integer: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise RecordFormatError(f"Invalid integer: {value!r}") from exc


def _parse_uuid(value: Any) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise RecordFormatError(f"Invalid UUID: {value!r}") from exc


# ---------------------------------------------------------------------------
# Styles and metrics
# ---------------------------------------------------------------------------


def style_to_json(style: MovementStyle) -> dict | None:
    if style is None:
        return None
    if isinstance(style, BurpeeStyle):
        return {"burpee": style.name.lower()}
    return {"band": style.colour}


def style_from_json(data: Any) -> MovementStyle:
    if data is None or data == "none":
        return None
    if not isinstance(data, Mapping):
        raise RecordFormatError(f"Invalid style: {data!r}")
    if "burpee" in data:
        try:
            return BurpeeStyle[str(data["burpee"]).upper()]
        except KeyError as exc:
            raise RecordFormatError(f"Unknown burpee style: {data['burpee']!r}") from exc
    if "band" in data:
        colour = data["band"]
        return Band(colour=None if colour is None else str(colour))
    raise RecordFormatError(f"Invalid style: {data!r}")


def metric_to_json(metric: MetricSpec) -> dict:
    if isinstance(metric, RepsMetric):
        return {
            "type": "reps",
            "key": metric.key,
            "default": metric.default,
            "min": metric.min,
            "max": metric.max,
            "step": metric.step,
            "progressable": metric.progressable,
        }
    return {
        "type": "band",
        "key": metric.key,
        "default": metric.default,
        "progressable": metric.progressable,
    }


def metric_from_json(data: Any) -> MetricSpec:
    if not isinstance(data, Mapping):
        raise RecordFormatError(f"Invalid metric: {data!r}")
    try:
        if data["type"] == "reps":
            return RepsMetric(
                key=str(data["key"]),
                default=int(data["default"]),
                min=int(data["min"]),
                max=int(data["max"]),
                step=int(data.get("step", 1)),
                progressable=bool(data.get("progressable", True)),
            )
        if data["type"] == "band":
            return BandMetric(
                key=str(data["key"]),
                default=str(data["default"]),
                progressable=bool(data.get("progressable", False)),
            )
    except (KeyError, TypeError, ValueError) as exc:
        raise RecordFormatError(f"Invalid metric: {data!r}") from exc
    raise RecordFormatError(f"Unknown metric type: {data.get('type')!r}")


# ---------------------------------------------------------------------------
# Sessions (WAL lines)
# ---------------------------------------------------------------------------


def session_to_dict(session: Session) -> dict:
    return {
        "id": str(session.id),
        "definition_id": session.definition_id,
        "performed_at": format_timestamp(session.performed_at),
        "started_at": format_timestamp(session.started_at),
        "completed_at": format_timestamp(session.completed_at),
        "actual_duration_seconds": session.actual_duration_seconds,
        "metrics_realized": [metric_to_json(m) for m in session.metrics_realized],
        "perceived_rpe": session.perceived_rpe,
        "avg_hr": session.avg_hr,
        "max_hr": session.max_hr,
    }


def session_from_dict(data: Any) -> Session:
    if not isinstance(data, Mapping):
        raise RecordFormatError(f"Session record must be an object, got {type(data).__name__}")
    try:
        definition_id = data["definition_id"]
        performed_at = data["performed_at"]
    except KeyError as exc:
        raise RecordFormatError(f"Session record missing field {exc}") from exc
    if not isinstance(definition_id, str) or not definition_id:
        raise RecordFormatError(f"Invalid definition_id: {definition_id!r}")

    raw_metrics = data.get("metrics_realized") or ()
    if not isinstance(raw_metrics, (list, tuple)):
        raise RecordFormatError(f"Invalid metrics_realized: {raw_metrics!r}")

    return Session(
        id=_parse_uuid(data.get("id")),
        definition_id=definition_id,
        performed_at=parse_timestamp(performed_at),
        started_at=_optional_timestamp(data.get("started_at")),
        completed_at=_optional_timestamp(data.get("completed_at")),
        actual_duration_seconds=_optional_int(data.get("actual_duration_seconds")),
        metrics_realized=tuple(metric_from_json(m) for m in raw_metrics),
        perceived_rpe=_optional_int(data.get("perceived_rpe")),
        avg_hr=_optional_int(data.get("avg_hr")),
        max_hr=_optional_int(data.get("max_hr")),
    )


# ---------------------------------------------------------------------------
# Archive rows
# ---------------------------------------------------------------------------


def session_to_row(session: Session) -> dict[str, Any]:
    """Flatten a session into an archive row. Realized metrics are not archived."""
    return {
        "id": str(session.id),
        "definition_id": session.definition_id,
        "performed_at": format_timestamp(session.performed_at),
        "started_at": format_timestamp(session.started_at),
        "completed_at": format_timestamp(session.completed_at),
        "duration": session.actual_duration_seconds,
        "perceived_rpe": session.perceived_rpe,
        "avg_hr": session.avg_hr,
        "max_hr": session.max_hr,
    }


def session_from_row(row: Mapping[str, Any]) -> Session:
    """Rebuild a session from an archive row (string or empty cell values)."""
    definition_id = row.get("definition_id")
    if not isinstance(definition_id, str) or not definition_id:
        raise RecordFormatError(f"Invalid definition_id: {definition_id!r}")
    return Session(
        id=_parse_uuid(row.get("id")),
        definition_id=definition_id,
        performed_at=parse_timestamp(row.get("performed_at")),
        started_at=_optional_timestamp(row.get("started_at")),
        completed_at=_optional_timestamp(row.get("completed_at")),
        actual_duration_seconds=_optional_int(row.get("duration")),
        perceived_rpe=_optional_int(row.get("perceived_rpe")),
        avg_hr=_optional_int(row.get("avg_hr")),
        max_hr=_optional_int(row.get("max_hr")),
    )


# ---------------------------------------------------------------------------
# User state
# ---------------------------------------------------------------------------


def state_to_dict(state: UserMicrodoseState) -> dict:
    return {
        "progressions": {
            definition_id: {
                "reps": progression.reps,
                "style": style_to_json(progression.style),
                "level": progression.level,
                "last_upgraded": format_timestamp(progression.last_upgraded),
            }
            for definition_id, progression in sorted(state.progressions.items())
        },
        "last_mobility_def_id": state.last_mobility_def_id,
    }


def state_from_dict(data: Any) -> UserMicrodoseState:
    if not isinstance(data, Mapping):
        raise RecordFormatError("State document must be an object")

    raw_progressions = data.get("progressions") or {}
    if not isinstance(raw_progressions, Mapping):
        raise RecordFormatError("'progressions' must be an object")

    progressions: dict[str, ProgressionState] = {}
    for definition_id, entry in raw_progressions.items():
        if not isinstance(entry, Mapping):
            raise RecordFormatError(f"Invalid progression for {definition_id!r}")
        reps = _optional_int(entry.get("reps"))
        if reps is None:
            raise RecordFormatError(f"Progression for {definition_id!r} has no reps")
        progressions[str(definition_id)] = ProgressionState(
            reps=reps,
            style=style_from_json(entry.get("style")),
            level=_optional_int(entry.get("level")) or 0,
            last_upgraded=_optional_timestamp(entry.get("last_upgraded")),
        )

    cursor = data.get("last_mobility_def_id")
    if cursor is not None and not isinstance(cursor, str):
        raise RecordFormatError(f"Invalid last_mobility_def_id: {cursor!r}")

    return UserMicrodoseState(progressions=progressions, last_mobility_def_id=cursor)
