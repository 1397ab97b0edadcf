"""Runtime configuration: data directory, equipment, progression ceilings.

Values come from ``MICRODOSE_*`` environment variables; anything unset
keeps its default.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from microdose_engine.models.enums import (
    DEFAULT_BURPEE_REP_CEILING,
    DEFAULT_HISTORY_WINDOW_DAYS,
    DEFAULT_KB_SWING_MAX_REPS,
    DEFAULT_PULLUP_MAX_REPS,
)

DEFAULT_EQUIPMENT: tuple[str, ...] = ("kettlebell", "pullup_bar", "bands")
DEFAULT_LOCK_TIMEOUT_S = 5.0


def default_data_dir(environ: Mapping[str, str] = os.environ) -> Path:
    """``$XDG_DATA_HOME/microdose``, or ``~/.local/share/microdose``."""
    base = environ.get("XDG_DATA_HOME")
    root = Path(base) if base else Path("~/.local/share").expanduser()
    return root / "microdose"


@dataclass(frozen=True)
class ProgressionConfig:
    """Per-movement rep ceilings used by the upgrade rules."""

    burpee_rep_ceiling: int = DEFAULT_BURPEE_REP_CEILING
    kb_swing_max_reps: int = DEFAULT_KB_SWING_MAX_REPS
    pullup_max_reps: int = DEFAULT_PULLUP_MAX_REPS


@dataclass(frozen=True)
class CustomMobilityDrill:
    """A user-supplied mobility drill added to the rotation."""

    id: str
    name: str
    url: str | None = None


@dataclass(frozen=True)
class Config:
    data_dir: Path = field(default_factory=default_data_dir)
    equipment_available: tuple[str, ...] = DEFAULT_EQUIPMENT
    progression: ProgressionConfig = field(default_factory=ProgressionConfig)
    history_window_days: int = DEFAULT_HISTORY_WINDOW_DAYS
    lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S
    custom_mobility: tuple[CustomMobilityDrill, ...] = field(default_factory=tuple)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> Config:
        """Build a Config from environment variables.

        Recognised variables:
            MICRODOSE_DATA_DIR, MICRODOSE_EQUIPMENT (comma separated),
            MICRODOSE_BURPEE_REP_CEILING, MICRODOSE_KB_SWING_MAX_REPS,
            MICRODOSE_PULLUP_MAX_REPS, MICRODOSE_HISTORY_DAYS,
            MICRODOSE_LOCK_TIMEOUT_S, MICRODOSE_CUSTOM_MOBILITY (JSON list
            of {"id", "name", "url"} objects).

        Raises:
            ValueError: a numeric or JSON variable is malformed.
        """
        data_dir = environ.get("MICRODOSE_DATA_DIR")
        equipment = environ.get("MICRODOSE_EQUIPMENT")

        progression = ProgressionConfig(
            burpee_rep_ceiling=int(
                environ.get("MICRODOSE_BURPEE_REP_CEILING", DEFAULT_BURPEE_REP_CEILING)
            ),
            kb_swing_max_reps=int(
                environ.get("MICRODOSE_KB_SWING_MAX_REPS", DEFAULT_KB_SWING_MAX_REPS)
            ),
            pullup_max_reps=int(environ.get("MICRODOSE_PULLUP_MAX_REPS", DEFAULT_PULLUP_MAX_REPS)),
        )

        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir else default_data_dir(environ),
            equipment_available=(
                tuple(item.strip() for item in equipment.split(",") if item.strip())
                if equipment is not None
                else DEFAULT_EQUIPMENT
            ),
            progression=progression,
            history_window_days=int(
                environ.get("MICRODOSE_HISTORY_DAYS", DEFAULT_HISTORY_WINDOW_DAYS)
            ),
            lock_timeout_s=float(environ.get("MICRODOSE_LOCK_TIMEOUT_S", DEFAULT_LOCK_TIMEOUT_S)),
            custom_mobility=_parse_custom_mobility(environ.get("MICRODOSE_CUSTOM_MOBILITY")),
        )


def _parse_custom_mobility(raw: str | None) -> tuple[CustomMobilityDrill, ...]:
    if not raw:
        return ()
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"MICRODOSE_CUSTOM_MOBILITY is not valid JSON: {exc}") from exc
    if not isinstance(entries, list):
        raise ValueError("MICRODOSE_CUSTOM_MOBILITY must be a JSON list")

    drills: list[CustomMobilityDrill] = []
    for entry in entries:
        if not isinstance(entry, dict) or "id" not in entry or "name" not in entry:
            raise ValueError(f"Custom mobility drill needs 'id' and 'name': {entry!r}")
        drills.append(
            CustomMobilityDrill(id=str(entry["id"]), name=str(entry["name"]), url=entry.get("url"))
        )
    return tuple(drills)
