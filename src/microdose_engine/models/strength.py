"""External strength-training signal (produced by another system)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from microdose_engine.models.enums import StrengthSessionType


@dataclass(frozen=True)
class ExternalStrengthSignal:
    """When the last strength session happened and what it trained.

    ``other_label`` carries the original label when ``session_type`` is OTHER.
    """

    last_session_at: datetime
    session_type: StrengthSessionType
    other_label: str | None = None
