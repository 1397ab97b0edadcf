"""Enumerations and progression constants for the microdose engine."""

from __future__ import annotations

from enum import IntEnum, auto


class MicrodoseCategory(IntEnum):
    """Workout categories, in default rotation order."""

    VO2 = auto()
    GTG = auto()
    MOBILITY = auto()

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, label: str) -> MicrodoseCategory | None:
        """Map a user-facing label ("vo2", "GTG", ...) to a category, or None."""
        try:
            return cls[label.strip().upper()]
        except KeyError:
            return None


class MovementKind(IntEnum):
    """What kind of exercise a Movement is. Selects the progression rule."""

    KETTLEBELL_SWING = auto()
    BURPEE = auto()
    PULLUP = auto()
    MOBILITY_DRILL = auto()


class BurpeeStyle(IntEnum):
    """Burpee variations, ordered easiest to hardest."""

    FOUR_COUNT = auto()
    SIX_COUNT = auto()
    SIX_COUNT_TWO_PUMP = auto()
    SEAL = auto()


class StrengthSessionType(IntEnum):
    """Type of the last externally logged strength session."""

    LOWER = auto()
    UPPER = auto()
    FULL = auto()
    OTHER = auto()


class RuleStatus(IntEnum):
    """Outcome of a category rule during one engine call."""

    FIRED = auto()
    SKIPPED = auto()
    NOT_EVALUATED = auto()


# ---------------------------------------------------------------------------
# Category decision thresholds
# ---------------------------------------------------------------------------
# A lower-body strength session younger than this steers away from VO2 work
STRENGTH_OVERRIDE_WINDOW_HOURS = 24

# VO2 microdoses are due again once the last one is older than this
VO2_RECENCY_HOURS = 4

# Definition-id substrings used to infer a session's category from history
CATEGORY_MARKERS: dict[MicrodoseCategory, tuple[str, ...]] = {
    MicrodoseCategory.VO2: ("vo2", "emom"),
    MicrodoseCategory.GTG: ("gtg",),
    MicrodoseCategory.MOBILITY: ("mobility",),
}

# Rotation used when neither the strength nor the VO2 rule fires
NEXT_CATEGORY: dict[MicrodoseCategory, MicrodoseCategory] = {
    MicrodoseCategory.VO2: MicrodoseCategory.GTG,
    MicrodoseCategory.GTG: MicrodoseCategory.MOBILITY,
    MicrodoseCategory.MOBILITY: MicrodoseCategory.VO2,
}

# ---------------------------------------------------------------------------
# Progression defaults
# ---------------------------------------------------------------------------
DEFAULT_BURPEE_REP_CEILING = 10
DEFAULT_KB_SWING_MAX_REPS = 15
DEFAULT_PULLUP_MAX_REPS = 8

# Style ladder: each step names the next style and the reps it restarts at
BURPEE_STYLE_LADDER: dict[BurpeeStyle, tuple[BurpeeStyle, int]] = {
    BurpeeStyle.FOUR_COUNT: (BurpeeStyle.SIX_COUNT, 6),
    BurpeeStyle.SIX_COUNT: (BurpeeStyle.SIX_COUNT_TWO_PUMP, 5),
    BurpeeStyle.SIX_COUNT_TWO_PUMP: (BurpeeStyle.SEAL, 4),
}

# History window handed to the engine by default
DEFAULT_HISTORY_WINDOW_DAYS = 7
