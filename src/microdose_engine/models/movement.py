"""Static catalog value types: movements, metrics, blocks, definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from microdose_engine.models.enums import BurpeeStyle, MicrodoseCategory, MovementKind


@dataclass(frozen=True)
class Band:
    """Assistance band selection. ``colour=None`` means no band."""

    colour: Optional[str] = None


# A movement is performed either plain (None), as a burpee variation,
# or with a band selection.
MovementStyle = Union[BurpeeStyle, Band, None]


@dataclass(frozen=True)
class Movement:
    """A named exercise in the catalog."""

    id: str
    name: str
    kind: MovementKind
    default_style: MovementStyle = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    reference_url: str | None = None


@dataclass(frozen=True)
class RepsMetric:
    """Repetition-range metric (e.g. swings per minute)."""

    key: str
    default: int
    min: int
    max: int
    step: int = 1
    progressable: bool = True


@dataclass(frozen=True)
class BandMetric:
    """Band-selection metric. Never auto-progressed."""

    key: str
    default: str
    progressable: bool = False


MetricSpec = Union[RepsMetric, BandMetric]


@dataclass(frozen=True)
class MicrodoseBlock:
    """One work block of a microdose, e.g. a single EMOM minute."""

    movement_id: str
    movement_style: MovementStyle
    duration_hint_seconds: int
    metrics: tuple[MetricSpec, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MicrodoseDefinition:
    """A named workout the engine can prescribe."""

    id: str
    name: str
    category: MicrodoseCategory
    suggested_duration_seconds: int
    blocks: tuple[MicrodoseBlock, ...]
    gtg_friendly: bool = False
    reference_url: str | None = None

    @property
    def first_block(self) -> MicrodoseBlock | None:
        return self.blocks[0] if self.blocks else None

    def default_reps(self) -> int | None:
        """Declared default reps of the first block's first reps metric."""
        block = self.first_block
        if block is None:
            return None
        for metric in block.metrics:
            if isinstance(metric, RepsMetric):
                return metric.default
        return None

    def default_style(self) -> MovementStyle:
        block = self.first_block
        return block.movement_style if block is not None else None
