"""Built-in catalog of movements and microdose definitions.

``get_default_catalog()`` returns a process-wide cached instance; use
``build_catalog()`` when custom mobility drills or a fresh copy are needed.
"""

from __future__ import annotations

import functools
from typing import Iterable

from microdose_engine.config import CustomMobilityDrill
from microdose_engine.models.catalog import Catalog
from microdose_engine.models.enums import BurpeeStyle, MicrodoseCategory, MovementKind
from microdose_engine.models.movement import (
    Band,
    BandMetric,
    MicrodoseBlock,
    MicrodoseDefinition,
    Movement,
    RepsMetric,
)

_MOVEMENTS: tuple[Movement, ...] = (
    Movement(
        id="kb_swing_2h",
        name="Kettlebell Swing (2-hand)",
        kind=MovementKind.KETTLEBELL_SWING,
        tags=("vo2", "hinge", "posterior_chain"),
        reference_url="https://www.youtube.com/watch?v=YSxHifyI6s8",
    ),
    Movement(
        id="burpee",
        name="Burpee",
        kind=MovementKind.BURPEE,
        default_style=BurpeeStyle.FOUR_COUNT,
        tags=("vo2", "full_body", "bodyweight"),
        reference_url="https://www.youtube.com/watch?v=TU8QYVW0gDU",
    ),
    Movement(
        id="pullup",
        name="Pull-up",
        kind=MovementKind.PULLUP,
        default_style=Band(),
        tags=("gtg", "gtg_ok", "upper_body", "pull"),
        reference_url="https://www.youtube.com/watch?v=eGo4IYlbE5g",
    ),
    Movement(
        id="hip_cars",
        name="Hip Controlled Articular Rotations (CARs)",
        kind=MovementKind.MOBILITY_DRILL,
        tags=("mobility", "hip", "gtg_ok"),
        reference_url="https://www.youtube.com/watch?v=mJRXBZGRzKg",
    ),
    Movement(
        id="shoulder_cars",
        name="Shoulder Controlled Articular Rotations (CARs)",
        kind=MovementKind.MOBILITY_DRILL,
        tags=("mobility", "shoulder", "gtg_ok"),
        reference_url="https://www.youtube.com/watch?v=f9y1lOJ0v4A",
    ),
)


def _cars_definition(definition_id: str, name: str, movement_id: str) -> MicrodoseDefinition:
    return MicrodoseDefinition(
        id=definition_id,
        name=name,
        category=MicrodoseCategory.MOBILITY,
        suggested_duration_seconds=120,
        gtg_friendly=True,
        blocks=(
            MicrodoseBlock(
                movement_id=movement_id,
                movement_style=None,
                duration_hint_seconds=120,
                metrics=(
                    RepsMetric(key="reps_per_side", default=3, min=2, max=5, progressable=False),
                ),
            ),
        ),
    )


_DEFINITIONS: tuple[MicrodoseDefinition, ...] = (
    # VO2 EMOM: Kettlebell Swings (5 minutes)
    MicrodoseDefinition(
        id="emom_kb_swing_5m",
        name="5-Min EMOM: KB Swings (2-hand)",
        category=MicrodoseCategory.VO2,
        suggested_duration_seconds=300,
        blocks=(
            MicrodoseBlock(
                movement_id="kb_swing_2h",
                movement_style=None,
                duration_hint_seconds=60,
                metrics=(RepsMetric(key="reps", default=5, min=3, max=15),),
            ),
        ),
    ),
    # VO2 EMOM: Burpees (5 minutes)
    MicrodoseDefinition(
        id="emom_burpee_5m",
        name="5-Min EMOM: Burpees",
        category=MicrodoseCategory.VO2,
        suggested_duration_seconds=300,
        blocks=(
            MicrodoseBlock(
                movement_id="burpee",
                movement_style=BurpeeStyle.FOUR_COUNT,
                duration_hint_seconds=60,
                metrics=(RepsMetric(key="reps", default=3, min=2, max=10),),
            ),
        ),
    ),
    # GTG: Pull-ups (banded)
    MicrodoseDefinition(
        id="gtg_pullup_band",
        name="GTG: Banded Pull-ups",
        category=MicrodoseCategory.GTG,
        suggested_duration_seconds=30,
        gtg_friendly=True,
        blocks=(
            MicrodoseBlock(
                movement_id="pullup",
                movement_style=Band("red"),
                duration_hint_seconds=30,
                metrics=(
                    RepsMetric(key="reps", default=3, min=1, max=8),
                    BandMetric(key="band", default="red"),
                ),
            ),
        ),
    ),
    _cars_definition("mobility_hip_cars", "Hip CARs (3 reps each side)", "hip_cars"),
    _cars_definition("mobility_shoulder_cars", "Shoulder CARs (3 reps each side)", "shoulder_cars"),
)


def build_catalog(custom_mobility: Iterable[CustomMobilityDrill] = ()) -> Catalog:
    """Build a fresh catalog, adding one Mobility definition per custom drill.

    A drill with id ``x`` becomes movement ``x`` and definition
    ``mobility_x`` so history inference recognises it as Mobility.

    Raises:
        ValueError: a drill id clashes with an existing movement or definition.
    """
    movements = {m.id: m for m in _MOVEMENTS}
    microdoses = {d.id: d for d in _DEFINITIONS}

    for drill in custom_mobility:
        if drill.id in movements or f"mobility_{drill.id}" in microdoses:
            raise ValueError(f"Custom mobility drill id '{drill.id}' clashes with the catalog")
        movements[drill.id] = Movement(
            id=drill.id,
            name=drill.name,
            kind=MovementKind.MOBILITY_DRILL,
            tags=("mobility", "custom", "gtg_ok"),
            reference_url=drill.url,
        )
        definition_id = f"mobility_{drill.id}"
        microdoses[definition_id] = _cars_definition(definition_id, drill.name, drill.id)

    return Catalog(movements=movements, microdoses=microdoses)


def build_default_catalog() -> Catalog:
    """Fresh copy of the built-in catalog."""
    return build_catalog()


@functools.lru_cache(maxsize=1)
def get_default_catalog() -> Catalog:
    """Process-wide cached built-in catalog. Never mutated after construction."""
    return build_catalog()
