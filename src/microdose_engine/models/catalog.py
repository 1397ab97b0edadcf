"""Read-only catalog of movements and microdose definitions."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from microdose_engine.models.enums import MicrodoseCategory
from microdose_engine.models.movement import (
    BandMetric,
    MicrodoseDefinition,
    Movement,
    RepsMetric,
)


@dataclass(frozen=True)
class Catalog:
    """Movements and definitions keyed by id.

    The mappings are wrapped in read-only proxies on construction, so a
    catalog cannot be mutated once built.
    """

    movements: Mapping[str, Movement]
    microdoses: Mapping[str, MicrodoseDefinition]

    def __post_init__(self) -> None:
        object.__setattr__(self, "movements", MappingProxyType(dict(self.movements)))
        object.__setattr__(self, "microdoses", MappingProxyType(dict(self.microdoses)))

    def definitions_in(self, category: MicrodoseCategory) -> list[MicrodoseDefinition]:
        """All definitions of *category*, sorted by id for stable selection."""
        return sorted(
            (d for d in self.microdoses.values() if d.category == category),
            key=lambda d: d.id,
        )

    def movement_for(self, definition: MicrodoseDefinition) -> Movement | None:
        """Movement of the definition's first block, if any."""
        block = definition.first_block
        if block is None:
            return None
        return self.movements.get(block.movement_id)

    def validate(self) -> list[str]:
        """Check internal consistency. Returns error messages (empty if valid)."""
        errors: list[str] = []

        for key, movement in self.movements.items():
            if not key or not movement.id:
                errors.append("Movement has empty ID")
            if key != movement.id:
                errors.append(f"Movement key '{key}' doesn't match movement.id '{movement.id}'")
            if not movement.name:
                errors.append(f"Movement '{key}' has empty name")

        for key, definition in self.microdoses.items():
            if not key or not definition.id:
                errors.append("Microdose definition has empty ID")
            if key != definition.id:
                errors.append(
                    f"Microdose key '{key}' doesn't match definition.id '{definition.id}'"
                )
            if not definition.name:
                errors.append(f"Microdose '{key}' has empty name")
            if not definition.blocks:
                errors.append(f"Microdose '{key}' has no blocks")

            for block in definition.blocks:
                if block.movement_id not in self.movements:
                    errors.append(
                        f"Microdose '{key}' references non-existent movement "
                        f"'{block.movement_id}'"
                    )
                for metric in block.metrics:
                    errors.extend(_validate_metric(key, metric))

        for category in MicrodoseCategory:
            if not any(d.category == category for d in self.microdoses.values()):
                errors.append(f"Catalog has no {category.name} microdoses")

        return errors


def _validate_metric(definition_id: str, metric: RepsMetric | BandMetric) -> list[str]:
    errors: list[str] = []
    if isinstance(metric, RepsMetric):
        if metric.min > metric.max:
            errors.append(
                f"Microdose '{definition_id}': min reps {metric.min} > max {metric.max}"
            )
        if metric.default < metric.min:
            errors.append(
                f"Microdose '{definition_id}': default reps {metric.default} < min {metric.min}"
            )
        if metric.default > metric.max:
            errors.append(
                f"Microdose '{definition_id}': default reps {metric.default} > max {metric.max}"
            )
    elif not metric.default:
        errors.append(f"Microdose '{definition_id}': band metric has empty default")
    return errors
