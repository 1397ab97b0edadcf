"""Microdose prescription engine: domain model, catalog, rules and progression."""

from microdose_engine.catalog import build_catalog, build_default_catalog, get_default_catalog
from microdose_engine.config import Config, CustomMobilityDrill, ProgressionConfig
from microdose_engine.engine import MicrodoseEngine, compute_intensity, prescribe_next
from microdose_engine.exceptions import (
    CatalogValidationError,
    MicrodoseError,
    PrescriptionError,
)
from microdose_engine.progression import increase_intensity

__all__ = [
    "CatalogValidationError",
    "Config",
    "CustomMobilityDrill",
    "MicrodoseEngine",
    "MicrodoseError",
    "PrescriptionError",
    "ProgressionConfig",
    "build_catalog",
    "build_default_catalog",
    "compute_intensity",
    "get_default_catalog",
    "increase_intensity",
    "prescribe_next",
]
