"""Custom exception hierarchy for the microdose engine and stores."""

from __future__ import annotations


class MicrodoseError(Exception):
    """Base exception for all microdose errors."""


class CatalogValidationError(MicrodoseError):
    """The catalog is internally inconsistent. Fatal at startup."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Invalid catalog: " + "; ".join(errors))
        self.errors = list(errors)


class PrescriptionError(MicrodoseError):
    """No eligible definition could be prescribed."""
