"""Error hierarchy for the shortfall pipeline.

Only ``ConvergenceError`` is recovered (per family, inside the trainer).
Everything else means a broken precondition and halts the run.
"""
from __future__ import annotations

from typing import Any, List, Sequence


class ShortfallError(Exception):
    """Base class for every pipeline error."""


class ConfigurationError(ShortfallError, ValueError):
    """Invalid split ratio, unknown family, malformed hidden-layer spec, ..."""


class DataError(ShortfallError, ValueError):
    """Input table violates the prepared-data contract."""

    def __init__(self, message: str, *, columns: Sequence[str] = ()):
        super().__init__(message)
        self.columns: List[str] = list(columns)


class ConvergenceError(ShortfallError, RuntimeError):
    """A single model family failed to fit."""

    def __init__(self, family: str, message: str):
        super().__init__(f"{family}: {message}")
        self.family = family


class NoViableModelError(ShortfallError, RuntimeError):
    """Every requested family failed."""

    def __init__(self, failures: Sequence[Any]):
        names = ", ".join(getattr(f, "name", str(f)) for f in failures) or "none requested"
        super().__init__(f"No model family trained successfully (failed: {names})")
        self.failures = list(failures)
