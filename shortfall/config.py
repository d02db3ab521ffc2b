from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from shortfall.errors import ConfigurationError


DEFAULT_SEED = 101
DEFAULT_TARGET = "shortfall"

# Order here is only the display order of the default run; families are independent.
DEFAULT_FAMILIES: Tuple[str, ...] = (
    "glm",
    "elastic_net",
    "pls",
    "neural_net",
    "tree",
    "random_forest",
    "gbm",
)

# Opt-in only; never part of the default run.
OPTIONAL_FAMILIES: Tuple[str, ...] = ("xgboost",)

KNOWN_FAMILIES: Tuple[str, ...] = DEFAULT_FAMILIES + OPTIONAL_FAMILIES


def parse_hidden_layers(text: str) -> Tuple[int, int]:
    """Parse ``"5,3"`` into ``(5, 3)``."""
    parts = [p.strip() for p in str(text).split(",") if p.strip()]
    try:
        widths = tuple(int(p) for p in parts)
    except ValueError as e:
        raise ConfigurationError(f"Malformed hidden-layer spec {text!r}: widths must be integers") from e
    return _check_hidden_layers(widths)


def parse_families(text: str) -> Tuple[str, ...]:
    names = tuple(p.strip() for p in str(text).split(",") if p.strip())
    if not names:
        raise ConfigurationError(f"Empty family list: {text!r}")
    return names


def _check_hidden_layers(widths: Iterable[int]) -> Tuple[int, int]:
    widths = tuple(widths)
    if len(widths) != 2:
        raise ConfigurationError(
            f"Malformed hidden-layer spec {widths!r}: the neural regressor has exactly two hidden layers"
        )
    for w in widths:
        if isinstance(w, bool) or not isinstance(w, int):
            raise ConfigurationError(f"Malformed hidden-layer spec {widths!r}: widths must be integers")
        if w < 0:
            raise ConfigurationError(f"Malformed hidden-layer spec {widths!r}: widths must be >= 0")
    return (int(widths[0]), int(widths[1]))


@dataclass(frozen=True)
class PipelineConfig:
    """Run configuration. Every field has a default; validated on construction.

    A hidden-layer width of 0 is accepted here: it is well formed, but the
    neural family cannot fit it, so it surfaces as that family's failure.
    """

    train_ratio: float = 0.8
    seed: int = DEFAULT_SEED
    cv_folds: int = 5
    hidden_layers: Tuple[int, int] = (5, 3)
    families: Tuple[str, ...] = DEFAULT_FAMILIES
    n_bins: int = 5
    n_jobs: int = 1
    min_rows: int = 10
    time_budget: Optional[float] = None
    top_n_importances: int = 10

    def __post_init__(self) -> None:
        ratio = self.train_ratio
        if isinstance(ratio, bool) or not isinstance(ratio, (int, float)) or not (0.0 < float(ratio) < 1.0):
            raise ConfigurationError(f"train_ratio must be in (0, 1), got {ratio!r}")
        if not isinstance(self.seed, int) or self.seed < 0:
            raise ConfigurationError(f"seed must be a non-negative integer, got {self.seed!r}")
        if not isinstance(self.cv_folds, int) or self.cv_folds < 2:
            raise ConfigurationError(f"cv_folds must be an integer >= 2, got {self.cv_folds!r}")
        if not isinstance(self.n_bins, int) or self.n_bins < 1:
            raise ConfigurationError(f"n_bins must be an integer >= 1, got {self.n_bins!r}")
        if not isinstance(self.n_jobs, int) or (self.n_jobs < 1 and self.n_jobs != -1):
            raise ConfigurationError(f"n_jobs must be >= 1 or -1, got {self.n_jobs!r}")
        if not isinstance(self.min_rows, int) or self.min_rows < 2:
            raise ConfigurationError(f"min_rows must be an integer >= 2, got {self.min_rows!r}")
        if self.time_budget is not None and not float(self.time_budget) > 0:
            raise ConfigurationError(f"time_budget must be positive, got {self.time_budget!r}")

        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "train_ratio", float(ratio))
        object.__setattr__(self, "hidden_layers", _check_hidden_layers(self.hidden_layers))

        fams = tuple(self.families)
        if not fams:
            raise ConfigurationError("At least one model family is required")
        unknown = [f for f in fams if f not in KNOWN_FAMILIES]
        if unknown:
            raise ConfigurationError(
                f"Unknown model family: {', '.join(unknown)}. Known: {', '.join(KNOWN_FAMILIES)}"
            )
        if len(set(fams)) != len(fams):
            raise ConfigurationError(f"Duplicate model family in {fams!r}")
        object.__setattr__(self, "families", fams)

    def with_overrides(self, **kwargs) -> "PipelineConfig":
        return replace(self, **kwargs)
