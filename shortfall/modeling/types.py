from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# Preprocessing kinds a ModelSpec can ask for.
STANDARDIZE = "standardize"
MINMAX = "minmax"
NONE = "none"


@dataclass(frozen=True)
class ModelSpec:
    """One family's search space and preprocessing. Built once per run."""

    name: str
    preprocessing: str
    param_grid: Dict[str, List[Any]]
    scale_target: bool = False


@dataclass(frozen=True, eq=False)
class FittedModel:
    spec: ModelSpec
    estimator: Any  # refit best pipeline from the grid search
    feature_names: List[str]
    best_params: Dict[str, Any]
    cv_rmse: float
    seed: int
    fit_seconds: float

    @property
    def name(self) -> str:
        return self.spec.name


@dataclass(frozen=True)
class TrainingOutcome:
    """A fitted model, or the reason there isn't one."""

    name: str
    fitted: Optional[FittedModel] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.fitted is not None


@dataclass(frozen=True)
class EvaluationResult:
    name: str
    rmse: Optional[float] = None
    r2: Optional[float] = None
    cv_rmse: Optional[float] = None
    best_params: Dict[str, Any] = field(default_factory=dict)
    importances: Optional[Tuple[Tuple[str, float], ...]] = None
    fit_seconds: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.rmse is not None
