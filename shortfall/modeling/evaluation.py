from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from shortfall.data.dataset import Dataset
from shortfall.errors import ConvergenceError
from shortfall.modeling.base import RegressorFamily
from shortfall.modeling.types import EvaluationResult, FittedModel, TrainingOutcome


def rmse(y: np.ndarray, yhat: np.ndarray) -> float:
    y = np.asarray(y, dtype=float)
    yhat = np.asarray(yhat, dtype=float)
    if y.shape != yhat.shape:
        raise ValueError(f"shape mismatch: {y.shape} vs {yhat.shape}")
    if y.size == 0:
        raise ValueError("rmse of an empty set")
    return float(np.sqrt(np.mean((y - yhat) ** 2)))


def r2(y: np.ndarray, yhat: np.ndarray) -> Optional[float]:
    y = np.asarray(y, dtype=float)
    yhat = np.asarray(yhat, dtype=float)
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    if ss_tot == 0.0:
        return None
    return 1.0 - float(np.sum((y - yhat) ** 2)) / ss_tot


def rank_importances(names: Sequence[str], scores: np.ndarray) -> Tuple[Tuple[str, float], ...]:
    """Descending by score; ties keep schema order."""
    order = sorted(range(len(names)), key=lambda i: (-float(scores[i]), i))
    return tuple((str(names[i]), float(scores[i])) for i in order)


def evaluate(family: RegressorFamily, fitted: FittedModel, test: Dataset) -> EvaluationResult:
    """Score one fitted model on the held-out rows. Pure: mutates nothing."""
    if list(test.feature_names) != list(fitted.feature_names):
        raise ValueError(f"[{fitted.name}] test schema differs from the training schema")

    y = test.y
    try:
        pred = family.predict(fitted, test.X)
    except ConvergenceError as e:
        return failed(fitted.name, str(e))

    imp = family.feature_importances(fitted)
    return EvaluationResult(
        name=fitted.name,
        rmse=rmse(y, pred),
        r2=r2(y, pred),
        cv_rmse=fitted.cv_rmse,
        best_params=dict(fitted.best_params),
        importances=rank_importances(fitted.feature_names, imp) if imp is not None else None,
        fit_seconds=fitted.fit_seconds,
    )


def failed(name: str, error: str) -> EvaluationResult:
    return EvaluationResult(name=name, error=error)


def evaluate_all(
    families: Sequence[RegressorFamily],
    outcomes: Sequence[TrainingOutcome],
    test: Dataset,
) -> List[EvaluationResult]:
    by_name = {f.name: f for f in families}
    results: List[EvaluationResult] = []
    for out in outcomes:
        if not out.ok:
            results.append(failed(out.name, out.error or "training failed"))
            continue
        results.append(evaluate(by_name[out.name], out.fitted, test))
    return results
