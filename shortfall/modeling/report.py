from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import joblib
import numpy as np

from shortfall.modeling.selection import Selection, rank_results
from shortfall.modeling.types import EvaluationResult, FittedModel

logger = logging.getLogger(__name__)


def _fmt(v: Optional[float], nd: int = 4) -> str:
    return "-" if v is None else f"{v:.{nd}f}"


def format_ranking(results: Sequence[EvaluationResult]) -> str:
    """Ranked table: successes by RMSE, then failures with their reason."""
    ranking, failures = rank_results(results)
    lines = [f"{'rank':>4}  {'family':<14} {'test_rmse':>10} {'cv_rmse':>10} {'r2':>8}  params"]
    for i, r in enumerate(ranking, 1):
        lines.append(
            f"{i:>4}  {r.name:<14} {_fmt(r.rmse):>10} {_fmt(r.cv_rmse):>10} {_fmt(r.r2, 3):>8}  {r.best_params}"
        )
    for r in failures:
        lines.append(f"{'--':>4}  {r.name:<14} {'FAILED':>10}  {r.error}")
    return "\n".join(lines)


def format_report(selection: Selection, *, top_n: int = 10) -> str:
    results = list(selection.ranking) + list(selection.failures)
    out = ["=" * 70, "MODEL COMPARISON (test RMSE, lower is better)", "=" * 70, format_ranking(results), ""]
    w = selection.winner
    out.append(f"Winner: {w.name} (test RMSE {_fmt(w.rmse)})")
    top = selection.top_features(top_n)
    if top:
        out.append(f"Top {len(top)} features by {w.name} importance:")
        for i, (feat, score) in enumerate(top, 1):
            out.append(f"  {i:>2}. {feat:<40} {score:.4f}")
    else:
        out.append(f"{w.name} does not expose feature importances.")
    return "\n".join(out)


def _jsonable(v: Any) -> Any:
    if isinstance(v, dict):
        return {str(k): _jsonable(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    if isinstance(v, np.generic):
        return v.item()
    return v


def report_payload(selection: Selection, *, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {
        "winner": selection.winner.name,
        "ranking": [asdict(r) for r in selection.ranking],
        "failures": [asdict(r) for r in selection.failures],
        "importances": [{"feature": f, "score": s} for f, s in (selection.importances or ())],
    }
    if extra:
        payload.update(extra)
    return _jsonable(payload)


def write_json(path: Path, payload: Dict[str, Any]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, sort_keys=False))
    return path


def save_fitted(path: Path, fitted: FittedModel) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(
        {
            "model_name": fitted.name,
            "features": list(fitted.feature_names),
            "best_params": dict(fitted.best_params),
            "cv_rmse": fitted.cv_rmse,
            "seed": fitted.seed,
            "preprocessing": fitted.spec.preprocessing,
            "scale_target": fitted.spec.scale_target,
            "model": fitted.estimator,
        },
        path,
    )
    logger.info(f"Saved model: {path}")
    return path
