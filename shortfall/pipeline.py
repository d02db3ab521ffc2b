"""Dataset -> Split -> fitted models -> evaluations -> selection.

Each stage's output is a frozen value handed to the next; nothing is shared
between stages except what is passed explicitly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from shortfall.config import PipelineConfig
from shortfall.data.dataset import Dataset
from shortfall.data.split import Split, stratified_split
from shortfall.logs import banner
from shortfall.modeling.evaluation import evaluate_all
from shortfall.modeling.registry import build_families
from shortfall.modeling.report import report_payload, save_fitted, write_json
from shortfall.modeling.selection import Selection, select_best
from shortfall.modeling.trainer import train_all
from shortfall.modeling.types import EvaluationResult, FittedModel, TrainingOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PipelineRun:
    config: PipelineConfig
    split: Split
    outcomes: Tuple[TrainingOutcome, ...]
    results: Tuple[EvaluationResult, ...]
    selection: Selection

    @property
    def fitted(self) -> Dict[str, FittedModel]:
        return {o.name: o.fitted for o in self.outcomes if o.ok}

    @property
    def winner(self) -> FittedModel:
        return self.fitted[self.selection.winner.name]


def run_pipeline(data: Dataset, config: Optional[PipelineConfig] = None, *, progress: bool = True) -> PipelineRun:
    """Run the whole comparison once.

    Raises ConfigurationError / DataError on broken preconditions and
    NoViableModelError if every family failed; single-family failures are
    recorded in the results instead.
    """
    config = config or PipelineConfig()

    banner(logger, "SPLIT")
    split = stratified_split(
        data,
        config.train_ratio,
        seed=config.seed,
        n_bins=config.n_bins,
        min_rows=config.min_rows,
    )

    banner(logger, f"TRAINING {len(config.families)} FAMILIES ({config.cv_folds}-fold CV)")
    families = build_families(config)
    outcomes = tuple(train_all(families, split.train, config, progress=progress))

    banner(logger, "EVALUATION")
    results = tuple(evaluate_all(families, outcomes, split.test))
    for r in results:
        if r.ok:
            logger.info(f"[{r.name}] test_rmse={r.rmse:.4f}")
        else:
            logger.warning(f"[{r.name}] no result: {r.error}")

    selection = select_best(results)
    logger.info(f"Winner: {selection.winner.name} (test RMSE {selection.winner.rmse:.4f})")
    return PipelineRun(config=config, split=split, outcomes=outcomes, results=results, selection=selection)


def write_artifacts(run: PipelineRun, out_dir: Path) -> Dict[str, Path]:
    """Split assignment CSV, report.json and the winning model (joblib)."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    cfg = run.config
    extra = {
        "config": {
            "train_ratio": cfg.train_ratio,
            "seed": cfg.seed,
            "cv_folds": cfg.cv_folds,
            "hidden_layers": list(cfg.hidden_layers),
            "families": list(cfg.families),
        },
        "n_train": len(run.split.train),
        "n_test": len(run.split.test),
    }
    winner = run.winner
    return {
        "split": run.split.save(out_dir / "split.csv"),
        "report": write_json(out_dir / "report.json", report_payload(run.selection, extra=extra)),
        "model": save_fitted(out_dir / f"{winner.name}_winner.joblib", winner),
    }
