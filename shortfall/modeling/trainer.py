from __future__ import annotations

import logging
from typing import List, Sequence

from joblib import Parallel, delayed
from tqdm import tqdm

from shortfall.config import PipelineConfig
from shortfall.data.dataset import Dataset
from shortfall.errors import ConfigurationError, ConvergenceError
from shortfall.modeling.base import RegressorFamily
from shortfall.modeling.types import TrainingOutcome

logger = logging.getLogger(__name__)


def train_one(family: RegressorFamily, train: Dataset, config: PipelineConfig) -> TrainingOutcome:
    """Fit a single family; a ConvergenceError becomes a failed outcome."""
    try:
        fitted = family.train(train, config)
    except ConvergenceError as e:
        return TrainingOutcome(name=family.name, error=str(e))
    return TrainingOutcome(name=family.name, fitted=fitted)


def log_outcome(outcome: TrainingOutcome) -> None:
    # runs in the parent process; loky workers have no logging handlers
    if not outcome.ok:
        logger.warning(f"[{outcome.name}] training failed: {outcome.error}")
        return
    fitted = outcome.fitted
    logger.info(
        f"[{outcome.name}] cv_rmse={fitted.cv_rmse:.4f} params={fitted.best_params} "
        f"({fitted.fit_seconds:.1f}s)"
    )


def train_all(
    families: Sequence[RegressorFamily],
    train: Dataset,
    config: PipelineConfig,
    *,
    progress: bool = True,
) -> List[TrainingOutcome]:
    """Fit every family on the same training rows.

    Families share nothing but the (read-only) training data. Each draws its
    randomness from ``family_seed(config.seed, name)``, so results don't
    depend on order or on ``n_jobs``. Returns once every family has finished
    or failed, in the order given.
    """
    if config.cv_folds > len(train):
        raise ConfigurationError(f"cv_folds={config.cv_folds} exceeds the {len(train)} training rows")

    names = [f.name for f in families]
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Duplicate model family in {names!r}")

    if config.n_jobs == 1 or len(families) <= 1:
        outcomes = []
        for f in tqdm(families, desc="Training families", disable=not progress):
            outcomes.append(train_one(f, train, config))
            log_outcome(outcomes[-1])
        return outcomes

    outcomes = list(Parallel(n_jobs=config.n_jobs)(delayed(train_one)(f, train, config) for f in families))
    for out in outcomes:
        log_outcome(out)
    return outcomes
