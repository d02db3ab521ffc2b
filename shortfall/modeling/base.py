from __future__ import annotations

import logging
import time
import warnings
import zlib
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import numpy as np
from sklearn.compose import TransformedTargetRegressor
from sklearn.exceptions import ConvergenceWarning
from sklearn.model_selection import GridSearchCV, KFold
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import MinMaxScaler, StandardScaler

from shortfall.config import PipelineConfig
from shortfall.data.dataset import Dataset
from shortfall.errors import ConfigurationError, ConvergenceError
from shortfall.modeling.types import MINMAX, NONE, STANDARDIZE, FittedModel, ModelSpec

logger = logging.getLogger(__name__)

# Failures that mean "this family could not be fit", not "the run is broken".
FIT_ERRORS = (ValueError, ArithmeticError, np.linalg.LinAlgError)


def family_seed(seed: int, name: str) -> int:
    """Independent, order-free RNG seed for one family."""
    ss = np.random.SeedSequence([int(seed), zlib.crc32(name.encode("utf-8"))])
    return int(ss.generate_state(1)[0])


def _scaler(kind: str):
    if kind == STANDARDIZE:
        return StandardScaler()
    if kind == MINMAX:
        return MinMaxScaler()
    if kind == NONE:
        return None
    raise ConfigurationError(f"Unknown preprocessing {kind!r}")


class RegressorFamily(ABC):
    """One algorithm family behind a uniform train/predict interface.

    Subclasses only describe themselves: the estimator, its search space and
    which preprocessing it needs. Scaling always lives inside the sklearn
    pipeline, so it is refit on each CV fold and finally on the training rows
    only; test rows never influence it.
    """

    name: str
    preprocessing: str = STANDARDIZE
    scale_target: bool = False

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    @abstractmethod
    def param_grid(self, n_features: int, n_rows: int) -> Dict[str, List[Any]]:
        """Search space keyed by parameters of the ``model`` pipeline step."""
        raise NotImplementedError

    @abstractmethod
    def make_estimator(self, seed: int) -> Any:
        raise NotImplementedError

    def importances(self, model: Any) -> Optional[np.ndarray]:
        """Native importance per feature, or None when the family has none."""
        return None

    # ---- shared machinery ----

    def specification(self, n_features: int, n_rows: int) -> ModelSpec:
        return ModelSpec(
            name=self.name,
            preprocessing=self.preprocessing,
            param_grid=self.param_grid(n_features, n_rows),
            scale_target=self.scale_target,
        )

    def build_estimator(self, spec: ModelSpec, seed: int):
        steps = []
        scaler = _scaler(spec.preprocessing)
        if scaler is not None:
            steps.append(("scaler", scaler))
        steps.append(("model", self.make_estimator(seed)))
        pipe = Pipeline(steps)
        if spec.scale_target:
            # predict() runs the inverse target transform, so scores stay in original units
            return TransformedTargetRegressor(regressor=pipe, transformer=MinMaxScaler())
        return pipe

    @staticmethod
    def search_grid(spec: ModelSpec) -> Dict[str, List[Any]]:
        prefix = "regressor__" if spec.scale_target else ""
        return {f"{prefix}{k}": list(v) for k, v in spec.param_grid.items()}

    def train(self, data: Dataset, config: Optional[PipelineConfig] = None) -> FittedModel:
        """Grid-search this family on ``data`` with k-fold CV, refit the best.

        Raises ConvergenceError if the family cannot be fit.
        """
        config = config or self.config
        n_rows, n_features = data.features.shape
        if config.cv_folds > n_rows:
            raise ConfigurationError(f"cv_folds={config.cv_folds} exceeds the {n_rows} training rows")

        seed = family_seed(config.seed, self.name)
        spec = self.specification(n_features, n_rows)
        try:
            estimator = self.build_estimator(spec, seed)
        except ConvergenceError:
            raise
        except (ImportError, RuntimeError) as e:
            raise ConvergenceError(self.name, f"{type(e).__name__}: {e}") from e

        grid = GridSearchCV(
            estimator,
            param_grid=self.search_grid(spec),
            scoring="neg_root_mean_squared_error",
            cv=KFold(n_splits=config.cv_folds, shuffle=True, random_state=seed),
            n_jobs=1,
            refit=True,
            error_score="raise",
        )

        t0 = time.perf_counter()
        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always", ConvergenceWarning)
                grid.fit(data.X, data.y)
        except FIT_ERRORS as e:
            raise ConvergenceError(self.name, f"{type(e).__name__}: {e}") from e
        elapsed = time.perf_counter() - t0

        n_conv = sum(1 for w in caught if issubclass(w.category, ConvergenceWarning))
        if n_conv:
            logger.warning(f"[{self.name}] {n_conv} convergence warnings during the search")

        cv_rmse = float(-grid.best_score_)
        if not np.isfinite(cv_rmse):
            raise ConvergenceError(self.name, f"non-finite cross-validated RMSE ({cv_rmse})")
        if config.time_budget is not None and elapsed > float(config.time_budget):
            raise ConvergenceError(self.name, f"exceeded time budget ({elapsed:.1f}s > {config.time_budget}s)")

        best = {k.replace("regressor__", "", 1): v for k, v in grid.best_params_.items()}
        return FittedModel(
            spec=spec,
            estimator=grid.best_estimator_,
            feature_names=data.feature_names,
            best_params=best,
            cv_rmse=cv_rmse,
            seed=seed,
            fit_seconds=elapsed,
        )

    def predict(self, fitted: FittedModel, X: np.ndarray) -> np.ndarray:
        pred = np.ravel(np.asarray(fitted.estimator.predict(np.asarray(X, dtype=float)), dtype=float))
        if not np.all(np.isfinite(pred)):
            raise ConvergenceError(self.name, "non-finite predictions")
        return pred

    def feature_importances(self, fitted: FittedModel) -> Optional[np.ndarray]:
        imp = self.importances(self.final_model(fitted))
        if imp is None:
            return None
        imp = np.ravel(np.asarray(imp, dtype=float))
        if imp.shape[0] != len(fitted.feature_names):
            return None
        return imp

    @staticmethod
    def final_model(fitted: FittedModel) -> Any:
        est = fitted.estimator
        if isinstance(est, TransformedTargetRegressor):
            est = est.regressor_
        return est.named_steps["model"]

