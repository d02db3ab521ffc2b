from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
from sklearn.cross_decomposition import PLSRegression
from sklearn.ensemble import GradientBoostingRegressor, RandomForestRegressor
from sklearn.linear_model import ElasticNet, LinearRegression
from sklearn.tree import DecisionTreeRegressor

from shortfall.modeling.base import RegressorFamily
from shortfall.modeling.types import NONE, STANDARDIZE


def _abs_coef(model: Any) -> Optional[np.ndarray]:
    # Coefficients are on standardized features, so magnitudes are comparable.
    coef = getattr(model, "coef_", None)
    if coef is None:
        return None
    return np.abs(np.ravel(coef))


def _impurity(model: Any) -> Optional[np.ndarray]:
    return getattr(model, "feature_importances_", None)


class LinearRegressionFamily(RegressorFamily):
    """Gaussian GLM, i.e. ordinary least squares. Nothing to tune."""

    name = "glm"
    preprocessing = STANDARDIZE

    def param_grid(self, n_features: int, n_rows: int) -> Dict[str, List[Any]]:
        return {"model__fit_intercept": [True]}

    def make_estimator(self, seed: int):
        return LinearRegression()

    def importances(self, model):
        return _abs_coef(model)


class ElasticNetFamily(RegressorFamily):
    name = "elastic_net"
    preprocessing = STANDARDIZE

    L1_RATIOS = [0.1, 0.325, 0.55, 0.775, 1.0]
    ALPHAS = np.logspace(-4, 1, 12).tolist()

    def param_grid(self, n_features: int, n_rows: int) -> Dict[str, List[Any]]:
        return {"model__l1_ratio": list(self.L1_RATIOS), "model__alpha": list(self.ALPHAS)}

    def make_estimator(self, seed: int):
        return ElasticNet(max_iter=20_000)

    def importances(self, model):
        return _abs_coef(model)


class PLSFamily(RegressorFamily):
    """Partial least squares: latent components searched up to MAX_COMPONENTS."""

    name = "pls"
    preprocessing = STANDARDIZE

    MAX_COMPONENTS = 15

    def param_grid(self, n_features: int, n_rows: int) -> Dict[str, List[Any]]:
        # smallest CV training fold bounds the component count too
        fold_rows = n_rows - int(np.ceil(n_rows / self.config.cv_folds))
        top = max(1, min(self.MAX_COMPONENTS, n_features, fold_rows - 1))
        return {"model__n_components": list(range(1, top + 1))}

    def make_estimator(self, seed: int):
        # already standardized by the pipeline scaler
        return PLSRegression(scale=False)

    def importances(self, model):
        return _abs_coef(model)


class DecisionTreeFamily(RegressorFamily):
    name = "tree"
    preprocessing = NONE

    def param_grid(self, n_features: int, n_rows: int) -> Dict[str, List[Any]]:
        return {
            "model__max_depth": [2, 3, 4, 6, 8, None],
            "model__min_samples_leaf": [1, 5, 10],
        }

    def make_estimator(self, seed: int):
        return DecisionTreeRegressor(random_state=seed)

    def importances(self, model):
        return _impurity(model)


class RandomForestFamily(RegressorFamily):
    name = "random_forest"
    preprocessing = NONE

    def __init__(self, config=None, *, n_estimators: int = 300):
        super().__init__(config)
        self.n_estimators = int(n_estimators)

    def param_grid(self, n_features: int, n_rows: int) -> Dict[str, List[Any]]:
        return {
            "model__max_features": [0.33, 0.5, 1.0],
            "model__min_samples_leaf": [1, 5],
        }

    def make_estimator(self, seed: int):
        return RandomForestRegressor(n_estimators=self.n_estimators, random_state=seed, n_jobs=1)

    def importances(self, model):
        return _impurity(model)


class GradientBoostingFamily(RegressorFamily):
    name = "gbm"
    preprocessing = NONE

    def param_grid(self, n_features: int, n_rows: int) -> Dict[str, List[Any]]:
        return {
            "model__n_estimators": [100, 300],
            "model__max_depth": [2, 3],
            "model__learning_rate": [0.05, 0.1],
        }

    def make_estimator(self, seed: int):
        return GradientBoostingRegressor(subsample=0.8, random_state=seed)

    def importances(self, model):
        return _impurity(model)
