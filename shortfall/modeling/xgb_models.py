from __future__ import annotations

from typing import Any, Dict, List

from shortfall.modeling.base import RegressorFamily
from shortfall.modeling.types import NONE


class XGBoostFamily(RegressorFamily):
    """Optional XGBoost regressor.

    Lazy-imports xgboost so the default run doesn't need the dependency.
    """

    name = "xgboost"
    preprocessing = NONE

    def param_grid(self, n_features: int, n_rows: int) -> Dict[str, List[Any]]:
        return {
            "model__n_estimators": [200, 500],
            "model__max_depth": [2, 4],
            "model__learning_rate": [0.03, 0.1],
        }

    def make_estimator(self, seed: int):
        try:
            from xgboost import XGBRegressor  # type: ignore
        except Exception as e:
            msg = (
                "Failed to import xgboost. Common macOS cause: missing OpenMP runtime (libomp). "
                "Try: `brew install libomp`. Also ensure the extra is installed: "
                "`pip install -e .[xgb]`."
            )
            raise RuntimeError(msg) from e

        return XGBRegressor(
            subsample=0.8,
            colsample_bytree=0.8,
            reg_lambda=1.0,
            min_child_weight=1.0,
            objective="reg:squarederror",
            random_state=seed,
            n_jobs=1,
        )

    def importances(self, model):
        return getattr(model, "feature_importances_", None)
