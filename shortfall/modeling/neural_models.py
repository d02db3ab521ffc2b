from __future__ import annotations

from typing import Any, Dict, List

from sklearn.neural_network import MLPRegressor

from shortfall.modeling.base import RegressorFamily
from shortfall.modeling.types import MINMAX


class NeuralNetFamily(RegressorFamily):
    """Two-hidden-layer feed-forward regressor.

    Features and target are min-max scaled to [0, 1]; the target transform is
    inverted inside ``predict`` so RMSE is on the original scale like every
    other family. Output activation is the identity (MLPRegressor's only option).
    """

    name = "neural_net"
    preprocessing = MINMAX
    scale_target = True

    ALPHAS = [1e-4, 1e-3, 1e-2, 1e-1]

    def param_grid(self, n_features: int, n_rows: int) -> Dict[str, List[Any]]:
        return {"model__alpha": list(self.ALPHAS)}

    def make_estimator(self, seed: int):
        return MLPRegressor(
            hidden_layer_sizes=tuple(self.config.hidden_layers),
            activation="logistic",
            solver="lbfgs",
            max_iter=5000,
            random_state=seed,
        )
