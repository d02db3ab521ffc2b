from __future__ import annotations

from typing import Dict, List, Optional, Type

from shortfall.config import KNOWN_FAMILIES, PipelineConfig
from shortfall.errors import ConfigurationError
from shortfall.modeling.base import RegressorFamily
from shortfall.modeling.neural_models import NeuralNetFamily
from shortfall.modeling.sklearn_models import (
    DecisionTreeFamily,
    ElasticNetFamily,
    GradientBoostingFamily,
    LinearRegressionFamily,
    PLSFamily,
    RandomForestFamily,
)


FAMILIES: Dict[str, Type[RegressorFamily]] = {
    cls.name: cls
    for cls in (
        LinearRegressionFamily,
        ElasticNetFamily,
        PLSFamily,
        NeuralNetFamily,
        DecisionTreeFamily,
        RandomForestFamily,
        GradientBoostingFamily,
    )
}


def family_class(name: str) -> Type[RegressorFamily]:
    if name in FAMILIES:
        return FAMILIES[name]
    if name == "xgboost":
        # optional dependency; imported only when asked for
        from shortfall.modeling.xgb_models import XGBoostFamily

        return XGBoostFamily
    raise ConfigurationError(f"Unknown model family: {name}. Known: {', '.join(KNOWN_FAMILIES)}")


def build_families(config: Optional[PipelineConfig] = None) -> List[RegressorFamily]:
    config = config or PipelineConfig()
    return [family_class(name)(config) for name in config.families]
