"""Affordable-housing shortfall model comparison.

Loads a prepared county table, splits it once (stratified on the target),
fits several regression families with cross-validated grid search, and
reports the family with the lowest held-out RMSE plus its feature ranking.
"""
from __future__ import annotations

from shortfall.config import PipelineConfig
from shortfall.data.dataset import Dataset, load_dataset
from shortfall.errors import ConfigurationError, ConvergenceError, DataError, NoViableModelError, ShortfallError
from shortfall.pipeline import PipelineRun, run_pipeline

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ConvergenceError",
    "DataError",
    "Dataset",
    "NoViableModelError",
    "PipelineConfig",
    "PipelineRun",
    "ShortfallError",
    "load_dataset",
    "run_pipeline",
]
