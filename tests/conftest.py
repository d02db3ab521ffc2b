"""Shared fixtures: small synthetic county tables."""

import numpy as np
import pandas as pd
import pytest

from shortfall.config import PipelineConfig
from shortfall.data.dataset import Dataset

NOISE_SD = 0.3


def make_linear_frame(n: int = 100, seed: int = 7) -> pd.DataFrame:
    """shortfall = 2*f1 - f2 + 0.5*f3 + noise, features ~ N(0, 1)."""
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(n, 3))
    y = 2.0 * X[:, 0] - X[:, 1] + 0.5 * X[:, 2] + rng.normal(scale=NOISE_SD, size=n)
    return pd.DataFrame(
        {
            "fips": [f"{42000 + i:05d}" for i in range(n)],
            "f1": X[:, 0],
            "f2": X[:, 1],
            "f3": X[:, 2],
            "shortfall": y,
        }
    )


@pytest.fixture
def linear_frame():
    return make_linear_frame()


@pytest.fixture
def linear_dataset(linear_frame):
    return Dataset.from_frame(linear_frame, "shortfall", id_col="fips")


@pytest.fixture
def fast_config():
    """Cheap families only, for tests that don't care which ones run."""
    return PipelineConfig(seed=101, families=("glm", "elastic_net", "tree"))


@pytest.fixture(scope="session")
def frame_factory():
    return make_linear_frame
