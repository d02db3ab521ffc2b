from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import numpy as np
import pandas as pd

from shortfall.data.dataset import Dataset
from shortfall.errors import ConfigurationError

logger = logging.getLogger(__name__)

MIN_ROWS = 10


@dataclass(frozen=True, eq=False)
class Split:
    train: Dataset
    test: Dataset
    train_positions: Tuple[int, ...]
    test_positions: Tuple[int, ...]
    ratio: float
    seed: int

    def assignment(self) -> pd.DataFrame:
        """Which original row went where, in original row order."""
        rows = [(p, self.train.row_ids[i], "train") for i, p in enumerate(self.train_positions)]
        rows += [(p, self.test.row_ids[i], "test") for i, p in enumerate(self.test_positions)]
        rows.sort(key=lambda r: r[0])
        return pd.DataFrame(rows, columns=["position", "row_id", "subset"])

    def save(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.assignment().to_csv(path, index=False)
        return path


def target_strata(y: np.ndarray, n_bins: int) -> np.ndarray:
    """Quantile bin of each target value (0..n_bins-1).

    Rank based rather than ``pd.qcut`` so heavy ties never collapse bins;
    ties are broken by position, which keeps it deterministic.
    """
    y = np.asarray(y, dtype=float)
    n = len(y)
    n_bins = int(max(1, min(n_bins, n)))
    ranks = np.argsort(np.argsort(y, kind="stable"), kind="stable")
    return (ranks * n_bins) // n


def _apportion(bin_sizes: np.ndarray, n_train: int) -> np.ndarray:
    # largest remainder: per-bin quotas summing exactly to n_train
    n = int(bin_sizes.sum())
    exact = bin_sizes * (n_train / n)
    quota = np.floor(exact).astype(int)
    short = n_train - int(quota.sum())
    if short > 0:
        order = np.argsort(-(exact - quota), kind="stable")
        quota[order[:short]] += 1
    return np.minimum(quota, bin_sizes)


def stratified_split(
    data: Dataset,
    ratio: float = 0.8,
    *,
    seed: int = 101,
    n_bins: int = 5,
    min_rows: int = MIN_ROWS,
) -> Split:
    """Partition ``data`` into train/test keeping the target distribution.

    Rows are binned by target quantile and each bin contributes its share of
    the ``round(ratio * n)`` training rows, so the realised ratio is within
    rounding of ``ratio``. Identical ``seed`` and input give an identical split.
    """
    if isinstance(ratio, bool) or not isinstance(ratio, (int, float)) or not (0.0 < float(ratio) < 1.0):
        raise ConfigurationError(f"Split ratio must be in (0, 1), got {ratio!r}")
    n = len(data)
    if n < min_rows:
        raise ConfigurationError(f"Dataset has {n} rows; at least {min_rows} are needed for a train/test split")

    n_train = int(round(float(ratio) * n))
    if n_train <= 0 or n_train >= n:
        raise ConfigurationError(
            f"Split ratio {ratio} leaves an empty subset for {n} rows (train={n_train}, test={n - n_train})"
        )

    strata = target_strata(data.y, n_bins)
    rng = np.random.default_rng(seed)

    bins = np.unique(strata)
    members = [np.flatnonzero(strata == b) for b in bins]
    quotas = _apportion(np.array([len(m) for m in members]), n_train)

    train_pos = []
    for idx, q in zip(members, quotas):
        chosen = rng.permutation(idx)[: int(q)]
        train_pos.extend(int(i) for i in chosen)

    train_sorted = tuple(sorted(train_pos))
    in_train = np.zeros(n, dtype=bool)
    in_train[list(train_sorted)] = True
    test_sorted = tuple(int(i) for i in np.flatnonzero(~in_train))

    logger.info(
        f"Split {n} rows -> train={len(train_sorted)}, test={len(test_sorted)} "
        f"(ratio={ratio}, seed={seed}, strata={len(bins)})"
    )
    return Split(
        train=data.take(train_sorted),
        test=data.take(test_sorted),
        train_positions=train_sorted,
        test_positions=test_sorted,
        ratio=float(ratio),
        seed=int(seed),
    )
