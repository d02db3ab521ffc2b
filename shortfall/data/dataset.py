from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from shortfall.errors import DataError


DEFAULT_INPUT = Path("data/processed/county_shortfall.csv")


@dataclass(frozen=True, eq=False)
class Dataset:
    """Prepared rows: one per county, fixed feature schema, numeric target.

    ``row_ids`` identify original rows (an id column or the positional index)
    so a split can be written out and reproduced.
    """

    features: pd.DataFrame
    target: pd.Series
    row_ids: Tuple[object, ...]

    @property
    def feature_names(self) -> List[str]:
        return list(self.features.columns)

    @property
    def target_name(self) -> str:
        return str(self.target.name)

    @property
    def X(self) -> np.ndarray:
        return self.features.to_numpy(dtype=float)

    @property
    def y(self) -> np.ndarray:
        return self.target.to_numpy(dtype=float)

    def __len__(self) -> int:
        return len(self.target)

    def take(self, positions: Sequence[int]) -> "Dataset":
        pos = np.asarray(positions, dtype=int)
        return Dataset(
            features=self.features.iloc[pos].copy(),
            target=self.target.iloc[pos].copy(),
            row_ids=tuple(self.row_ids[i] for i in pos),
        )

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        target: str,
        *,
        id_col: Optional[str] = None,
        drop: Iterable[str] = (),
    ) -> "Dataset":
        if target not in df.columns:
            raise DataError(f"Target column {target!r} not found", columns=[target])
        if id_col is not None and id_col not in df.columns:
            raise DataError(f"Id column {id_col!r} not found", columns=[id_col])

        ignore = {target, *drop}
        if id_col is not None:
            ignore.add(id_col)
        feats = [c for c in df.columns if c not in ignore]

        if df.empty:
            raise DataError("Dataset has no rows")
        if not feats:
            raise DataError("Dataset has no feature columns")

        features = df.loc[:, feats].reset_index(drop=True)
        y = df[target].reset_index(drop=True)
        _check_numeric(pd.concat([features, y], axis=1))

        row_ids = tuple(df[id_col].tolist()) if id_col is not None else tuple(range(len(df)))
        if len(set(row_ids)) != len(row_ids):
            raise DataError(f"Id column {id_col!r} has duplicate values", columns=[id_col] if id_col else [])

        return cls(
            features=features.astype("float64"),
            target=y.astype("float64").rename(target),
            row_ids=row_ids,
        )


def _check_numeric(df: pd.DataFrame) -> None:
    non_numeric = [str(c) for c in df.columns if not pd.api.types.is_numeric_dtype(df[c])]
    if non_numeric:
        raise DataError(
            f"Non-numeric columns reached the pipeline: {', '.join(non_numeric)}",
            columns=non_numeric,
        )

    missing = [str(c) for c in df.columns if df[c].isna().any()]
    if missing:
        raise DataError(
            f"Missing values reached the pipeline in: {', '.join(missing)}. Impute before training.",
            columns=missing,
        )

    values = df.to_numpy(dtype=float)
    bad = ~np.isfinite(values).all(axis=0)
    if bad.any():
        cols = [str(c) for c, b in zip(df.columns, bad) if b]
        raise DataError(f"Non-finite values in: {', '.join(cols)}", columns=cols)


def read_table(path: Path) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input table not found: {path}. Expected default at {DEFAULT_INPUT}.")

    suffix = path.suffix.lower()
    if suffix not in {".parquet", ".csv", ".txt", ".tsv"}:
        raise DataError(f"Unsupported input format {suffix!r} (expected .csv, .tsv or .parquet)")

    # ParserError, EmptyDataError, UnicodeDecodeError and ArrowInvalid are all ValueErrors
    try:
        if suffix == ".parquet":
            return pd.read_parquet(path)
        return pd.read_csv(path, sep="\t" if suffix == ".tsv" else ",")
    except ValueError as e:
        raise DataError(f"Could not read {path}: {type(e).__name__}: {e}") from e


def load_dataset(
    path: Path,
    target: str,
    *,
    id_col: Optional[str] = None,
    drop: Iterable[str] = (),
) -> Dataset:
    """Read a prepared table from disk and validate it."""
    return Dataset.from_frame(read_table(path), target, id_col=id_col, drop=drop)
