"""Optional Dataset Preparer.

The pipeline itself refuses missing or non-numeric values. Raw county
extracts usually carry both (spreadsheet exports with "$1,234" or "12%"),
so this module offers the cleaning step that normally happens upstream:
coerce, drop hopeless columns/rows, impute the rest.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from shortfall.errors import ConfigurationError, DataError

logger = logging.getLogger(__name__)

IMPUTE_STRATEGIES = ("none", "median", "mean")

_NUMERIC_JUNK = r"[,\$%\s]"


def coerce_numeric(s: pd.Series) -> pd.Series:
    if pd.api.types.is_numeric_dtype(s):
        return s.astype("float64")
    # unparseable leftovers ("", "N/A", "-") become NaN
    cleaned = s.astype(str).str.replace(_NUMERIC_JUNK, "", regex=True)
    return pd.to_numeric(cleaned, errors="coerce").astype("float64")


def prepare_frame(
    df: pd.DataFrame,
    target: str,
    *,
    id_col: Optional[str] = None,
    drop: Iterable[str] = (),
    impute: str = "median",
) -> pd.DataFrame:
    """Return a numeric, gap-free copy of ``df`` ready for ``Dataset.from_frame``.

    - text columns are coerced to numbers; a column that is entirely
      non-numeric after coercion is dropped
    - rows with a missing target are dropped (never imputed)
    - remaining feature gaps are filled with the column median or mean,
      computed over the whole table before any split
    """
    if impute not in IMPUTE_STRATEGIES:
        raise ConfigurationError(f"impute must be one of {IMPUTE_STRATEGIES}, got {impute!r}")
    if target not in df.columns:
        raise DataError(f"Target column {target!r} not found", columns=[target])

    skip = set(drop)
    keep = [c for c in df.columns if c not in skip]
    out = df.loc[:, keep].copy()

    value_cols = [c for c in out.columns if c != id_col]
    dropped: List[str] = []
    for c in value_cols:
        out[c] = coerce_numeric(out[c])
        if c != target and out[c].isna().all():
            dropped.append(str(c))
    if dropped:
        logger.warning(f"Dropping {len(dropped)} non-numeric/empty columns: {', '.join(dropped)}")
        out = out.drop(columns=dropped)

    before = len(out)
    out = out[out[target].notna()].reset_index(drop=True)
    if len(out) < before:
        logger.warning(f"Dropped {before - len(out)} rows with missing target {target!r}")

    feats = [c for c in out.columns if c not in {target, id_col}]
    gaps = out[feats].isna().sum()
    gaps = gaps[gaps > 0]
    if len(gaps) and impute == "none":
        raise DataError(
            f"Missing values in {len(gaps)} feature columns and impute='none'",
            columns=[str(c) for c in gaps.index],
        )
    if len(gaps):
        fill = out[feats].median() if impute == "median" else out[feats].mean()
        out[feats] = out[feats].fillna(fill)
        logger.info(f"Imputed {int(gaps.sum())} missing values ({impute}) across {len(gaps)} columns")

    out[feats] = out[feats].replace([np.inf, -np.inf], np.nan)
    if out[feats].isna().any().any():
        bad = [str(c) for c in feats if out[c].isna().any()]
        raise DataError(f"Non-finite values remain after preparation in: {', '.join(bad)}", columns=bad)

    return out
