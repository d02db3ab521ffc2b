from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from shortfall.config import DEFAULT_FAMILIES, DEFAULT_SEED, DEFAULT_TARGET, PipelineConfig, parse_families, parse_hidden_layers
from shortfall.data.dataset import DEFAULT_INPUT, Dataset, read_table
from shortfall.data.prepare import IMPUTE_STRATEGIES, prepare_frame
from shortfall.errors import ConfigurationError, DataError, NoViableModelError
from shortfall.logs import setup_logging
from shortfall.modeling.report import format_ranking, format_report, report_payload, write_json
from shortfall.pipeline import run_pipeline, write_artifacts

logger = logging.getLogger("shortfall")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="shortfall",
        description="Compare regression families at predicting the affordable-housing shortfall proxy.",
    )
    ap.add_argument(
        "data",
        type=Path,
        nargs="?",
        default=DEFAULT_INPUT,
        help=f"Prepared county table, .csv or .parquet (default: {DEFAULT_INPUT})",
    )
    ap.add_argument("--target", default=DEFAULT_TARGET, help=f"Target column (default: {DEFAULT_TARGET})")
    ap.add_argument("--id-col", default=None, help="Row identifier column, e.g. county FIPS")
    ap.add_argument("--drop", nargs="*", default=[], help="Columns to ignore")
    ap.add_argument("--train-ratio", type=float, default=0.8)
    ap.add_argument("--seed", type=int, default=DEFAULT_SEED)
    ap.add_argument("--cv-folds", type=int, default=5)
    ap.add_argument("--hidden-layers", default="5,3", help="Neural net hidden widths (default: 5,3)")
    ap.add_argument("--families", default=",".join(DEFAULT_FAMILIES), help="Comma-separated model families")
    ap.add_argument("--include-xgb", action="store_true", help="Also train the optional XGBoost family")
    ap.add_argument("--n-jobs", type=int, default=1, help="Parallel family fits (-1 = all cores)")
    ap.add_argument("--time-budget", type=float, default=None, help="Seconds per family before it counts as failed")
    ap.add_argument("--impute", choices=IMPUTE_STRATEGIES, default=None, help="Clean + impute the raw table first")
    ap.add_argument("--top", type=int, default=10, help="Feature importances to print")
    ap.add_argument("--out-dir", type=Path, default=None, help="Write split.csv, report.json and the winning model")
    ap.add_argument("--json", type=Path, default=None, help="Write report JSON here")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    families = parse_families(args.families)
    if args.include_xgb and "xgboost" not in families:
        families = families + ("xgboost",)
    return PipelineConfig(
        train_ratio=args.train_ratio,
        seed=args.seed,
        cv_folds=args.cv_folds,
        hidden_layers=parse_hidden_layers(args.hidden_layers),
        families=families,
        n_jobs=args.n_jobs,
        time_budget=args.time_budget,
        top_n_importances=args.top,
    )


def load_input(args: argparse.Namespace) -> Dataset:
    df = read_table(args.data)
    if args.impute:
        df = prepare_frame(df, args.target, id_col=args.id_col, drop=args.drop, impute=args.impute)
    return Dataset.from_frame(df, args.target, id_col=args.id_col, drop=args.drop)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = config_from_args(args)
    except ConfigurationError as e:
        logger.error(f"[config] {e}")
        return 2

    try:
        data = load_input(args)
    except (DataError, FileNotFoundError) as e:
        logger.error(f"[load] {e}")
        return 1
    logger.info(f"Loaded {len(data)} rows x {len(data.feature_names)} features from {args.data}")

    try:
        run = run_pipeline(data, config)
    except ConfigurationError as e:
        logger.error(f"[split/train] {e}")
        return 2
    except NoViableModelError as e:
        logger.error(f"[select] {e}")
        print(format_ranking(e.failures))
        return 1

    print(format_report(run.selection, top_n=config.top_n_importances))

    if args.json:
        write_json(args.json, report_payload(run.selection))
    if args.out_dir:
        paths = write_artifacts(run, args.out_dir)
        for kind, p in paths.items():
            print(f"[ARTIFACT] {kind}: {p}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
