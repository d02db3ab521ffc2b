from __future__ import annotations

import logging
import warnings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
    # sklearn's warnings are re-logged by the trainer with the family name attached
    logging.captureWarnings(True)
    if not verbose:
        warnings.filterwarnings("ignore", category=FutureWarning)


def banner(logger: logging.Logger, title: str) -> None:
    logger.info("=" * 70)
    logger.info(title)
    logger.info("=" * 70)
