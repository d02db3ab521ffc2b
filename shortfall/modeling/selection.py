from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from shortfall.errors import NoViableModelError
from shortfall.modeling.types import EvaluationResult


@dataclass(frozen=True)
class Selection:
    ranking: Tuple[EvaluationResult, ...]  # successful families, best first
    failures: Tuple[EvaluationResult, ...]
    winner: EvaluationResult

    @property
    def importances(self) -> Optional[Tuple[Tuple[str, float], ...]]:
        return self.winner.importances

    def top_features(self, n: int = 10) -> List[Tuple[str, float]]:
        if self.importances is None:
            return []
        return list(self.importances[: max(0, int(n))])


def rank_results(results: Sequence[EvaluationResult]) -> Tuple[Tuple[EvaluationResult, ...], Tuple[EvaluationResult, ...]]:
    """Split into (successes by ascending RMSE, failures). Ties keep input order."""
    ok = [r for r in results if r.ok]
    bad = [r for r in results if not r.ok]
    ok_sorted = sorted(enumerate(ok), key=lambda t: (t[1].rmse, t[0]))
    return tuple(r for _, r in ok_sorted), tuple(bad)


def select_best(results: Sequence[EvaluationResult]) -> Selection:
    ranking, failures = rank_results(results)
    if not ranking:
        raise NoViableModelError(failures)
    return Selection(ranking=ranking, failures=failures, winner=ranking[0])
