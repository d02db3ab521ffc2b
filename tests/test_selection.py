"""Tests for metrics, ranking and winner selection."""

import numpy as np
import pytest

from shortfall.errors import NoViableModelError
from shortfall.modeling.evaluation import r2, rank_importances, rmse
from shortfall.modeling.report import format_ranking, format_report, report_payload
from shortfall.modeling.selection import select_best
from shortfall.modeling.types import EvaluationResult


def ok(name, value, importances=None):
    return EvaluationResult(name=name, rmse=value, cv_rmse=value, importances=importances)


def bad(name):
    return EvaluationResult(name=name, error=f"{name}: ValueError: boom")


class TestRmse:
    def test_exact_predictions(self):
        y = np.array([1.0, 2.0, 3.0])
        assert rmse(y, y) == 0.0

    def test_value(self):
        assert rmse(np.array([0.0, 0.0]), np.array([3.0, 4.0])) == pytest.approx(np.sqrt(12.5))

    def test_positive_when_any_error(self):
        y = np.zeros(50)
        yhat = np.zeros(50)
        yhat[17] = 1e-6
        assert rmse(y, yhat) > 0

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="shape"):
            rmse(np.zeros(3), np.zeros(4))

    def test_empty(self):
        with pytest.raises(ValueError):
            rmse(np.array([]), np.array([]))

    def test_r2_constant_target(self):
        assert r2(np.ones(4), np.ones(4)) is None


class TestRankImportances:
    def test_descending(self):
        ranked = rank_importances(["a", "b", "c"], np.array([0.1, 0.7, 0.2]))
        assert [n for n, _ in ranked] == ["b", "c", "a"]

    def test_ties_keep_schema_order(self):
        ranked = rank_importances(["a", "b", "c"], np.array([0.5, 0.5, 0.9]))
        assert [n for n, _ in ranked] == ["c", "a", "b"]


class TestSelectBest:
    def test_lowest_rmse_wins(self):
        sel = select_best([ok("glm", 0.9), ok("tree", 0.4), ok("gbm", 0.6)])
        assert sel.winner.name == "tree"
        assert [r.name for r in sel.ranking] == ["tree", "gbm", "glm"]

    def test_failures_excluded(self):
        sel = select_best([bad("neural_net"), ok("glm", 0.9), ok("pls", 1.1)])
        assert sel.winner.name == "glm"
        assert [r.name for r in sel.failures] == ["neural_net"]
        assert len(sel.ranking) == 2

    def test_all_failed(self):
        with pytest.raises(NoViableModelError, match="neural_net, tree") as exc:
            select_best([bad("neural_net"), bad("tree")])
        assert [r.name for r in exc.value.failures] == ["neural_net", "tree"]

    def test_tie_keeps_input_order(self):
        sel = select_best([ok("pls", 0.5), ok("glm", 0.5)])
        assert sel.winner.name == "pls"

    def test_top_features(self):
        imp = (("f1", 3.0), ("f2", 2.0), ("f3", 1.0))
        sel = select_best([ok("glm", 0.5, imp)])
        assert sel.top_features(2) == [("f1", 3.0), ("f2", 2.0)]

    def test_winner_without_importances(self):
        sel = select_best([ok("neural_net", 0.5)])
        assert sel.top_features() == []


class TestReport:
    def test_format_report(self):
        imp = (("f1", 3.0), ("f2", 2.0))
        text = format_report(select_best([ok("glm", 0.5, imp), ok("tree", 0.8), bad("neural_net")]))
        assert "Winner: glm" in text
        assert "FAILED" in text
        assert "neural_net" in text
        assert text.index("glm") < text.index("tree")
        assert "1. f1" in text

    def test_format_ranking_failures_only(self):
        text = format_ranking([bad("gbm")])
        assert "gbm" in text and "FAILED" in text

    def test_payload(self):
        payload = report_payload(select_best([ok("glm", 0.5, (("f1", 1.0),)), bad("tree")]), extra={"seed": 101})
        assert payload["winner"] == "glm"
        assert payload["importances"] == [{"feature": "f1", "score": 1.0}]
        assert payload["failures"][0]["name"] == "tree"
        assert payload["seed"] == 101
