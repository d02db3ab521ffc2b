"""Tests for the command-line entry point."""

import json
import sys

import numpy as np
import pytest

from shortfall.cli import build_parser, config_from_args, main


@pytest.fixture
def csv_path(tmp_path, linear_frame):
    path = tmp_path / "counties.csv"
    linear_frame.to_csv(path, index=False)
    return path


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["data.csv"])
        config = config_from_args(args)
        assert config.train_ratio == 0.8
        assert config.cv_folds == 5
        assert config.hidden_layers == (5, 3)
        assert len(config.families) == 7

    def test_include_xgb(self):
        args = build_parser().parse_args(["data.csv", "--families", "glm", "--include-xgb"])
        assert config_from_args(args).families == ("glm", "xgboost")


class TestMain:
    def test_success(self, csv_path, tmp_path, capsys):
        out_dir = tmp_path / "out"
        code = main([
            str(csv_path), "--target", "shortfall", "--id-col", "fips",
            "--families", "glm,tree", "--out-dir", str(out_dir), "--json", str(tmp_path / "r.json"),
        ])
        assert code == 0
        captured = capsys.readouterr()
        assert "Winner:" in captured.out
        assert (out_dir / "split.csv").exists()
        assert (out_dir / "report.json").exists()
        assert json.loads((tmp_path / "r.json").read_text())["winner"] in {"glm", "tree"}

    def test_bad_hidden_layers(self, csv_path):
        assert main([str(csv_path), "--id-col", "fips", "--hidden-layers", "5"]) == 2

    def test_unknown_family(self, csv_path):
        assert main([str(csv_path), "--id-col", "fips", "--families", "svm"]) == 2

    def test_bad_ratio(self, csv_path):
        assert main([str(csv_path), "--id-col", "fips", "--train-ratio", "1.5"]) == 2

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "missing.csv")]) == 1

    def test_data_error(self, tmp_path, linear_frame):
        """A text column left in as a feature is a contract violation."""
        linear_frame["county_name"] = "Allegheny"
        path = tmp_path / "named.csv"
        linear_frame.to_csv(path, index=False)
        assert main([str(path), "--id-col", "fips", "--families", "glm"]) == 1

    def test_impute_raw_table(self, tmp_path, linear_frame, capsys):
        raw = linear_frame.copy()
        raw.loc[[3, 10, 40], "f2"] = np.nan
        raw["f3"] = raw["f3"].map(lambda v: f"{v:.4f}%")
        path = tmp_path / "raw.csv"
        raw.to_csv(path, index=False)

        assert main([str(path), "--id-col", "fips", "--families", "glm"]) == 1
        assert main([str(path), "--id-col", "fips", "--families", "glm", "--impute", "median"]) == 0
        assert "Winner: glm" in capsys.readouterr().out

    def test_all_failed(self, csv_path, capsys):
        code = main([str(csv_path), "--id-col", "fips", "--families", "glm", "--time-budget", "1e-12"])
        assert code == 1
        assert "FAILED" in capsys.readouterr().out

    def test_xgboost_unavailable_is_a_family_failure(self, csv_path, monkeypatch, capsys):
        """A missing optional dependency fails that family; the rest still rank."""
        monkeypatch.setitem(sys.modules, "xgboost", None)
        code = main([str(csv_path), "--id-col", "fips", "--families", "glm", "--include-xgb"])
        assert code == 0
        out = capsys.readouterr().out
        assert "Winner: glm" in out
        failed = [line for line in out.splitlines() if "FAILED" in line]
        assert len(failed) == 1
        assert "xgboost" in failed[0]

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "garbled.csv"
        path.write_bytes(b"\xff\xfe\x00f\x00\x01\x80\x81,\xfe\n\xff")
        assert main([str(path), "--id-col", "fips"]) == 1
