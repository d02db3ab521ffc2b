"""Tests for dataset loading and validation."""

import numpy as np
import pandas as pd
import pytest

from shortfall.data.dataset import Dataset, load_dataset, read_table
from shortfall.errors import DataError


class TestFromFrame:
    """Tests for Dataset.from_frame."""

    def test_schema(self, linear_frame):
        """Id and target are split out; feature order is kept."""
        data = Dataset.from_frame(linear_frame, "shortfall", id_col="fips")
        assert data.feature_names == ["f1", "f2", "f3"]
        assert data.target_name == "shortfall"
        assert len(data) == 100
        assert data.X.shape == (100, 3)
        assert data.y.shape == (100,)
        assert data.row_ids[0] == "42000"

    def test_positional_row_ids(self, linear_frame):
        data = Dataset.from_frame(linear_frame.drop(columns=["fips"]), "shortfall")
        assert data.row_ids == tuple(range(100))

    def test_drop_columns(self, linear_frame):
        data = Dataset.from_frame(linear_frame, "shortfall", id_col="fips", drop=["f3"])
        assert data.feature_names == ["f1", "f2"]

    def test_missing_target(self, linear_frame):
        with pytest.raises(DataError, match="Target column 'risk' not found"):
            Dataset.from_frame(linear_frame, "risk")

    def test_non_numeric_column(self, linear_frame):
        """Text columns are a contract violation, not something to coerce here."""
        with pytest.raises(DataError) as exc:
            Dataset.from_frame(linear_frame, "shortfall")
        assert exc.value.columns == ["fips"]

    def test_missing_values(self, linear_frame):
        linear_frame.loc[3, "f2"] = np.nan
        with pytest.raises(DataError, match="Missing values") as exc:
            Dataset.from_frame(linear_frame, "shortfall", id_col="fips")
        assert exc.value.columns == ["f2"]

    def test_missing_target_value(self, linear_frame):
        linear_frame.loc[0, "shortfall"] = np.nan
        with pytest.raises(DataError, match="shortfall"):
            Dataset.from_frame(linear_frame, "shortfall", id_col="fips")

    def test_infinite_values(self, linear_frame):
        linear_frame.loc[5, "f1"] = np.inf
        with pytest.raises(DataError, match="Non-finite") as exc:
            Dataset.from_frame(linear_frame, "shortfall", id_col="fips")
        assert exc.value.columns == ["f1"]

    def test_duplicate_ids(self, linear_frame):
        linear_frame.loc[1, "fips"] = linear_frame.loc[0, "fips"]
        with pytest.raises(DataError, match="duplicate"):
            Dataset.from_frame(linear_frame, "shortfall", id_col="fips")

    def test_no_features(self):
        df = pd.DataFrame({"shortfall": [1.0, 2.0]})
        with pytest.raises(DataError, match="no feature columns"):
            Dataset.from_frame(df, "shortfall")

    def test_take_keeps_ids(self, linear_dataset):
        sub = linear_dataset.take([5, 2])
        assert sub.row_ids == ("42005", "42002")
        assert sub.y[0] == linear_dataset.y[5]


class TestLoadDataset:
    """Tests for reading tables from disk."""

    def test_csv(self, tmp_path, linear_frame):
        path = tmp_path / "counties.csv"
        linear_frame.to_csv(path, index=False)
        data = load_dataset(path, "shortfall", id_col="fips")
        assert len(data) == 100
        assert data.feature_names == ["f1", "f2", "f3"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_table(tmp_path / "nope.csv")

    def test_undecodable_bytes(self, tmp_path):
        """Decode failures surface as DataError, not a raw UnicodeDecodeError."""
        path = tmp_path / "garbled.csv"
        path.write_bytes(b"\xff\xfe\x00f\x00\x01\x80\x81,\xfe\n\xff")
        with pytest.raises(DataError, match="Could not read"):
            read_table(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(DataError, match="EmptyDataError"):
            read_table(path)

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "counties.xlsx"
        path.write_text("x")
        with pytest.raises(DataError, match="Unsupported input format"):
            read_table(path)
