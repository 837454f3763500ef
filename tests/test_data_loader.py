"""Tests for dataset loading."""

import numpy as np
import pandas as pd
import pytest

from featsel.exceptions import ConfigurationError, DomainError
from featsel.preprocessing import Dataset, load_dataset, infer_column_type


class TestInferColumnType:

    def test_numeric(self):
        assert infer_column_type(pd.Series([1.0, 2.5])) == "numeric"

    def test_ordered_categorical_is_ordinal(self):
        s = pd.Series(pd.Categorical(["a", "b"], ordered=True))
        assert infer_column_type(s) == "ordinal"

    def test_text_is_nominal(self):
        assert infer_column_type(pd.Series(["x", "y"])) == "nominal"
        assert infer_column_type(pd.Series(pd.Categorical(["x", "y"]))) == "nominal"


class TestDataset:

    def test_feature_names_exclude_label(self, mixed_dataset):
        assert mixed_dataset.feature_names == ["Id", "thickness", "nuclei", "grade"]
        assert mixed_dataset.n_rows == 6

    def test_column_type_override(self, mixed_dataset):
        assert mixed_dataset.column_types["nuclei"] == "numeric"
        assert mixed_dataset.column_types["grade"] == "ordinal"
        assert mixed_dataset.columns_of_type("ordinal") == ["grade"]

    def test_missing_label_rejected(self):
        with pytest.raises(DomainError):
            Dataset(frame=pd.DataFrame({"a": [1]}), label="b")

    def test_bad_column_type_rejected(self):
        frame = pd.DataFrame({"a": [1], "y": [0]})
        with pytest.raises(ConfigurationError):
            Dataset(frame=frame, label="y", column_types={"a": "interval"})

    def test_summary_counts_missing(self, mixed_dataset):
        summary = mixed_dataset.summary()
        assert summary.loc["thickness", "missing"] == 1
        assert summary.loc["nuclei", "missing"] == 1


class TestLoadDataset:

    def test_builtin_iris(self):
        ds = load_dataset("iris", verbose=False)
        assert ds.label == "species"
        assert ds.n_rows == 150
        assert len(ds.feature_names) == 4
        assert set(ds.labels) == {"setosa", "versicolor", "virginica"}

    def test_builtin_breast_cancer(self):
        ds = load_dataset("breast_cancer", verbose=False)
        assert ds.label == "diagnosis"
        assert len(ds.feature_names) == 30
        assert set(ds.labels) == {"malignant", "benign"}

    def test_csv_with_question_mark_missing(self, tmp_path):
        path = tmp_path / "cells.csv"
        path.write_text("Id,size,nuclei,Class\n1,3,?,benign\n2,5,4,malignant\n3,1,1,benign\n")
        ds = load_dataset(path, drop_columns=["Id"], verbose=False)
        assert ds.label == "Class"
        assert ds.feature_names == ["size", "nuclei"]
        assert np.isnan(ds.frame.loc[0, "nuclei"])

    def test_unknown_source(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_dataset(tmp_path / "missing.csv", verbose=False)

    def test_unknown_drop_column(self):
        with pytest.raises(ConfigurationError):
            load_dataset("iris", drop_columns=["nope"], verbose=False)
