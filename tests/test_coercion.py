"""Tests for numeric coercion and imputation."""

import warnings

import numpy as np
import pandas as pd
import pytest

from featsel.exceptions import ConfigurationError, DataQualityWarning, DomainError
from featsel.preprocessing import Dataset, FeatureMatrix, coerce_numeric, impute_matrix


class TestCoerceNumeric:

    def test_zero_fill_and_parsing(self, mixed_dataset):
        with pytest.warns(DataQualityWarning):
            fm = coerce_numeric(mixed_dataset, verbose=False)

        assert fm.feature_names == ("Id", "thickness", "nuclei", "grade")
        frame = fm.to_frame()
        assert frame["thickness"].tolist() == [5.0, 3.0, 0.0, 6.0, 4.0, 8.0]
        assert frame["nuclei"].tolist() == [1.0, 10.0, 0.0, 2.0, 0.0, 1.0]
        assert frame["grade"].tolist() == [1.0, 2.0, 3.0, 1.0, 2.0, 3.0]
        assert fm.imputed_counts == {"thickness": 1, "nuclei": 2}
        assert list(fm.target) == list(mixed_dataset.labels)
        assert fm.label == "Class"

    def test_custom_fill_value(self, mixed_dataset):
        with pytest.warns(DataQualityWarning):
            fm = coerce_numeric(mixed_dataset, fill_value=-1.0, verbose=False)
        assert fm.to_frame()["nuclei"].tolist() == [1.0, 10.0, -1.0, 2.0, -1.0, 1.0]

    def test_mean_strategy(self, mixed_dataset):
        with pytest.warns(DataQualityWarning):
            fm = coerce_numeric(mixed_dataset, strategy="mean", verbose=False)
        assert fm.to_frame()["thickness"][2] == pytest.approx(5.2)

    def test_unparseable_numeric_column_warns(self, mixed_dataset):
        with pytest.warns(DataQualityWarning, match="Unparseable"):
            coerce_numeric(mixed_dataset, verbose=False)

    def test_input_not_mutated(self, mixed_dataset):
        before = mixed_dataset.frame.copy()
        with pytest.warns(DataQualityWarning):
            coerce_numeric(mixed_dataset, verbose=False)
        pd.testing.assert_frame_equal(mixed_dataset.frame, before)

    def test_idempotent_on_clean_data(self, mixed_dataset):
        with pytest.warns(DataQualityWarning):
            first = coerce_numeric(mixed_dataset, verbose=False)
        clean = Dataset(frame=first.to_frame(include_target=True), label=first.label)

        with warnings.catch_warnings():
            warnings.simplefilter("error", DataQualityWarning)
            second = coerce_numeric(clean, verbose=False)

        np.testing.assert_array_equal(first.values, second.values)
        assert first.feature_names == second.feature_names
        assert second.imputed_counts == {}

    def test_column_subset_excludes_unlisted_text(self, mixed_dataset):
        with pytest.warns(DataQualityWarning, match="left out"):
            fm = coerce_numeric(mixed_dataset, columns=["thickness"], verbose=False)
        assert fm.feature_names == ("Id", "thickness")

    def test_unknown_column(self, mixed_dataset):
        with pytest.raises(ConfigurationError):
            coerce_numeric(mixed_dataset, columns=["Class"], verbose=False)

    def test_unknown_strategy(self, mixed_dataset):
        with pytest.raises(ConfigurationError):
            coerce_numeric(mixed_dataset, strategy="mode", verbose=False)

    def test_infinite_values_are_imputed(self):
        ds = Dataset(frame=pd.DataFrame({"a": [1.0, np.inf, 3.0], "y": [0, 1, 0]}), label="y")
        with pytest.warns(DataQualityWarning):
            fm = coerce_numeric(ds, verbose=False)
        assert fm.values[:, 0].tolist() == [1.0, 0.0, 3.0]

    def test_non_scalar_cells_become_missing(self):
        frame = pd.DataFrame({
            "a": pd.Series([1, [2, 3], "4", {"k": 5}, None], dtype=object),
            "y": [0, 1, 0, 1, 0],
        })
        ds = Dataset(frame=frame, label="y", column_types={"a": "numeric"})
        with pytest.warns(DataQualityWarning):
            fm = coerce_numeric(ds, verbose=False)
        assert fm.values[:, 0].tolist() == [1.0, 0.0, 4.0, 0.0, 0.0]
        assert fm.imputed_counts == {"a": 3}


class TestFeatureMatrix:

    def test_rejects_nan(self):
        with pytest.raises(DomainError):
            FeatureMatrix(values=np.array([[1.0, np.nan]]), feature_names=("a", "b"))

    def test_rejects_name_mismatch(self):
        with pytest.raises(DomainError):
            FeatureMatrix(values=np.zeros((2, 2)), feature_names=("a",))

    def test_rejects_target_length(self):
        with pytest.raises(DomainError):
            FeatureMatrix(values=np.zeros((2, 1)), feature_names=("a",), target=[1, 2, 3])

    def test_values_are_read_only_copies(self):
        source = np.zeros((3, 2))
        fm = FeatureMatrix(values=source, feature_names=("a", "b"))
        source[0, 0] = 5.0
        assert fm.values[0, 0] == 0.0
        with pytest.raises(ValueError):
            fm.values[0, 0] = 1.0

    def test_select_and_drop(self, correlated_matrix):
        sub = correlated_matrix.select(["C", "A"])
        assert sub.feature_names == ("C", "A")
        np.testing.assert_array_equal(sub.values[:, 1], correlated_matrix.values[:, 0])
        assert correlated_matrix.drop(["B"]).feature_names == ("A", "C", "D")
        with pytest.raises(DomainError):
            correlated_matrix.select(["Z"])


class TestImputeMatrix:

    def test_constant(self):
        out = impute_matrix([[1.0, np.nan], [np.inf, 2.0]])
        np.testing.assert_array_equal(out, [[1.0, 0.0], [0.0, 2.0]])

    def test_median_with_all_missing_column(self):
        out = impute_matrix([[1.0, np.nan], [3.0, np.nan], [np.nan, np.nan]],
                            fill_value=7.0, strategy="median")
        np.testing.assert_array_equal(out, [[1.0, 7.0], [3.0, 7.0], [2.0, 7.0]])

    def test_idempotent(self):
        clean = np.arange(6, dtype=float).reshape(3, 2)
        np.testing.assert_array_equal(impute_matrix(impute_matrix(clean)), clean)
