"""Tests for the pipeline driver, results and reports."""

import pytest

from featsel.classifiers import EstimatorBackend
from featsel.exceptions import ConfigurationError, DataQualityWarning, PipelineStateError
from featsel.feature_selection import SelectionResult, compare_results
from featsel.pipeline import (
    FeatureSelectionPipeline,
    PipelineState,
    compare_selectors,
    format_comparison,
    format_report,
)


@pytest.fixture
def sample_result():
    return SelectionResult(
        method="random_forest",
        features=("a", "b", "c"),
        scores=(0.5, 0.2, 0.1),
        metadata={"task": "classification", "oob_score": 0.91},
        extra_scores={"impurity": {"a": 0.2, "b": 0.7, "c": 0.1}},
    )


class TestSelectionResult:

    def test_immutable(self, sample_result):
        with pytest.raises(AttributeError):
            sample_result.method = "other"
        with pytest.raises(TypeError):
            sample_result.metadata["task"] = "regression"

    def test_ranking_and_top(self, sample_result):
        assert sample_result.ranking() == [("a", 0.5), ("b", 0.2), ("c", 0.1)]
        assert sample_result.top(2) == ["a", "b"]
        assert sample_result.top() == ["a", "b", "c"]

    def test_ranked_by_unknown_metric(self, sample_result):
        with pytest.raises(ConfigurationError):
            sample_result.ranked_by("gain")

    def test_to_frame(self, sample_result):
        frame = sample_result.to_frame()
        assert list(frame.columns) == ["feature", "score", "impurity"]
        assert list(frame.index) == [1, 2, 3]
        assert frame.loc[2, "impurity"] == 0.7

    def test_to_dict_is_plain(self, sample_result):
        data = sample_result.to_dict()
        assert isinstance(data["metadata"], dict)
        assert data["features"] == ["a", "b", "c"]

    def test_compare_results(self, sample_result):
        other = SelectionResult(method="rfe", features=("b", "d"), scores=(0.3, 0.2))
        diff = compare_results(sample_result, other, top_n=2)
        assert diff["common"] == ["b"]
        assert diff["only_first"] == ["a"]
        assert diff["only_second"] == ["d"]
        assert diff["jaccard"] == pytest.approx(1 / 3)


class TestReport:

    def test_report_contains_ranked_rows(self, sample_result):
        text = format_report(sample_result, top_n=2)
        assert "RANDOM_FOREST" in text
        assert "oob_score" in text
        assert "a" in text and "b" in text
        assert "1 more" in text

    def test_empty_result(self):
        text = format_report(SelectionResult(method="correlation", features=(), scores=(),
                                             metadata={"cutoff": 0.7}))
        assert "no features selected" in text

    def test_rfe_size_table(self):
        result = SelectionResult(
            method="rfe", features=("x",), scores=(0.9,),
            metadata={"best_size": 1, "size_scores": {1: 0.95, 2: 0.9},
                      "size_score_std": {1: 0.01, 2: 0.02}},
        )
        text = format_report(result)
        assert "score by subset size" in text
        assert "0.9500" in text

    def test_comparison_text(self, sample_result):
        other = SelectionResult(method="rfe", features=("a",), scores=(1.0,))
        text = format_comparison(compare_results(sample_result, other, top_n=1))
        assert "random_forest vs rfe" in text
        assert "Jaccard index: 1.000" in text


class TestFeatureSelectionPipeline:

    def test_full_run_moves_through_states(self, mixed_dataset):
        pipeline = FeatureSelectionPipeline(mixed_dataset, verbose=False)
        assert pipeline.state is PipelineState.LOADED
        with pytest.warns(DataQualityWarning):
            pipeline.coerce()
        assert pipeline.state is PipelineState.COERCED
        result = pipeline.select("correlation", cutoff=0.9)
        assert pipeline.state is PipelineState.SELECTED
        assert result is pipeline.result
        text = pipeline.report()
        assert pipeline.state is PipelineState.REPORTED
        assert "CORRELATION" in text

    def test_transitions_cannot_repeat_or_skip(self, mixed_dataset, correlated_matrix):
        pipeline = FeatureSelectionPipeline(mixed_dataset, verbose=False)
        with pytest.raises(PipelineStateError):
            pipeline.select("correlation")
        with pytest.raises(PipelineStateError):
            pipeline.report()

        coerced = FeatureSelectionPipeline.from_matrix(correlated_matrix, verbose=False)
        with pytest.raises(PipelineStateError):
            coerced.coerce()
        coerced.select("correlation", cutoff=0.7)
        with pytest.raises(PipelineStateError):
            coerced.select("correlation", cutoff=0.7)
        coerced.report()
        with pytest.raises(PipelineStateError):
            coerced.report()

    def test_unknown_method(self, correlated_matrix):
        pipeline = FeatureSelectionPipeline.from_matrix(correlated_matrix, verbose=False)
        with pytest.raises(ConfigurationError):
            pipeline.select("boruta")
        assert pipeline.state is PipelineState.COERCED

    def test_run_helper(self, correlated_matrix):
        pipeline = FeatureSelectionPipeline.from_matrix(correlated_matrix, verbose=False)
        text = pipeline.run("random_forest", top_n=2, n_estimators=20, seed=0)
        assert pipeline.state is PipelineState.REPORTED
        assert "RANDOM_FOREST" in text

    def test_rfe_through_driver_selects_two_features(self, two_feature_matrix):
        pipeline = FeatureSelectionPipeline.from_matrix(two_feature_matrix, verbose=False)
        result = pipeline.select("rfe", sizes=[1, 2, 3], folds=5, seed=1,
                                 backend=EstimatorBackend("decision_tree", seed=0))
        assert result.metadata["best_size"] == 2


class TestCompareSelectors:

    def test_two_methods_on_same_matrix(self, determined_matrix):
        first, second, diff = compare_selectors(
            determined_matrix, "random_forest", "rfe", top_n=1,
            first_params={"n_estimators": 50, "seed": 0},
            second_params={"sizes": [1, 2], "folds": 3, "seed": 0},
            verbose=False,
        )
        assert first.method == "random_forest"
        assert second.method == "rfe"
        assert diff["common"] == ["X"]
        assert diff["jaccard"] == 1.0
