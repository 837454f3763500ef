"""Smoke tests for figure output."""

from featsel.feature_selection import (
    correlation_matrix,
    find_correlated_features,
    lasso_selection,
    recursive_feature_elimination,
    tree_importance,
)
from featsel.visualization import create_all_visualizations, plot_selection_result


def test_bar_chart_written(tmp_path, determined_matrix):
    result = tree_importance(determined_matrix, n_estimators=10, seed=0, verbose=False)
    path = plot_selection_result(result, tmp_path / "nested" / "scores.png", metric="impurity")
    assert path.exists()
    assert path.stat().st_size > 0


def test_all_figures(tmp_path, binary_matrix):
    results = {
        "correlation": find_correlated_features(binary_matrix, cutoff=0.5, verbose=False),
        "rfe": recursive_feature_elimination(binary_matrix, sizes=[1, 2], folds=3,
                                             seed=0, verbose=False),
        "lasso": lasso_selection(binary_matrix, folds=3, n_lambdas=5, seed=0, verbose=False),
        "random_forest": tree_importance(binary_matrix, n_estimators=10, seed=0, verbose=False),
    }
    saved = create_all_visualizations(results, tmp_path, "synthetic",
                                      corr=correlation_matrix(binary_matrix), cutoff=0.5)
    names = {p.name for p in saved}
    assert {
        "synthetic_correlation.png",
        "synthetic_rfe_scores.png",
        "synthetic_rfe_sizes.png",
        "synthetic_lasso_cv.png",
        "synthetic_random_forest_scores.png",
        "synthetic_random_forest_impurity.png",
    } <= names
    assert all(p.exists() for p in saved)
