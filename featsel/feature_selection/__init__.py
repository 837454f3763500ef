"""
Feature selection package.

Filter, wrapper and embedded selectors that all return a ``SelectionResult``:
correlation filtering, recursive feature elimination, L1-penalized logistic
regression and random-forest importance.
"""

from .results import SelectionResult, compare_results
from .correlation_filter import correlation_matrix, find_correlated_columns, find_correlated_features
from .recursive_elimination import recursive_feature_elimination
from .regularized_model import lasso_selection, lambda_path
from .tree_importance import tree_importance

SELECTORS = {
    "correlation": find_correlated_features,
    "rfe": recursive_feature_elimination,
    "lasso": lasso_selection,
    "random_forest": tree_importance,
}

__all__ = [
    "SelectionResult",
    "compare_results",
    "correlation_matrix",
    "find_correlated_columns",
    "find_correlated_features",
    "recursive_feature_elimination",
    "lasso_selection",
    "lambda_path",
    "tree_importance",
    "SELECTORS",
]
