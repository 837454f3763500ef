"""
Pipeline driver.

One run moves through LOADED -> COERCED -> SELECTED -> REPORTED exactly once.
A new run needs a new pipeline instance; comparing two selectors means two
instances started from the same coerced FeatureMatrix.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from ..exceptions import ConfigurationError, PipelineStateError
from ..feature_selection import SELECTORS, compare_results
from ..preprocessing.coercion import coerce_numeric
from .report import format_report


class PipelineState(Enum):
    LOADED = "loaded"
    COERCED = "coerced"
    SELECTED = "selected"
    REPORTED = "reported"


class FeatureSelectionPipeline:
    """
    Load -> coerce -> select -> report, for a single selector.

    Args:
        dataset: Loaded ``Dataset``.
        verbose (bool): Passed to each step.
    """

    def __init__(self, dataset, verbose=True):
        self.dataset = dataset
        self.verbose = verbose
        self.matrix = None
        self.result = None
        self.method = None
        self.state = PipelineState.LOADED

    @classmethod
    def from_matrix(cls, matrix, verbose=True):
        """Start a run from an already coerced FeatureMatrix."""
        pipeline = cls(dataset=None, verbose=verbose)
        pipeline.matrix = matrix
        pipeline.state = PipelineState.COERCED
        return pipeline

    def _require(self, expected, action):
        if self.state is not expected:
            raise PipelineStateError(
                f"Cannot {action} in state '{self.state.value}' "
                f"(requires '{expected.value}')"
            )

    def coerce(self, columns=None, fill_value=0.0, strategy="constant"):
        """LOADED -> COERCED."""
        self._require(PipelineState.LOADED, "coerce")
        self.matrix = coerce_numeric(
            self.dataset, columns=columns, fill_value=fill_value,
            strategy=strategy, verbose=self.verbose,
        )
        self.state = PipelineState.COERCED
        return self.matrix

    def select(self, method, **params):
        """COERCED -> SELECTED, with one of ``correlation``, ``rfe``, ``lasso``, ``random_forest``."""
        self._require(PipelineState.COERCED, "select")
        if method not in SELECTORS:
            raise ConfigurationError(
                f"Unknown selection method '{method}' (expected one of {sorted(SELECTORS)})"
            )
        params.setdefault("verbose", self.verbose)
        if self.verbose:
            print(f"\n[Pipeline] Running '{method}' on {self.matrix.n_rows}x{self.matrix.n_features} features")
        self.result = SELECTORS[method](self.matrix, **params)
        self.method = method
        self.state = PipelineState.SELECTED
        return self.result

    def report(self, top_n: Optional[int] = None, precision: int = 4) -> str:
        """SELECTED -> REPORTED; returns the formatted table."""
        self._require(PipelineState.SELECTED, "report")
        text = format_report(self.result, top_n=top_n, precision=precision)
        self.state = PipelineState.REPORTED
        return text

    def run(self, method, top_n=None, coerce_params=None, **params):
        """Run every remaining step and return the report."""
        if self.state is PipelineState.LOADED:
            self.coerce(**(coerce_params or {}))
        self.select(method, **params)
        return self.report(top_n=top_n)


def compare_selectors(matrix, first, second, top_n=None, first_params=None,
                      second_params=None, verbose=True):
    """
    Run two selectors over the same FeatureMatrix and diff their top-N features.

    Returns:
        tuple: (first result, second result, comparison dict from ``compare_results``)
    """
    runs = []
    for method, params in ((first, first_params), (second, second_params)):
        pipeline = FeatureSelectionPipeline.from_matrix(matrix, verbose=verbose)
        runs.append(pipeline.select(method, **(params or {})))
    return runs[0], runs[1], compare_results(runs[0], runs[1], top_n=top_n)
