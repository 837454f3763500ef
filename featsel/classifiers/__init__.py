"""Estimator backends for the wrapper selector."""

from .estimators import EstimatorBackend, make_estimator, ESTIMATORS

__all__ = [
    'EstimatorBackend',
    'make_estimator',
    'ESTIMATORS'
]
