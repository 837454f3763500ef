"""Estimator backend used by the wrapper selector.

The selectors only rely on three operations: fit a model, score it, and
extract per-feature importance. ``EstimatorBackend`` implements them on top
of any scikit-learn estimator. Fitted models are returned to the caller and
never cached on the backend.
"""

import numpy as np
from sklearn.base import clone
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.inspection import permutation_importance
from sklearn.linear_model import LinearRegression, LogisticRegression
from sklearn.metrics import get_scorer
from sklearn.svm import SVC, SVR
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from ..exceptions import ConfigurationError, EstimatorError
from ..seeding import resolve_seed


def _random_forest(task, seed, **params):
    params.setdefault('n_estimators', 100)
    if task == 'regression':
        return RandomForestRegressor(random_state=seed, **params)
    return RandomForestClassifier(random_state=seed, **params)


def _decision_tree(task, seed, **params):
    if task == 'regression':
        return DecisionTreeRegressor(random_state=seed, **params)
    return DecisionTreeClassifier(random_state=seed, **params)


def _logistic_regression(task, seed, **params):
    if task == 'regression':
        return LinearRegression(**params)
    params.setdefault('max_iter', 1000)
    return LogisticRegression(random_state=seed, **params)


def _svm(task, seed, **params):
    if task == 'regression':
        return SVR(**params)
    params.setdefault('kernel', 'rbf')
    params.setdefault('gamma', 'scale')
    return SVC(random_state=seed, **params)


ESTIMATORS = {
    'random_forest': _random_forest,
    'decision_tree': _decision_tree,
    'logistic_regression': _logistic_regression,
    'svm': _svm,
}


def make_estimator(name='random_forest', task='classification', seed=None, **params):
    """
    Build a named scikit-learn estimator.

    Args:
        name (str): One of ``random_forest``, ``decision_tree``,
            ``logistic_regression``, ``svm``.
        task (str): ``classification`` or ``regression``.
        seed (int, optional): Random state for randomized estimators.
        **params: Extra estimator parameters.

    Returns:
        An unfitted scikit-learn estimator.
    """
    if name not in ESTIMATORS:
        raise ConfigurationError(
            f"Unknown estimator '{name}' (expected one of {sorted(ESTIMATORS)})"
        )
    if task not in ('classification', 'regression'):
        raise ConfigurationError(f"Unknown task '{task}'")
    return ESTIMATORS[name](task, seed, **params)


class EstimatorBackend:
    """
    Fit/score/importance contract over a scikit-learn estimator.

    Args:
        estimator: Unfitted estimator, or the name of one from ``ESTIMATORS``.
        scoring (str, optional): scikit-learn scorer name. Defaults to the
            estimator's own ``score`` (accuracy for classifiers, R^2 for regressors).
        n_repeats (int): Permutation rounds when the estimator exposes neither
            ``feature_importances_`` nor ``coef_``.
        seed (int, optional): Random state for named estimators and
            permutation importance. Drawn from fresh entropy when None.
    """

    def __init__(self, estimator='random_forest', scoring=None, n_repeats=5,
                 seed=None, task='classification'):
        seed = resolve_seed(seed)
        if isinstance(estimator, str):
            estimator = make_estimator(estimator, task=task, seed=seed)
        self.estimator = estimator
        self.scoring = scoring
        self.n_repeats = n_repeats
        self.seed = seed
        self._scorer = get_scorer(scoring) if scoring is not None else None

    def __repr__(self):
        return (f"EstimatorBackend(estimator={self.estimator!r}, "
                f"scoring={self.scoring!r}, seed={self.seed!r})")

    def fit(self, X, y):
        """Fit a fresh clone of the estimator and return it."""
        model = clone(self.estimator)
        try:
            model.fit(X, y)
        except Exception as exc:
            raise EstimatorError(
                f"{type(model).__name__} failed to fit on {X.shape[0]}x{X.shape[1]} data: {exc}"
            ) from exc
        return model

    def score(self, model, X, y):
        """Score a fitted model; higher is better."""
        try:
            if self._scorer is not None:
                return float(self._scorer(model, X, y))
            return float(model.score(X, y))
        except Exception as exc:
            raise EstimatorError(f"{type(model).__name__} failed to score: {exc}") from exc

    def importances(self, model, X, y):
        """Per-feature importance of a fitted model (larger is more important)."""
        try:
            if hasattr(model, 'feature_importances_'):
                values = np.asarray(model.feature_importances_, dtype=float)
            elif hasattr(model, 'coef_'):
                coef = np.atleast_2d(np.asarray(model.coef_, dtype=float))
                values = np.abs(coef).sum(axis=0)
            else:
                result = permutation_importance(
                    model, X, y, scoring=self.scoring,
                    n_repeats=self.n_repeats, random_state=self.seed,
                )
                values = np.asarray(result.importances_mean, dtype=float)
        except Exception as exc:
            raise EstimatorError(
                f"Could not extract feature importance from {type(model).__name__}: {exc}"
            ) from exc
        return np.nan_to_num(values, nan=0.0)
