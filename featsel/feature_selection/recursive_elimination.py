"""
Wrapper selection by recursive feature elimination.

For every cross-validation fold:
    1. Fit the backend on the training rows with all features and rank the
       features by importance.
    2. For each candidate subset size s, refit on the top-s features and score
       on the validation rows.

Scores are averaged per size across folds and the best size wins (smallest
size on ties). The reported ranking comes from a final fit on all rows.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import numpy as np
from joblib import Parallel, delayed
from sklearn.model_selection import KFold, StratifiedKFold

from ..classifiers.estimators import EstimatorBackend
from ..exceptions import ConfigurationError
from ..seeding import resolve_seed
from .results import SelectionResult
from .validation import check_classes, check_folds, resolve_task, resolve_target


def _rank(importances: np.ndarray) -> np.ndarray:
    """Indices by descending importance; equal scores keep column order."""
    return np.argsort(-importances, kind="stable")


def _check_sizes(sizes, n_features) -> List[int]:
    if sizes is None:
        return list(range(1, n_features + 1))
    sizes = list(sizes)
    if not sizes:
        raise ConfigurationError("At least one subset size is required")
    for s in sizes:
        if isinstance(s, bool) or not isinstance(s, (int, np.integer)):
            raise ConfigurationError(f"Subset sizes must be integers, got {s!r}")
        if not 1 <= s <= n_features:
            raise ConfigurationError(
                f"Subset size {s} outside [1, {n_features}] (number of features)"
            )
    if len(set(sizes)) != len(sizes):
        raise ConfigurationError(f"Duplicate subset sizes: {sizes}")
    return sorted(int(s) for s in sizes)


def _make_splits(X, y, folds, task, seed):
    if task == "classification":
        _, counts = np.unique(y, return_counts=True)
        if counts.min() >= folds:
            cv = StratifiedKFold(n_splits=folds, shuffle=True, random_state=seed)
            return list(cv.split(X, y))
    cv = KFold(n_splits=folds, shuffle=True, random_state=seed)
    return list(cv.split(X))


def _evaluate_fold(backend, X, y, train_idx, valid_idx, sizes):
    """Rank on the training rows, then score every subset size on the validation rows."""
    X_train, y_train = X[train_idx], y[train_idx]
    X_valid, y_valid = X[valid_idx], y[valid_idx]

    model = backend.fit(X_train, y_train)
    order = _rank(backend.importances(model, X_train, y_train))

    scores = {}
    for s in sizes:
        cols = order[:s]
        subset_model = backend.fit(X_train[:, cols], y_train)
        scores[s] = backend.score(subset_model, X_valid[:, cols], y_valid)
    return scores


def recursive_feature_elimination(matrix, target=None, sizes: Optional[Sequence[int]] = None,
                                  folds: int = 10, backend: Optional[EstimatorBackend] = None,
                                  seed: Optional[int] = None, task: str = "auto",
                                  n_jobs: int = 1, verbose: bool = True) -> SelectionResult:
    """
    Choose the feature subset size with the best cross-validated score.

    Args:
        matrix: FeatureMatrix with the candidate features.
        target: Label vector; defaults to ``matrix.target``.
        sizes: Candidate subset sizes (default: every size from 1 to F).
        folds: Number of cross-validation folds.
        backend: ``EstimatorBackend`` to fit, score and rank with. Defaults to
            a random forest seeded with ``seed``.
        seed: Random state for fold assignment and the default backend. When
            None, a fresh seed is drawn and stored in ``metadata["seed"]``.
        task: ``classification``, ``regression`` or ``auto``.
        n_jobs: Folds evaluated in parallel (joblib).
        verbose: If True, prints the size/score table.

    Returns:
        SelectionResult: The features of the winning subset in descending
        importance. ``metadata`` holds ``best_size``, ``best_score``,
        ``size_scores`` (size -> mean score), ``size_score_std`` and
        ``fold_scores``.
    """
    y = resolve_target(matrix, target)
    task = resolve_task(y, task)
    X = np.asarray(matrix.values, dtype=float)
    sizes = _check_sizes(sizes, matrix.n_features)
    folds = check_folds(matrix.n_rows, folds)
    if task == "classification":
        check_classes(y)
    seed = resolve_seed(seed)
    if backend is None:
        backend = EstimatorBackend("random_forest", seed=seed, task=task)

    splits = _make_splits(X, y, folds, task, seed)

    if verbose:
        print(
            f"[RFE] {matrix.n_features} features, sizes={sizes}, "
            f"{folds}-fold CV with {type(backend.estimator).__name__}"
        )

    fold_results = Parallel(n_jobs=n_jobs)(
        delayed(_evaluate_fold)(backend, X, y, train_idx, valid_idx, sizes)
        for train_idx, valid_idx in splits
    )

    fold_scores: Dict[int, List[float]] = {s: [r[s] for r in fold_results] for s in sizes}
    size_scores = {s: float(np.mean(v)) for s, v in fold_scores.items()}
    size_std = {s: float(np.std(v)) for s, v in fold_scores.items()}

    best_score = max(size_scores.values())
    best_size = min(s for s, v in size_scores.items() if np.isclose(v, best_score, rtol=0.0, atol=1e-12))

    final_model = backend.fit(X, y)
    importances = backend.importances(final_model, X, y)
    keep = _rank(importances)[:best_size]

    if verbose:
        for s in sizes:
            marker = " *" if s == best_size else ""
            print(f"    size={s:>3}  score={size_scores[s]:.4f} (+/- {size_std[s]:.4f}){marker}")
        print(f"[RFE] Selected {best_size} features (mean CV score {size_scores[best_size]:.4f})")

    return SelectionResult(
        method="rfe",
        features=tuple(matrix.feature_names[i] for i in keep),
        scores=tuple(float(importances[i]) for i in keep),
        metadata={
            "best_size": best_size,
            "best_score": size_scores[best_size],
            "size_scores": size_scores,
            "size_score_std": size_std,
            "fold_scores": fold_scores,
            "folds": folds,
            "task": task,
            "estimator": type(backend.estimator).__name__,
            "seed": seed,
        },
    )
