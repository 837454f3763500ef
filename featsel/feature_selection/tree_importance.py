"""
Embedded selection with a random forest.

The forest is a bagged ensemble of decision trees that draw a random feature
subset at every split. Two importances are reported per feature:

    permutation: drop in out-of-bag accuracy (classification) or rise in
        out-of-bag mean squared error (regression) when the feature is
        shuffled among each tree's out-of-bag rows, averaged over trees.
    impurity: mean decrease in split impurity, averaged over trees.

Without a seed, one is drawn from fresh entropy and recorded in the
result metadata; pass it back to reproduce the run.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from sklearn.ensemble import BaggingClassifier, BaggingRegressor
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from ..exceptions import ConfigurationError, EstimatorError
from ..seeding import resolve_seed
from .results import SelectionResult
from .validation import check_classes, resolve_task, resolve_target


def _build_forest(task, n_estimators, max_features, seed, n_jobs):
    if task == "classification":
        return BaggingClassifier(
            estimator=DecisionTreeClassifier(max_features=max_features),
            n_estimators=n_estimators,
            bootstrap=True,
            oob_score=True,
            random_state=seed,
            n_jobs=n_jobs,
        )
    return BaggingRegressor(
        estimator=DecisionTreeRegressor(max_features=max_features),
        n_estimators=n_estimators,
        bootstrap=True,
        oob_score=True,
        random_state=seed,
        n_jobs=n_jobs,
    )


def _oob_loss(tree, X, y, task):
    try:
        pred = tree.predict(X)
    except Exception as exc:
        raise EstimatorError(f"Tree failed to predict on out-of-bag rows: {exc}") from exc
    if task == "classification":
        return float(np.mean(pred != y))
    return float(np.mean((pred - y) ** 2))


def _permutation_scores(forest, X, y, task, n_permutations, rng):
    """Per-tree OOB loss increase for each permuted feature, averaged over permutations."""
    n_rows, n_features = X.shape
    per_tree = []
    for tree, in_bag in zip(forest.estimators_, forest.estimators_samples_):
        oob = np.setdiff1d(np.arange(n_rows), in_bag, assume_unique=False)
        if oob.size == 0:
            continue
        X_oob, y_oob = X[oob], y[oob]
        baseline = _oob_loss(tree, X_oob, y_oob, task)
        increases = np.zeros(n_features)
        for j in range(n_features):
            shuffled = X_oob.copy()
            total = 0.0
            for _ in range(n_permutations):
                shuffled[:, j] = rng.permutation(X_oob[:, j])
                total += _oob_loss(tree, shuffled, y_oob, task) - baseline
            increases[j] = total / n_permutations
        per_tree.append(increases)
    if not per_tree:
        return np.zeros(n_features), np.zeros(n_features)
    per_tree = np.vstack(per_tree)
    return per_tree.mean(axis=0), per_tree.std(axis=0)


def tree_importance(matrix, target=None, n_estimators: int = 500, n_permutations: int = 1,
                    max_features="sqrt", task: str = "auto", seed: Optional[int] = None,
                    n_jobs: int = 1, verbose: bool = True) -> SelectionResult:
    """
    Rank features by random-forest importance.

    Args:
        matrix: FeatureMatrix with the candidate features.
        target: Label vector (class labels or continuous values); defaults
            to ``matrix.target``.
        n_estimators: Number of trees.
        n_permutations: Shuffles of each feature per tree for the permutation score.
        max_features: Features drawn at each split (scikit-learn tree convention).
        task: ``classification``, ``regression`` or ``auto``.
        seed: Random state for bootstrapping, split features and permutations.
            When None, a fresh seed is drawn and stored in ``metadata["seed"]``.
        n_jobs: Trees fitted in parallel.
        verbose: If True, prints progress information.

    Returns:
        SelectionResult: Features ranked by permutation importance (ties by
        impurity importance). ``extra_scores['impurity']`` holds the impurity
        importance; use ``ranked_by('impurity')`` to re-sort by it.
    """
    y = resolve_target(matrix, target)
    task = resolve_task(y, task)
    for name, value in (("n_estimators", n_estimators), ("n_permutations", n_permutations)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
            raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    seed = resolve_seed(seed)

    X = np.asarray(matrix.values, dtype=float)
    if task == "classification":
        classes = check_classes(y)[0]
        y_fit = np.searchsorted(classes, y)
    else:
        y_fit = y.astype(float)

    if verbose:
        print(f"[Random Forest] {task}: {n_estimators} trees on {X.shape[0]}x{X.shape[1]} data")

    forest = _build_forest(task, n_estimators, max_features, seed, n_jobs)
    try:
        forest.fit(X, y_fit)
    except Exception as exc:
        raise EstimatorError(f"Random forest failed to fit: {exc}") from exc

    rng = np.random.default_rng(seed)
    perm_mean, perm_std = _permutation_scores(forest, X, y_fit, task, n_permutations, rng)
    impurity = np.mean([tree.feature_importances_ for tree in forest.estimators_], axis=0)

    order = sorted(range(X.shape[1]), key=lambda i: (-perm_mean[i], -impurity[i], i))
    names = matrix.feature_names

    if verbose:
        print(f"[Random Forest] OOB score: {forest.oob_score_:.4f}")
        print(f"    Top features: {', '.join(names[i] for i in order[:5])}")

    return SelectionResult(
        method="random_forest",
        features=tuple(names[i] for i in order),
        scores=tuple(float(perm_mean[i]) for i in order),
        metadata={
            "task": task,
            "n_estimators": n_estimators,
            "n_permutations": n_permutations,
            "oob_score": float(forest.oob_score_),
            "permutation_std": {names[i]: float(perm_std[i]) for i in range(len(names))},
            "seed": seed,
        },
        extra_scores={
            "impurity": {names[i]: float(impurity[i]) for i in range(len(names))},
        },
    )
