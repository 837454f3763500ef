"""
Embedded selection with an L1-penalized logistic regression.

A decreasing path of penalty strengths (lambda) is scored by k-fold
cross-validation. ``lambda_min`` has the best mean score; ``lambda_1se`` is the
largest lambda whose mean score is within one standard error of that best.
Features with a nonzero coefficient at the chosen lambda are selected.

Lambda follows the convention ``mean log-loss + lambda * ||w||_1`` on
standardized features, which maps to scikit-learn's ``C = 1 / (n * lambda)``.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np
from scipy.stats import sem
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import get_scorer
from sklearn.model_selection import StratifiedKFold, cross_val_score
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler
from tqdm import tqdm

from ..exceptions import ConfigurationError, DomainError, EstimatorError
from ..seeding import resolve_seed
from .results import SelectionResult
from .validation import check_classes, check_folds, resolve_target

LAMBDA_CHOICES = ("lambda_min", "lambda_1se")


def _make_model(lam, n_rows, seed):
    return make_pipeline(
        StandardScaler(),
        LogisticRegression(
            penalty="l1",
            C=1.0 / (n_rows * lam),
            solver="liblinear",
            max_iter=1000,
            random_state=seed,
        ),
    )


def lambda_path(X, y01, n_lambdas=50, min_ratio=None) -> np.ndarray:
    """
    Log-spaced decreasing lambda values starting where every coefficient is zero.

    Args:
        X: Feature array (rows x features), unscaled.
        y01: Binary target coded as 0/1.
        n_lambdas: Number of path points.
        min_ratio: Smallest lambda as a fraction of the largest. Defaults to
            0.01 when there are fewer rows than features, else 1e-3.
    """
    _check_path_settings(n_lambdas, min_ratio)
    n_rows, n_features = X.shape
    if min_ratio is None:
        min_ratio = 0.01 if n_rows < n_features else 1e-3
    Xs = StandardScaler().fit_transform(X)
    lam_max = np.max(np.abs(Xs.T @ (y01 - y01.mean()))) / n_rows
    if not np.isfinite(lam_max) or lam_max <= 0:
        lam_max = 1.0
    return np.geomspace(lam_max, lam_max * min_ratio, num=n_lambdas)


def _check_path_settings(n_lambdas, min_ratio):
    if isinstance(n_lambdas, bool) or not isinstance(n_lambdas, (int, np.integer)) or n_lambdas < 1:
        raise ConfigurationError(f"n_lambdas must be a positive integer, got {n_lambdas!r}")
    if min_ratio is not None:
        if isinstance(min_ratio, bool) or not isinstance(min_ratio, (int, float, np.floating)) \
                or not 0.0 < min_ratio < 1.0:
            raise ConfigurationError(f"lambda_min_ratio must lie in (0, 1), got {min_ratio!r}")


def _check_metric(metric):
    try:
        get_scorer(metric)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"Unknown scoring metric {metric!r}: {exc}") from None


def _check_lambdas(lambdas):
    lambdas = np.asarray(lambdas, dtype=float).ravel()
    if lambdas.size == 0 or np.any(~np.isfinite(lambdas)) or np.any(lambdas <= 0):
        raise ConfigurationError("lambdas must be a non-empty sequence of positive numbers")
    return np.sort(np.unique(lambdas))[::-1]


def _resolve_choice(choice, lambda_min, lambda_1se):
    if isinstance(choice, str):
        if choice not in LAMBDA_CHOICES:
            raise ConfigurationError(
                f"Unknown lambda choice '{choice}' (expected {LAMBDA_CHOICES} or a positive number)"
            )
        return lambda_min if choice == "lambda_min" else lambda_1se
    if isinstance(choice, bool) or not isinstance(choice, (int, float, np.floating)) or choice <= 0:
        raise ConfigurationError(f"lambda must be positive, got {choice!r}")
    return float(choice)


def lasso_selection(matrix, target=None, metric: str = "roc_auc", folds: int = 10,
                    lambdas: Optional[Sequence[float]] = None, n_lambdas: int = 50,
                    lambda_min_ratio: Optional[float] = None,
                    choice: Union[str, float] = "lambda_min", precision: int = 2,
                    seed: Optional[int] = None, n_jobs: int = 1,
                    verbose: bool = True) -> SelectionResult:
    """
    Select features with a cross-validated L1 logistic regression.

    Args:
        matrix: FeatureMatrix with the candidate features.
        target: Binary label vector; defaults to ``matrix.target``.
        metric: scikit-learn scorer name used for cross-validation (higher is better).
        folds: Number of stratified cross-validation folds.
        lambdas: Explicit lambda path; generated when None.
        n_lambdas: Path length when generated.
        lambda_min_ratio: Smallest/largest lambda ratio when generated.
        choice: ``lambda_min``, ``lambda_1se`` or an explicit lambda for the final fit.
        precision: Decimal places of the reported coefficients.
        seed: Random state for the fold assignment and the solver. When None,
            a fresh seed is drawn and stored in ``metadata["seed"]``.
        n_jobs: Folds evaluated in parallel for each lambda.
        verbose: If True, prints progress information.

    Returns:
        SelectionResult: Nonzero-coefficient features ranked by absolute
        coefficient, scored by the signed coefficient (original feature scale).
    """
    y = resolve_target(matrix, target)
    classes, counts = check_classes(y)
    if len(classes) != 2:
        raise DomainError(
            f"L1 logistic selection needs a binary target, got {len(classes)} classes"
        )
    folds = check_folds(matrix.n_rows, folds)
    if counts.min() < folds:
        raise ConfigurationError(
            f"Class '{classes[np.argmin(counts)]}' has {counts.min()} rows; "
            f"{folds} stratified folds need at least {folds}"
        )
    if isinstance(precision, bool) or not isinstance(precision, (int, np.integer)) or precision < 0:
        raise ConfigurationError(f"precision must be a non-negative integer, got {precision!r}")
    _resolve_choice(choice, None, None)
    _check_metric(metric)
    if lambdas is None:
        _check_path_settings(n_lambdas, lambda_min_ratio)
    else:
        lambdas = _check_lambdas(lambdas)
    seed = resolve_seed(seed)

    X = np.asarray(matrix.values, dtype=float)
    y01 = (y == classes[1]).astype(int)
    n_rows = X.shape[0]

    if lambdas is None:
        path = lambda_path(X, y01, n_lambdas=n_lambdas, min_ratio=lambda_min_ratio)
    else:
        path = lambdas

    cv = StratifiedKFold(n_splits=folds, shuffle=True, random_state=seed)
    splits = list(cv.split(X, y01))

    if verbose:
        print(
            f"[Lasso] {len(path)} lambdas from {path[0]:.4g} to {path[-1]:.4g}, "
            f"{folds}-fold CV ({metric})"
        )

    means, errors, nonzero = [], [], []
    for lam in tqdm(path, desc="[Lasso] lambda path", disable=not verbose):
        model = _make_model(lam, n_rows, seed)
        try:
            fold_scores = cross_val_score(
                model, X, y01, cv=splits, scoring=metric, n_jobs=n_jobs, error_score="raise"
            )
            full = model.fit(X, y01)
        except Exception as exc:
            raise EstimatorError(f"L1 logistic fit failed at lambda={lam:.4g}: {exc}") from exc
        means.append(float(np.mean(fold_scores)))
        errors.append(float(sem(fold_scores)) if len(fold_scores) > 1 else 0.0)
        nonzero.append(int(np.count_nonzero(full[-1].coef_)))

    means = np.array(means)
    errors = np.nan_to_num(np.array(errors), nan=0.0)
    # Path is decreasing, so argmax picks the largest lambda among ties
    best = int(np.argmax(means))
    lambda_min = float(path[best])
    within = np.where(means >= means[best] - errors[best])[0]
    lambda_1se = float(path[within.min()])

    chosen = _resolve_choice(choice, lambda_min, lambda_1se)
    final = _make_model(chosen, n_rows, seed)
    try:
        final.fit(X, y01)
    except Exception as exc:
        raise EstimatorError(f"L1 logistic fit failed at lambda={chosen:.4g}: {exc}") from exc

    scaler, logit = final[0], final[-1]
    coef = logit.coef_.ravel() / scaler.scale_
    intercept = float(logit.intercept_[0] - np.sum(logit.coef_.ravel() * scaler.mean_ / scaler.scale_))

    order = [i for i in np.argsort(-np.abs(coef), kind="stable") if coef[i] != 0.0]
    names = matrix.feature_names

    if verbose:
        print(
            f"[Lasso] lambda_min={lambda_min:.4g}, lambda_1se={lambda_1se:.4g}, "
            f"chosen={chosen:.4g} -> {len(order)}/{len(names)} nonzero coefficients"
        )

    return SelectionResult(
        method="lasso",
        features=tuple(names[i] for i in order),
        scores=tuple(float(coef[i]) for i in order),
        metadata={
            "lambda_min": lambda_min,
            "lambda_1se": lambda_1se,
            "lambda": chosen,
            "metric": metric,
            "best_score": float(means[best]),
            "positive_class": classes[1].item() if hasattr(classes[1], "item") else classes[1],
            "intercept": round(intercept, precision),
            "coefficients": {n: round(float(c), precision) for n, c in zip(names, coef)},
            "cv_lambdas": path.tolist(),
            "cv_mean": means.tolist(),
            "cv_se": errors.tolist(),
            "cv_nonzero": nonzero,
            "seed": seed,
        },
    )
