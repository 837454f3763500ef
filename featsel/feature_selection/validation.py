"""Eager input checks shared by the selectors."""

import numpy as np
from sklearn.utils.multiclass import type_of_target

from ..exceptions import ConfigurationError, DomainError


def resolve_target(matrix, target=None):
    """Return the label vector to use: explicit ``target`` or the matrix's own."""
    if target is None:
        target = matrix.target
    if target is None:
        raise ConfigurationError("No target given and the feature matrix carries none")
    target = np.asarray(target)
    if target.shape[0] != matrix.n_rows:
        raise DomainError(
            f"Target has {target.shape[0]} rows, feature matrix has {matrix.n_rows}"
        )
    return target


def resolve_task(target, task="auto"):
    """Classification or regression, inferred from the target when ``auto``."""
    if task == "auto":
        kind = type_of_target(target)
        return "regression" if kind in ("continuous", "continuous-multioutput") else "classification"
    if task not in ("classification", "regression"):
        raise ConfigurationError(f"Unknown task '{task}'")
    return task


def check_classes(target, min_classes=2):
    """Ensure a classification target has enough distinct classes."""
    classes, counts = np.unique(target, return_counts=True)
    if len(classes) < min_classes:
        raise DomainError(
            f"Target has {len(classes)} class(es); at least {min_classes} are required"
        )
    return classes, counts


def check_folds(n_rows, folds):
    """Fold count must leave at least 2 rows in every validation fold."""
    if not isinstance(folds, (int, np.integer)) or isinstance(folds, bool) or folds < 2:
        raise ConfigurationError(f"folds must be an integer >= 2, got {folds!r}")
    if folds >= n_rows or n_rows // folds < 2:
        raise ConfigurationError(
            f"{folds} folds over {n_rows} rows leaves fewer than 2 rows in a validation fold"
        )
    return int(folds)
