"""
Correlation filter.

Finds the columns to remove so that no remaining pair of features has an
absolute Pearson correlation above a cutoff. Of the most correlated pair, the
column with the larger mean absolute correlation to everything else goes first.
"""

from __future__ import annotations

from typing import List

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError
from .results import SelectionResult


def correlation_matrix(matrix) -> pd.DataFrame:
    """
    Pearson correlation between every pair of features.

    Constant columns have no defined correlation; their off-diagonal entries
    are reported as 0.0 and the diagonal is always 1.0.
    """
    names = list(matrix.feature_names)
    if matrix.n_features == 0:
        return pd.DataFrame(np.empty((0, 0)), index=names, columns=names)

    with np.errstate(divide="ignore", invalid="ignore"):
        corr = np.atleast_2d(np.corrcoef(matrix.values, rowvar=False))
    corr = np.nan_to_num(corr, nan=0.0)
    corr = np.clip((corr + corr.T) / 2.0, -1.0, 1.0)
    np.fill_diagonal(corr, 1.0)
    return pd.DataFrame(corr, index=names, columns=names)


def _check_cutoff(cutoff):
    if not isinstance(cutoff, (int, float, np.floating)) or not 0.0 < cutoff <= 1.0:
        raise ConfigurationError(f"cutoff must be in (0, 1], got {cutoff!r}")
    return float(cutoff)


def _reduce(abs_corr: np.ndarray, cutoff: float):
    """Greedy pairwise reduction; yields (dropped index, triggering |r|)."""
    remaining = list(range(abs_corr.shape[0]))
    while len(remaining) > 1:
        sub = abs_corr[np.ix_(remaining, remaining)].copy()
        np.fill_diagonal(sub, 0.0)
        upper = np.triu(sub, k=1)
        flat = int(np.argmax(upper))
        i, j = divmod(flat, upper.shape[1])
        peak = upper[i, j]
        if peak <= cutoff:
            break

        n_others = len(remaining) - 1
        mean_i = sub[i].sum() / n_others
        mean_j = sub[j].sum() / n_others
        # i < j, so a tie removes the lower-index column
        drop = j if mean_j > mean_i and not np.isclose(mean_i, mean_j) else i
        yield remaining[drop], float(peak)
        del remaining[drop]


def find_correlated_columns(corr: pd.DataFrame, cutoff: float = 0.9) -> List[str]:
    """
    Names of the columns to drop, in removal order.

    Args:
        corr: Square correlation matrix with matching index and columns.
        cutoff: Largest absolute correlation allowed between kept columns.
    """
    cutoff = _check_cutoff(cutoff)
    names = list(corr.columns)
    if len(names) <= 1:
        return []
    abs_corr = np.abs(corr.to_numpy(dtype=float))
    return [names[idx] for idx, _ in _reduce(abs_corr, cutoff)]


def find_correlated_features(matrix, cutoff: float = 0.9, verbose: bool = True) -> SelectionResult:
    """
    Run the correlation filter on a FeatureMatrix.

    Args:
        matrix: FeatureMatrix to analyse.
        cutoff: Absolute correlation threshold in (0, 1].
        verbose: If True, prints progress information.

    Returns:
        SelectionResult: Dropped features in removal order, scored by the
        absolute correlation that triggered each removal. ``metadata`` holds
        the cutoff and the dropped/retained column lists.
    """
    cutoff = _check_cutoff(cutoff)
    corr = correlation_matrix(matrix)
    names = list(corr.columns)

    removed = []
    if len(names) > 1:
        removed = list(_reduce(np.abs(corr.to_numpy()), cutoff))
    dropped = [names[idx] for idx, _ in removed]
    retained = [n for n in names if n not in set(dropped)]

    if verbose:
        print(
            f"[Correlation Filter] cutoff={cutoff:.2f} "
            f"-> dropped {len(dropped)}/{len(names)} features"
        )
        if dropped:
            print(f"    Dropped: {', '.join(dropped)}")

    return SelectionResult(
        method="correlation",
        features=tuple(dropped),
        scores=tuple(peak for _, peak in removed),
        metadata={
            "cutoff": cutoff,
            "dropped": dropped,
            "retained": retained,
            "n_features": len(names),
        },
    )
