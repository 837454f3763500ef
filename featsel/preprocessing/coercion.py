"""
Numeric coercion and imputation.

Turns a mixed-type Dataset into a numeric FeatureMatrix:
    1. Parse the requested columns to float (unparseable values -> NaN).
    2. Replace every missing or non-finite cell using the imputation policy.

The default policy fills with 0.0, which treats "unknown" as a measured zero
and can bias downstream statistics. ``strategy`` and ``fill_value`` make the
policy explicit for callers who need something else.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype, is_scalar

from ..exceptions import ConfigurationError, DataQualityWarning, DomainError

IMPUTE_STRATEGIES = ("constant", "mean", "median")


@dataclass(frozen=True, eq=False)
class FeatureMatrix:
    """Numeric N x F view of a dataset with no missing values."""

    values: np.ndarray
    feature_names: Tuple[str, ...]
    target: Optional[np.ndarray] = None
    label: Optional[str] = None
    imputed_counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        values = np.array(self.values, dtype=float, copy=True)
        if values.ndim != 2:
            raise DomainError("Feature matrix must be 2D (rows x features)")
        names = tuple(str(n) for n in self.feature_names)
        if len(names) != values.shape[1]:
            raise DomainError(
                f"{len(names)} feature names given for {values.shape[1]} columns"
            )
        if len(set(names)) != len(names):
            raise DomainError("Feature names must be unique")
        if not np.all(np.isfinite(values)):
            bad = [names[i] for i in np.where(~np.isfinite(values).all(axis=0))[0]]
            raise DomainError(f"Non-finite values remain in columns: {bad}")
        values.setflags(write=False)

        target = self.target
        if target is not None:
            target = np.array(target, copy=True)
            if target.shape[0] != values.shape[0]:
                raise DomainError(
                    f"Target has {target.shape[0]} rows, features have {values.shape[0]}"
                )
            target.setflags(write=False)

        object.__setattr__(self, "values", values)
        object.__setattr__(self, "feature_names", names)
        object.__setattr__(self, "target", target)
        object.__setattr__(self, "imputed_counts", dict(self.imputed_counts))

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    @property
    def n_rows(self) -> int:
        return self.values.shape[0]

    @property
    def n_features(self) -> int:
        return self.values.shape[1]

    def column_index(self, name: str) -> int:
        try:
            return self.feature_names.index(name)
        except ValueError:
            raise DomainError(f"Unknown feature '{name}'") from None

    def select(self, names: Iterable[str]) -> "FeatureMatrix":
        """Return a new matrix restricted to ``names`` (in the given order)."""
        names = list(names)
        idx = [self.column_index(n) for n in names]
        return FeatureMatrix(
            values=self.values[:, idx],
            feature_names=tuple(names),
            target=self.target,
            label=self.label,
            imputed_counts={n: self.imputed_counts.get(n, 0) for n in names},
        )

    def drop(self, names: Iterable[str]) -> "FeatureMatrix":
        dropped = set(names)
        return self.select([n for n in self.feature_names if n not in dropped])

    def to_frame(self, include_target: bool = False) -> pd.DataFrame:
        frame = pd.DataFrame(self.values, columns=list(self.feature_names))
        if include_target and self.target is not None:
            frame[self.label or "target"] = self.target
        return frame


def _parse_column(series: pd.Series) -> pd.Series:
    """Parse one column to float; anything unparseable becomes NaN."""
    if is_numeric_dtype(series.dtype) and not isinstance(series.dtype, pd.CategoricalDtype):
        return series.astype(float)
    # Categorical and object columns: parse each value on its own
    values = series.astype(object)
    try:
        return pd.to_numeric(values, errors="coerce").astype(float)
    except (TypeError, ValueError):
        # Non-scalar cells (lists, dicts, arrays) defeat the vectorized parse
        return values.map(_parse_cell).astype(float)


def _parse_cell(value) -> float:
    if not is_scalar(value):
        return np.nan
    try:
        return float(pd.to_numeric(value, errors="coerce"))
    except (TypeError, ValueError):
        return np.nan


def _fill_values(frame: pd.DataFrame, strategy: str, fill_value: float) -> pd.Series:
    """Resolve the replacement value for each column."""
    if strategy == "constant":
        return pd.Series(fill_value, index=frame.columns, dtype=float)
    stats = frame.mean() if strategy == "mean" else frame.median()
    return stats.fillna(fill_value)


def impute_matrix(values, fill_value: float = 0.0, strategy: str = "constant") -> np.ndarray:
    """
    Replace NaN and infinite cells of a 2D array.

    Args:
        values: Array-like (rows x columns).
        fill_value: Constant used by the ``constant`` strategy and for columns
            with no observed values under ``mean``/``median``.
        strategy: One of ``constant``, ``mean``, ``median``.

    Returns:
        np.ndarray: A new float array with every cell finite.
    """
    if strategy not in IMPUTE_STRATEGIES:
        raise ConfigurationError(
            f"Unsupported imputation strategy '{strategy}' (expected one of {IMPUTE_STRATEGIES})"
        )
    frame = pd.DataFrame(np.array(values, dtype=float, copy=True))
    frame = frame.where(np.isfinite(frame))
    return frame.fillna(_fill_values(frame, strategy, float(fill_value))).to_numpy(copy=True)


def coerce_numeric(dataset, columns: Optional[Sequence[str]] = None,
                   fill_value: float = 0.0, strategy: str = "constant",
                   verbose: bool = True) -> FeatureMatrix:
    """
    Convert the feature columns of a Dataset into a numeric FeatureMatrix.

    The dataset is not modified. Values that fail to parse are treated as
    missing, and every missing cell is imputed; this step never raises for
    cell content. Imputation is reported through ``DataQualityWarning``.

    Args:
        dataset: A ``Dataset`` from ``load_dataset``.
        columns: Feature columns to parse. Defaults to every feature column.
            Unlisted numeric columns are kept as-is; unlisted non-numeric
            columns are left out of the matrix.
        fill_value: Replacement value for missing cells (default 0.0).
        strategy: Imputation policy, ``constant`` (default), ``mean`` or ``median``.
        verbose: If True, prints a summary.

    Returns:
        FeatureMatrix: Numeric features plus the dataset's label vector.
    """
    if strategy not in IMPUTE_STRATEGIES:
        raise ConfigurationError(
            f"Unsupported imputation strategy '{strategy}' (expected one of {IMPUTE_STRATEGIES})"
        )

    features = dataset.feature_names
    targets = list(features) if columns is None else [str(c) for c in columns]
    unknown = [c for c in targets if c not in features]
    if unknown:
        raise ConfigurationError(f"Cannot coerce unknown or label columns: {unknown}")

    parsed: Dict[str, pd.Series] = {}
    excluded = []
    unparseable = []
    for col in features:
        series = dataset.frame[col]
        if col in targets:
            values = _parse_column(series)
            failed = int((values.isna() & series.notna()).sum())
            if failed and dataset.column_types.get(col) == "numeric":
                unparseable.append(f"{col} ({failed})")
            parsed[col] = values
        elif is_numeric_dtype(series.dtype) and not isinstance(series.dtype, pd.CategoricalDtype):
            parsed[col] = series.astype(float)
        else:
            excluded.append(col)

    frame = pd.DataFrame(parsed, index=dataset.frame.index)
    frame = frame.where(np.isfinite(frame))
    missing = frame.isna().sum()
    imputed_counts = {col: int(n) for col, n in missing.items() if n}
    frame = frame.fillna(_fill_values(frame, strategy, float(fill_value)))

    if excluded:
        warnings.warn(
            f"Non-numeric columns left out of the feature matrix: {excluded}",
            DataQualityWarning,
            stacklevel=2,
        )
    if unparseable:
        warnings.warn(
            f"Unparseable values in numeric columns were imputed: {', '.join(unparseable)}",
            DataQualityWarning,
            stacklevel=2,
        )
    if imputed_counts:
        warnings.warn(
            f"Imputed {sum(imputed_counts.values())} missing cells "
            f"({strategy}, fill_value={fill_value}): {imputed_counts}",
            DataQualityWarning,
            stacklevel=2,
        )

    if verbose:
        print(
            f"[Coercion] {frame.shape[0]} rows x {frame.shape[1]} features "
            f"-> imputed {sum(imputed_counts.values())} cells in {len(imputed_counts)} columns"
        )

    return FeatureMatrix(
        values=frame.to_numpy(dtype=float),
        feature_names=tuple(frame.columns),
        target=dataset.labels,
        label=dataset.label,
        imputed_counts=imputed_counts,
    )
