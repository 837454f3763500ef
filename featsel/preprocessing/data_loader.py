"""Tabular dataset loading.

Datasets come either from the scikit-learn bundled corpora
(``breast_cancer``, ``iris``) or from a CSV file. Every column carries a
semantic type (numeric, ordinal or nominal) and one column is the label.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype
from sklearn import datasets as sk_datasets

from ..exceptions import ConfigurationError, DomainError

COLUMN_TYPES = ("numeric", "ordinal", "nominal")

# Extra missing-value markers on top of the pandas defaults (UCI files use '?')
EXTRA_NA_VALUES = ["?"]

BUILTIN_DATASETS = {
    "breast_cancer": sk_datasets.load_breast_cancer,
    "iris": sk_datasets.load_iris,
}


def infer_column_type(series: pd.Series) -> str:
    """Infer the semantic type of a column from its pandas dtype."""
    if isinstance(series.dtype, pd.CategoricalDtype):
        return "ordinal" if series.dtype.ordered else "nominal"
    if is_numeric_dtype(series.dtype) and not pd.api.types.is_bool_dtype(series.dtype):
        return "numeric"
    return "nominal"


@dataclass
class Dataset:
    """Ordered named columns of equal length plus a designated label column."""

    frame: pd.DataFrame
    label: str
    column_types: Dict[str, str] = field(default_factory=dict)
    name: Optional[str] = None

    def __post_init__(self):
        self.frame = self.frame.rename(columns=str)
        self.label = str(self.label)
        if self.label not in self.frame.columns:
            raise DomainError(f"Label column '{self.label}' not found in dataset")
        if self.frame.columns.duplicated().any():
            raise DomainError("Dataset column names must be unique")

        types = {col: infer_column_type(self.frame[col]) for col in self.frame.columns}
        for col, col_type in self.column_types.items():
            if col not in types:
                raise ConfigurationError(f"Column type given for unknown column '{col}'")
            if col_type not in COLUMN_TYPES:
                raise ConfigurationError(
                    f"Unsupported column type '{col_type}' for '{col}' "
                    f"(expected one of {COLUMN_TYPES})"
                )
            types[col] = col_type
        self.column_types = types

    @property
    def n_rows(self) -> int:
        return len(self.frame)

    @property
    def feature_names(self) -> List[str]:
        return [col for col in self.frame.columns if col != self.label]

    @property
    def labels(self) -> np.ndarray:
        return self.frame[self.label].to_numpy()

    def column(self, name: str) -> pd.Series:
        """Return a copy of one column."""
        if name not in self.frame.columns:
            raise DomainError(f"Column '{name}' not found in dataset")
        return self.frame[name].copy()

    def columns_of_type(self, col_type: str) -> List[str]:
        return [c for c in self.feature_names if self.column_types[c] == col_type]

    def summary(self) -> pd.DataFrame:
        """Per-column type and missing-value counts."""
        return pd.DataFrame({
            "type": pd.Series(self.column_types),
            "missing": self.frame.isna().sum(),
        }).loc[list(self.frame.columns)]


def _load_builtin(name):
    bunch = BUILTIN_DATASETS[name](as_frame=True)
    frame = bunch.frame.copy()
    # Replace integer codes with the class names shipped with the corpus
    frame["target"] = pd.Categorical.from_codes(
        bunch.target.to_numpy(), categories=list(bunch.target_names)
    )
    label = "diagnosis" if name == "breast_cancer" else "species"
    return frame.rename(columns={"target": label}), label


def load_dataset(source, label=None, drop_columns=None, column_types=None,
                 na_values=None, verbose=True, **read_csv_kwargs):
    """
    Load a named bundled dataset or a CSV file.

    Args:
        source (str): ``breast_cancer``, ``iris`` or a path to a CSV file.
        label (str, optional): Label column. Bundled datasets default to
            ``diagnosis``/``species``; CSV files default to the last column.
        drop_columns (list, optional): Columns removed after loading (e.g. IDs).
        column_types (dict, optional): Overrides for inferred column types.
        na_values (list, optional): Extra missing-value markers for CSV files.
        verbose (bool): If True, prints a loading summary.
        **read_csv_kwargs: Passed through to ``pandas.read_csv``.

    Returns:
        Dataset: The loaded dataset.
    """
    source = str(source)
    if source in BUILTIN_DATASETS:
        frame, default_label = _load_builtin(source)
        name = source
    else:
        path = Path(source)
        if not path.exists():
            raise ConfigurationError(
                f"Unknown dataset '{source}': not a bundled dataset "
                f"({', '.join(BUILTIN_DATASETS)}) and no such file"
            )
        markers = list(EXTRA_NA_VALUES) + list(na_values or [])
        frame = pd.read_csv(path, na_values=markers, **read_csv_kwargs)
        default_label = frame.columns[-1]
        name = path.stem

    if drop_columns:
        missing = [c for c in drop_columns if c not in frame.columns]
        if missing:
            raise ConfigurationError(f"Cannot drop unknown columns: {missing}")
        frame = frame.drop(columns=list(drop_columns))

    label = label or default_label
    if verbose:
        print(f"[Loading] {name}: {frame.shape[0]} rows x {frame.shape[1]} columns (label='{label}')")
    return Dataset(frame=frame, label=label, column_types=dict(column_types or {}), name=name)
