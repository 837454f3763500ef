"""Data loading and numeric coercion for the feature selection pipeline."""

from .data_loader import Dataset, load_dataset, infer_column_type, BUILTIN_DATASETS
from .coercion import FeatureMatrix, coerce_numeric, impute_matrix

__all__ = [
    'Dataset',
    'load_dataset',
    'infer_column_type',
    'BUILTIN_DATASETS',
    'FeatureMatrix',
    'coerce_numeric',
    'impute_matrix'
]
