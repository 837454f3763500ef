"""Shared fixtures: small synthetic datasets with known structure."""

import numpy as np
import pandas as pd
import pytest

from featsel.preprocessing import Dataset, FeatureMatrix


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def correlated_matrix(rng):
    """A and B nearly collinear (r ~ 0.99), C and D independent noise."""
    n = 200
    a = rng.normal(size=n)
    b = a + rng.normal(scale=0.1, size=n)
    c = rng.normal(size=n)
    d = rng.normal(size=n)
    y = np.where(a + c > 0, "yes", "no")
    return FeatureMatrix(
        values=np.column_stack([a, b, c, d]),
        feature_names=("A", "B", "C", "D"),
        target=y,
        label="outcome",
    )


@pytest.fixture
def determined_matrix(rng):
    """The label is a deterministic function of X alone."""
    n = 300
    x = rng.normal(size=n)
    noise = rng.normal(size=(n, 3))
    y = np.where(x > 0, "pos", "neg")
    return FeatureMatrix(
        values=np.column_stack([noise[:, 0], x, noise[:, 1], noise[:, 2]]),
        feature_names=("N1", "X", "N2", "N3"),
        target=y,
        label="outcome",
    )


@pytest.fixture
def two_feature_matrix(rng):
    """Label = P or Q on binary P, Q: both needed, together sufficient."""
    n = 120
    p = rng.integers(0, 2, size=n)
    q = rng.integers(0, 2, size=n)
    noise = rng.normal(size=n)
    y = np.where((p == 1) | (q == 1), "positive", "negative")
    return FeatureMatrix(
        values=np.column_stack([p, q, noise]).astype(float),
        feature_names=("P", "Q", "noise"),
        target=y,
        label="outcome",
    )


@pytest.fixture
def binary_matrix(rng):
    """One strongly informative feature among noise, binary labels."""
    n = 200
    signal = rng.normal(size=n)
    noise = rng.normal(size=(n, 4))
    y = (signal + rng.normal(scale=0.3, size=n) > 0).astype(int)
    return FeatureMatrix(
        values=np.column_stack([noise[:, :2], signal, noise[:, 2:]]),
        feature_names=("n1", "n2", "signal", "n3", "n4"),
        target=y,
        label="class",
    )


@pytest.fixture
def mixed_dataset():
    """Mixed-type table with missing markers and an ordinal factor column."""
    frame = pd.DataFrame({
        "Id": [1, 2, 3, 4, 5, 6],
        "thickness": [5.0, 3.0, np.nan, 6.0, 4.0, 8.0],
        "nuclei": ["1", "10", "?", "2", None, "1"],
        "grade": pd.Categorical(["1", "2", "3", "1", "2", "3"],
                                categories=["1", "2", "3"], ordered=True),
        "Class": ["benign", "malignant", "benign", "malignant", "benign", "malignant"],
    })
    return Dataset(frame=frame, label="Class", column_types={"nuclei": "numeric"})
