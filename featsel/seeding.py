"""Seed resolution for the randomized selectors."""

import numpy as np

from .exceptions import ConfigurationError


def resolve_seed(seed=None):
    """
    Return an integer seed, drawing one from fresh OS entropy when ``seed`` is None.

    Every random component of a run (fold assignment, bootstrapping, split
    features, permutations) is seeded from the returned value, so numpy's
    global random state is never consulted. The value is recorded in the
    result metadata; passing it back reproduces the run.
    """
    if seed is None:
        return int(np.random.SeedSequence().generate_state(1)[0])
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise ConfigurationError(f"seed must be a non-negative integer, got {seed!r}")
    return int(seed)
