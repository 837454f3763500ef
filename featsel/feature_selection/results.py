"""Selection result container shared by all selectors."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from ..exceptions import ConfigurationError


def _freeze(value):
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value):
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class SelectionResult:
    """Ranked (feature, score) pairs produced by one selector call."""

    method: str
    features: Tuple[str, ...]
    scores: Tuple[float, ...]
    metadata: Mapping = field(default_factory=dict)
    extra_scores: Mapping[str, Mapping[str, float]] = field(default_factory=dict)

    def __post_init__(self):
        features = tuple(str(f) for f in self.features)
        scores = tuple(float(s) for s in self.scores)
        if len(features) != len(scores):
            raise ValueError("features and scores must have the same length")
        object.__setattr__(self, "features", features)
        object.__setattr__(self, "scores", scores)
        object.__setattr__(self, "metadata", _freeze(dict(self.metadata)))
        object.__setattr__(self, "extra_scores", _freeze(dict(self.extra_scores)))

    def __len__(self):
        return len(self.features)

    def ranking(self) -> List[Tuple[str, float]]:
        return list(zip(self.features, self.scores))

    def top(self, n: Optional[int] = None) -> List[str]:
        """Names of the ``n`` highest-ranked features (all when ``n`` is None)."""
        return list(self.features if n is None else self.features[:n])

    def ranked_by(self, metric: str) -> "SelectionResult":
        """Return a copy re-sorted by one of ``extra_scores`` (descending)."""
        if metric not in self.extra_scores:
            raise ConfigurationError(
                f"No '{metric}' scores on this result (available: {sorted(self.extra_scores)})"
            )
        secondary = self.extra_scores[metric]
        order = sorted(
            range(len(self.features)),
            key=lambda i: (-secondary[self.features[i]], i),
        )
        return SelectionResult(
            method=self.method,
            features=tuple(self.features[i] for i in order),
            scores=tuple(secondary[self.features[i]] for i in order),
            metadata=dict(self.metadata, ranked_by=metric),
            extra_scores=self.extra_scores,
        )

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame({"feature": list(self.features), "score": list(self.scores)})
        for metric, values in self.extra_scores.items():
            frame[metric] = [values.get(f) for f in self.features]
        frame.index = pd.RangeIndex(1, len(frame) + 1, name="rank")
        return frame

    def to_dict(self) -> Dict:
        """Convert to plain Python containers."""
        return {
            "method": self.method,
            "features": list(self.features),
            "scores": list(self.scores),
            "metadata": _thaw(self.metadata),
            "extra_scores": _thaw(self.extra_scores),
        }


def compare_results(first: SelectionResult, second: SelectionResult,
                    top_n: Optional[int] = None) -> Dict:
    """
    Diff the top-N feature sets of two results.

    Returns:
        dict: ``common``, ``only_first`` and ``only_second`` (each in rank
        order) plus the Jaccard index of the two sets.
    """
    a: Sequence[str] = first.top(top_n)
    b: Sequence[str] = second.top(top_n)
    union = set(a) | set(b)
    common = [f for f in a if f in set(b)]
    return {
        "first": first.method,
        "second": second.method,
        "top_n": top_n,
        "common": common,
        "only_first": [f for f in a if f not in set(b)],
        "only_second": [f for f in b if f not in set(a)],
        "jaccard": len(common) / len(union) if union else 1.0,
    }
