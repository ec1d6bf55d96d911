"""
Pairwise distance metrics.

The metric set is closed and small, so metrics are plain functions with a
uniform `(a, b) -> float` signature, registered in `METRICS` and selected by
name through `get_metric`. Both K-Means and the kNN classifier receive the
metric by name and never branch on which one they got.

- 'euclidean': sqrt(sum((a_i - b_i)^2)).
- 'cosine': 1 - (a . b) / (|a| |b|). Undefined for zero-magnitude vectors,
  which raise NumericError instead of producing NaN.
"""

from typing import Callable, Dict, Union

import numpy as np

from .errors import ConfigurationError, DimensionMismatchError, NumericError
from .records import Record

Vector = Union[np.ndarray, Record]
DistanceFunction = Callable[[Vector, Vector], float]


def _as_pair(a: Vector, b: Vector):
    a = a.attributes if isinstance(a, Record) else np.asarray(a, dtype=float)
    b = b.attributes if isinstance(b, Record) else np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise DimensionMismatchError(
            f"Cannot compare vectors of length {a.shape[0]} and {b.shape[0]}."
        )
    return a, b


def euclidean_distance(a: Vector, b: Vector) -> float:
    a, b = _as_pair(a, b)
    diff = a - b
    return float(np.sqrt(np.dot(diff, diff)))


def cosine_distance(a: Vector, b: Vector) -> float:
    a, b = _as_pair(a, b)
    norm_a = np.sqrt(np.dot(a, a))
    norm_b = np.sqrt(np.dot(b, b))
    if norm_a == 0 or norm_b == 0:
        raise NumericError("Cosine distance is undefined for a zero-magnitude vector.")

    similarity = np.dot(a, b) / (norm_a * norm_b)
    # Round-off can push similarity slightly above 1
    return float(max(0.0, 1.0 - similarity))


METRICS: Dict[str, DistanceFunction] = {
    "euclidean": euclidean_distance,
    "cosine": cosine_distance,
}


def get_metric(name: str) -> DistanceFunction:
    """
    Look up a distance function by name.

    Raises
    ------
    ConfigurationError
        If `name` is not one of METRICS.
    """
    try:
        return METRICS[name]
    except KeyError:
        raise ConfigurationError(
            f"Metric '{name}' not supported. Choose one of {sorted(METRICS)}."
        ) from None
