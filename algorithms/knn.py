"""
Distance-Weighted k-Nearest-Neighbors Classifier.

Every query is compared against the whole labeled pool. The k closest pool
records vote for their own label with weight 1 / distance, and the label with
the largest accumulated weight is returned.

Behavioral contract
-------------------
- Neighbors are ordered by ascending distance with a stable sort, so equal
  distances keep pool order.
- n_neighbors larger than the pool is clamped to the pool size.
- A neighbor at distance 0 casts an infinite vote, so an exact match wins
  regardless of the other neighbors.
- When two labels end with the same weight, the label that appeared first
  among the ordered neighbors wins.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from utils.errors import ConfigurationError, NumericError
from utils.records import Record, check_equal_lengths
from utils.distance import get_metric


class KNNClassifier:
    """
    Inverse-distance-weighted kNN over `Record` objects.

    Parameters
    ----------
    n_neighbors : int, default=5
        Number of neighbors that vote (k >= 1).
    metric : str, default='euclidean'
        Name of the distance metric ('euclidean' or 'cosine').
    """

    def __init__(self, n_neighbors: int = 5, metric: str = 'euclidean'):
        if n_neighbors < 1:
            raise ConfigurationError(f"n_neighbors must be >= 1, got {n_neighbors}.")
        self.n_neighbors = n_neighbors
        self.metric = metric
        self.distance = get_metric(metric)
        self.pool: Optional[List[Record]] = None

    def fit(self, pool: Sequence[Record]):
        """
        Store the labeled pool.

        Raises
        ------
        ConfigurationError
            If the pool is empty or contains unlabeled records.
        DimensionMismatchError
            If pool records differ in length.
        """
        if len(pool) == 0:
            raise ConfigurationError("kNN needs a non-empty labeled pool.")
        for i, record in enumerate(pool):
            if record.label is None:
                raise ConfigurationError(f"Pool record {i} has no label.")
        check_equal_lengths(pool)
        self.pool = list(pool)
        return self

    def kneighbors(self, query: Record) -> List[Tuple[int, float]]:
        """
        Return (pool index, distance) of the voting neighbors, closest first.
        """
        if self.pool is None:
            raise ConfigurationError("Classifier has not been fitted yet. Call fit() first.")

        distances = np.empty(len(self.pool))
        for i, record in enumerate(self.pool):
            try:
                d = self.distance(query, record)
            except NumericError as exc:
                raise NumericError(f"{self.metric} distance failed for pool record {i}: {exc}") from exc
            if not np.isfinite(d):
                raise NumericError(f"{self.metric} distance to pool record {i} is {d}.")
            distances[i] = d

        k = min(self.n_neighbors, len(self.pool))
        order = np.argsort(distances, kind='stable')[:k]
        return [(int(i), float(distances[i])) for i in order]

    def predict_one(self, query: Record) -> str:
        weights: Dict[str, float] = {}
        for idx, dist in self.kneighbors(query):
            label = self.pool[idx].label
            vote = np.inf if dist == 0 else 1.0 / dist
            weights[label] = weights.get(label, 0.0) + vote

        # dicts keep insertion order: strict '>' keeps the first label on ties
        best_label, best_weight = None, -1.0
        for label, weight in weights.items():
            if weight > best_weight:
                best_label, best_weight = label, weight
        return best_label

    def predict(self, queries: Sequence[Record]) -> List[str]:
        return [self.predict_one(q) for q in queries]

    def score(self, queries: Sequence[Record]) -> float:
        """Fraction of labeled queries predicted correctly."""
        labeled = [q for q in queries if q.label is not None]
        if not labeled:
            raise ConfigurationError("score() needs labeled query records.")
        predictions = self.predict(labeled)
        return float(np.mean([p == q.label for p, q in zip(predictions, labeled)]))
