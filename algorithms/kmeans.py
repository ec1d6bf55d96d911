"""
Standard K-Means Algorithm Implementation.

This module provides a custom implementation of Lloyd's batch K-Means over
labeled `Record` objects, with the distance metric injected by name
(Euclidean or cosine-complement, see `utils.distance`).

Each iteration assigns every record to its nearest centroid and then moves
every centroid to the mean of its members. Centroids are seeded by sampling
k distinct records uniformly at random and are independent copies of them.

References
----------
[1] MacQueen, J., "Some methods for classification and analysis of multivariate
    observations", 1967, Proc. 5th Berkeley Symp. Math. Stat. Prob., pp. 281-297.
[2] Lloyd, S., "Least squares quantization in PCM", 1982, IEEE Transactions on
    Information Theory, 28(2), pp. 129-137.
"""

from typing import List, Optional, Sequence, Union

import numpy as np

from utils.errors import ConfigurationError, NumericError
from utils.records import Cluster, ClusteringResult, Record, check_equal_lengths
from utils.distance import get_metric


class KMeans:
    """
    K-Means clustering algorithm implementation (Lloyd's Algorithm).

    Parameters
    ----------
    n_clusters : int
        The number of clusters to form, 1 <= n_clusters <= number of records.
    max_iters : int, default=300
        Maximum number of assign/update passes. Hitting the cap is reported
        through `ClusteringResult.converged`, not raised.
    tol : float, default=1e-4
        Convergence tolerance. The run stops once no centroid attribute moved
        by more than `tol` during an update.
    metric : str, default='euclidean'
        Name of the distance metric ('euclidean' or 'cosine').
    random_state : int or np.random.RandomState, optional
        Source of randomness for seeding the centroids.
    verbose : bool, default=False
        If True, prints per-iteration progress and empty-cluster events.
    """

    def __init__(
        self,
        n_clusters: int,
        max_iters: int = 300,
        tol: float = 1e-4,
        metric: str = 'euclidean',
        random_state: Optional[Union[int, np.random.RandomState]] = None,
        verbose: bool = False,
    ):
        self.n_clusters = n_clusters
        self.max_iters = max_iters
        self.tol = tol
        self.metric = metric
        self.random_state = random_state
        self.verbose = verbose
        self.distance = get_metric(metric)

        self.result_ = None
        self.centroids = None
        self.labels_ = None
        self.inertia_ = None

        if self.max_iters < 1:
            raise ConfigurationError(f"max_iters must be >= 1, got {self.max_iters}.")
        if self.tol < 0:
            raise ConfigurationError(f"tol must be non-negative, got {self.tol}.")

    def _validate(self, records: Sequence[Record]) -> None:
        if len(records) == 0:
            raise ConfigurationError("Cannot cluster an empty record set.")
        if not 1 <= self.n_clusters <= len(records):
            raise ConfigurationError(
                f"n_clusters must be between 1 and {len(records)}, got {self.n_clusters}."
            )
        check_equal_lengths(records)

    def _rng(self) -> np.random.RandomState:
        if isinstance(self.random_state, np.random.RandomState):
            return self.random_state
        return np.random.RandomState(self.random_state)

    def _initialize_centroids(self, records: Sequence[Record]) -> List[Record]:
        """
        Initialize centroids using MacQueen's second method (Random Selection).

        Indices are drawn without replacement, so the same record is never
        picked twice. Every centroid is an unlabeled copy of its record.
        """
        indices = self._rng().choice(len(records), size=self.n_clusters, replace=False)
        return [records[i].copy(keep_label=False) for i in indices]

    def _distance(self, records: Sequence[Record], i: int, centroids: List[Record], j: int) -> float:
        try:
            d = self.distance(records[i], centroids[j])
        except NumericError as exc:
            raise NumericError(
                f"{self.metric} distance failed between record {i} and centroid {j}: {exc}"
            ) from exc
        if not np.isfinite(d):
            raise NumericError(
                f"{self.metric} distance between record {i} and centroid {j} is {d}."
            )
        return d

    def _assign_clusters(self, records: Sequence[Record], centroids: List[Record]) -> np.ndarray:
        """
        Assign each record to the nearest centroid.

        np.argmin returns the first minimum, so ties go to the lowest
        centroid index.
        """
        assignments = np.empty(len(records), dtype=int)
        for i in range(len(records)):
            distances = [self._distance(records, i, centroids, j) for j in range(len(centroids))]
            assignments[i] = int(np.argmin(distances))
        return assignments

    def _build_clusters(self, records: Sequence[Record], centroids: List[Record],
                        assignments: np.ndarray) -> List[Cluster]:
        clusters = [Cluster(centroid) for centroid in centroids]
        for record, cluster_idx in zip(records, assignments):
            clusters[cluster_idx].members.append(record)
        return clusters

    def _update_centroids(self, clusters: List[Cluster]) -> bool:
        """
        Move every centroid to the mean of its members, in place.

        An empty cluster keeps its previous centroid: the mean of no points
        is undefined.

        Returns
        -------
        bool
            True if any centroid attribute moved by more than `tol`.
        """
        moved = False
        for idx, cluster in enumerate(clusters):
            if cluster.is_empty():
                if self.verbose:
                    print(f"  Cluster {idx} is empty; keeping its centroid.")
                continue

            new_attributes = cluster.member_matrix().mean(axis=0)
            shift = np.max(np.abs(new_attributes - cluster.centroid.attributes))
            if shift > self.tol:
                moved = True
            cluster.centroid.attributes[:] = new_attributes
        return moved

    def _compute_inertia(self, records: Sequence[Record], centroids: List[Record],
                         assignments: np.ndarray) -> float:
        """Within-cluster sum of squared distances to the current centroids."""
        inertia = 0.0
        for i, j in enumerate(assignments):
            inertia += self._distance(records, i, centroids, int(j)) ** 2
        return inertia

    def run(self, records: Sequence[Record]) -> ClusteringResult:
        """
        Cluster `records` and return the full result.

        Raises
        ------
        ConfigurationError
            If n_clusters is outside [1, len(records)] or records is empty.
        DimensionMismatchError
            If records do not share one attribute length.
        NumericError
            If a distance is NaN/Inf or undefined for some record/centroid pair.
        """
        self._validate(records)
        centroids = self._initialize_centroids(records)

        converged = False
        wss_history = []
        n_iter = 0
        clusters: List[Cluster] = []
        assignments = np.zeros(len(records), dtype=int)

        for n_iter in range(1, self.max_iters + 1):
            assignments = self._assign_clusters(records, centroids)
            clusters = self._build_clusters(records, centroids, assignments)
            moved = self._update_centroids(clusters)
            wss_history.append(self._compute_inertia(records, centroids, assignments))

            if self.verbose:
                sizes = [c.size for c in clusters]
                print(f"  Iteration {n_iter}: sizes={sizes}, WSS={wss_history[-1]:.6f}")

            if not moved:
                converged = True
                break

        if self.verbose and not converged:
            print(f"  K-Means did not converge within {self.max_iters} iterations.")

        return ClusteringResult(
            clusters=clusters,
            assignments=assignments,
            n_iter=n_iter,
            converged=converged,
            metric=self.metric,
            wss_history=wss_history,
        )

    def fit(self, records: Sequence[Record]):
        """
        Fit the K-Means model to the records.

        Returns
        -------
        self
        """
        self.result_ = self.run(records)
        self.centroids = self.result_.centroids
        self.labels_ = self.result_.assignments
        self.inertia_ = self.result_.wss_history[-1]
        return self

    def predict(self, records: Sequence[Record]) -> np.ndarray:
        """
        Predict the closest cluster for each record.

        Returns
        -------
        np.ndarray
            Cluster index per record.
        """
        if self.centroids is None:
            raise ConfigurationError("Model has not been fitted yet. Call fit() first.")
        return self._assign_clusters(records, self.centroids)

    def fit_predict(self, records: Sequence[Record]) -> np.ndarray:
        self.fit(records)
        return self.labels_
