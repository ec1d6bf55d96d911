"""
Record-level data model for clustering and nearest-neighbor classification.

A dataset is an ordered list of `Record` objects, each holding a float
attribute vector and an optional class label. Labels are collected in an
explicit `ClassRegistry` that is built while records are created and then
handed to the quality metrics, so there is no module-level state.

K-Means produces `Cluster` objects (members + centroid) bundled into a
`ClusteringResult`.
"""

from collections import Counter
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import numpy as np

from .errors import DimensionMismatchError


class Record:
    """
    A single attribute vector with an optional class label.

    Parameters
    ----------
    attributes : array-like
        Numeric attribute values. Stored as an owned float64 array.
    label : str, optional
        Class name. None for pure prediction queries and for centroids.
    """

    __slots__ = ("attributes", "label")

    def __init__(self, attributes: Sequence[float], label: Optional[str] = None):
        self.attributes = np.array(attributes, dtype=float)
        self.label = label

    def __len__(self) -> int:
        return self.attributes.shape[0]

    def copy(self, keep_label: bool = True) -> "Record":
        """Return an independent copy (the attribute array is not shared)."""
        return Record(self.attributes.copy(), self.label if keep_label else None)

    def __repr__(self) -> str:
        shown = " ".join(f"{v:10.5f}" for v in self.attributes[:5])
        if len(self) > 5:
            shown += f" ...{self.attributes[-1]:10.5f}"
        return f"Record({shown}, label={self.label!r})"


class ClassRegistry:
    """
    Ordered set of all class labels observed while building records.

    Labels keep their first-seen order, which fixes the column order of
    confusion matrices and report tables.
    """

    def __init__(self, labels: Optional[Iterable[str]] = None):
        self._labels: Dict[str, None] = {}
        if labels is not None:
            for label in labels:
                self.add(label)

    @classmethod
    def from_records(cls, records: Iterable[Record]) -> "ClassRegistry":
        registry = cls()
        for record in records:
            registry.add(record.label)
        return registry

    def add(self, label: Optional[str]) -> None:
        # Unlabeled records do not introduce a class
        if label is not None and label not in self._labels:
            self._labels[label] = None

    @property
    def labels(self) -> List[str]:
        return list(self._labels)

    def __contains__(self, label: object) -> bool:
        return label in self._labels

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return f"ClassRegistry({self.labels!r})"


class Cluster:
    """
    Members assigned to one centroid during a K-Means iteration.

    The centroid is an unlabeled Record owned by the cluster; it never aliases
    a data record.
    """

    def __init__(self, centroid: Record, members: Optional[List[Record]] = None):
        self.centroid = centroid
        self.members: List[Record] = members if members is not None else []

    @property
    def size(self) -> int:
        return len(self.members)

    def is_empty(self) -> bool:
        return not self.members

    def labels(self) -> List[Optional[str]]:
        return [m.label for m in self.members]

    def label_counts(self) -> Counter:
        return Counter(m.label for m in self.members if m.label is not None)

    def majority_label(self) -> Optional[str]:
        """Most frequent member label; ties go to the label seen first."""
        counts = self.label_counts()
        if not counts:
            return None
        return counts.most_common(1)[0][0]

    def member_matrix(self) -> np.ndarray:
        if self.is_empty():
            return np.empty((0, len(self.centroid)))
        return np.vstack([m.attributes for m in self.members])

    def __repr__(self) -> str:
        return f"Cluster(size={self.size}, centroid={self.centroid.attributes!r})"


class ClusteringResult:
    """
    Output of one complete K-Means run for a fixed (records, k, metric).

    Attributes
    ----------
    clusters : List[Cluster]
        Final clusters, in centroid order.
    assignments : np.ndarray
        Cluster index of every input record, in input order.
    n_iter : int
        Number of assign/update passes actually executed.
    converged : bool
        False when the iteration cap was hit before centroids stabilized.
    metric : str
        Name of the distance metric used.
    wss_history : List[float]
        Within-cluster sum of squares measured after every update step.
    """

    def __init__(
            self,
            clusters: List[Cluster],
            assignments: np.ndarray,
            n_iter: int,
            converged: bool,
            metric: str,
            wss_history: Optional[List[float]] = None,
    ):
        self.clusters = clusters
        self.assignments = assignments
        self.n_iter = n_iter
        self.converged = converged
        self.metric = metric
        self.wss_history = wss_history if wss_history is not None else []

    @property
    def k(self) -> int:
        return len(self.clusters)

    @property
    def centroids(self) -> List[Record]:
        return [c.centroid for c in self.clusters]

    @property
    def records(self) -> List[Record]:
        """All clustered records, grouped by cluster."""
        return [m for c in self.clusters for m in c.members]

    def __repr__(self) -> str:
        sizes = [c.size for c in self.clusters]
        return (f"ClusteringResult(k={self.k}, sizes={sizes}, n_iter={self.n_iter}, "
                f"converged={self.converged}, metric={self.metric!r})")


def check_equal_lengths(records: Sequence[Record]) -> int:
    """
    Return the shared attribute length of `records`.

    Raises
    ------
    DimensionMismatchError
        If any record differs in length from the first one.
    """
    n_features = len(records[0])
    for i, record in enumerate(records):
        if len(record) != n_features:
            raise DimensionMismatchError(
                f"Record {i} has {len(record)} attributes, expected {n_features}."
            )
    return n_features


def records_to_matrix(records: Sequence[Record]) -> np.ndarray:
    """Stack attribute vectors into an (n_samples, n_features) matrix."""
    check_equal_lengths(records)
    return np.vstack([r.attributes for r in records])
