"""
Cluster quality measures.

External (label-based) measures compare each cluster against the known class
labels: entropy and purity. Internal measures use the distance metric the
clustering was produced with: within-cluster sum of squares (WSS) and
between-cluster sum of squares (BSS).

For Euclidean distance WSS + BSS equals the total sum of squares around the
data midpoint whenever each centroid is the mean of its members, and WSS does
not increase from one K-Means iteration to the next. Neither holds for the
cosine-complement metric, whose centroids (attribute means) do not minimise
the summed squared cosine distance; a WSS that rises between iterations under
'cosine' is expected. Cosine BSS is also undefined when the data midpoint is
the zero vector (symmetric or z-scored data); that case raises NumericError
naming the cluster whose centroid was being compared.

References
----------
[1] Tan, P.N., Steinbach, M., Kumar, V., "Introduction to Data Mining", 2005,
    Chapter 8.5 "Cluster Evaluation".
"""

from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from .distance import get_metric
from .errors import ConfigurationError, NumericError
from .records import Cluster, ClassRegistry, ClusteringResult, Record, records_to_matrix


def entropy(cluster: Cluster, registry: ClassRegistry) -> float:
    """
    Shannon entropy (base 2) of the label distribution inside a cluster.

    Formula
    -------
    H = - sum_c p_c * log2(p_c), with 0 * log2(0) taken as 0.

    An empty cluster (or one with no labeled members) carries no information
    and scores 0.0.

    Raises
    ------
    ConfigurationError
        If a member label is missing from `registry`.
    """
    counts = cluster.label_counts()
    total = sum(counts.values())
    if total == 0:
        return 0.0

    for label in counts:
        if label not in registry:
            raise ConfigurationError(f"Label '{label}' is not in the class registry.")

    h = 0.0
    for label in registry:
        p = counts.get(label, 0) / total
        if p > 0:
            h -= p * np.log2(p)
    return float(h)


def weighted_entropy(result: ClusteringResult, registry: ClassRegistry) -> float:
    """Size-weighted average of the cluster entropies."""
    n = sum(c.size for c in result.clusters)
    if n == 0:
        return 0.0
    return float(sum(c.size * entropy(c, registry) for c in result.clusters) / n)


def cluster_wss(cluster: Cluster, metric: str = 'euclidean') -> float:
    """Sum of squared distances from each member to the cluster centroid."""
    distance = get_metric(metric)
    return float(sum(distance(m, cluster.centroid) ** 2 for m in cluster.members))


def wss(result: ClusteringResult, metric: Optional[str] = None) -> float:
    """
    Within-cluster sum of squares over all clusters.

    Uses the metric of the clustering run unless `metric` is given.
    """
    metric = metric or result.metric
    return float(sum(cluster_wss(c, metric) for c in result.clusters))


def data_midpoint(records: Sequence[Record]) -> Record:
    """Attribute-wise mean of all records, as an unlabeled record."""
    if len(records) == 0:
        raise ConfigurationError("The midpoint of an empty record set is undefined.")
    return Record(records_to_matrix(records).mean(axis=0))


def cluster_bss(cluster: Cluster, midpoint: Record, metric: str = 'euclidean') -> float:
    """Cluster size times squared distance from its centroid to the data midpoint."""
    if cluster.is_empty():
        return 0.0
    distance = get_metric(metric)
    return float(cluster.size * distance(cluster.centroid, midpoint) ** 2)


def _indexed_cluster_bss(idx: int, cluster: Cluster, midpoint: Record, metric: str) -> float:
    try:
        return cluster_bss(cluster, midpoint, metric)
    except NumericError as exc:
        raise NumericError(f"{metric} BSS failed for cluster {idx}: {exc}") from exc


def bss(result: ClusteringResult, metric: Optional[str] = None) -> float:
    """
    Between-cluster sum of squares.

    The midpoint is taken over every record that was clustered.
    """
    metric = metric or result.metric
    midpoint = data_midpoint(result.records)
    return float(sum(_indexed_cluster_bss(i, c, midpoint, metric) for i, c in enumerate(result.clusters)))


def total_sum_of_squares(records: Sequence[Record], metric: str = 'euclidean') -> float:
    """Sum of squared distances from every record to the data midpoint."""
    distance = get_metric(metric)
    midpoint = data_midpoint(records)
    return float(sum(distance(r, midpoint) ** 2 for r in records))


def class_cluster_matrix(result: ClusteringResult, registry: ClassRegistry) -> np.ndarray:
    """
    Contingency matrix between true classes (rows) and clusters (columns).

    Rows follow registry order; unlabeled records are left out.
    """
    y_true: List[int] = []
    y_pred: List[int] = []
    class_index = {label: i for i, label in enumerate(registry)}
    for cluster_idx, cluster in enumerate(result.clusters):
        for member in cluster.members:
            if member.label is None:
                continue
            if member.label not in class_index:
                raise ConfigurationError(f"Label '{member.label}' is not in the class registry.")
            y_true.append(class_index[member.label])
            y_pred.append(len(registry) + cluster_idx)

    # Disjoint id ranges keep classes and clusters apart inside one square matrix
    ids = list(range(len(registry) + result.k))
    cm = confusion_matrix(y_true, y_pred, labels=ids)
    return cm[:len(registry), len(registry):]


def purity_score(result: ClusteringResult, registry: ClassRegistry) -> float:
    """
    Fraction of labeled records that share their cluster's majority class.

    Formula
    -------
    Purity = (1 / N) * sum_k (max_j (n_kj))
    """
    cm = class_cluster_matrix(result, registry)
    total = cm.sum()
    if total == 0:
        return 0.0
    return float(np.sum(np.max(cm, axis=0)) / total)


def cluster_quality_table(result: ClusteringResult, registry: ClassRegistry) -> pd.DataFrame:
    """
    Per-cluster quality scores for reporting.

    Columns: cluster, size, majority_label, entropy, wss, bss, plus one
    count column per class in registry order.
    """
    midpoint = data_midpoint(result.records)
    rows: List[Dict] = []
    for idx, cluster in enumerate(result.clusters):
        counts = cluster.label_counts()
        row = {
            "cluster": idx,
            "size": cluster.size,
            "majority_label": cluster.majority_label(),
            "entropy": entropy(cluster, registry),
            "wss": cluster_wss(cluster, result.metric),
            "bss": _indexed_cluster_bss(idx, cluster, midpoint, result.metric),
        }
        for label in registry:
            row[f"n_{label}"] = counts.get(label, 0)
        rows.append(row)
    return pd.DataFrame(rows)


def compute_clustering_metrics(result: ClusteringResult, registry: ClassRegistry) -> Dict[str, float]:
    """
    Overall quality summary for one clustering run.

    Returns
    -------
    Dict[str, float]
        'entropy' (size-weighted), 'purity', 'wss', 'bss', 'n_iter' and
        'converged'.
    """
    return {
        "entropy": weighted_entropy(result, registry),
        "purity": purity_score(result, registry),
        "wss": wss(result),
        "bss": bss(result),
        "n_iter": result.n_iter,
        "converged": result.converged,
    }
