import numpy as np
import pytest

from algorithms.kmeans import KMeans
from utils.clustering_metrics import (
    bss,
    class_cluster_matrix,
    cluster_quality_table,
    compute_clustering_metrics,
    data_midpoint,
    entropy,
    purity_score,
    total_sum_of_squares,
    weighted_entropy,
    wss,
)
from utils.errors import ConfigurationError, NumericError
from utils.records import ClassRegistry, Cluster, ClusteringResult, Record


def labeled(*labels):
    return [Record([float(i)], label) for i, label in enumerate(labels)]


def make_result(records, k=3, metric="euclidean", seed=0):
    return KMeans(n_clusters=k, metric=metric, random_state=seed).run(records)


def make_mixed_records():
    rng = np.random.RandomState(11)
    records = []
    for label, center in [("p", (0.0, 0.0, 1.0)), ("q", (4.0, 1.0, 1.0)), ("r", (1.0, 5.0, 2.0))]:
        for point in rng.normal(loc=center, scale=1.5, size=(25, 3)):
            records.append(Record(point, label))
    return records


def test_entropy_of_pure_cluster_is_zero():
    registry = ClassRegistry(["A", "B"])
    cluster = Cluster(Record([0.0]), labeled("A", "A", "A"))
    assert entropy(cluster, registry) == 0.0


def test_entropy_of_even_two_way_split_is_one():
    registry = ClassRegistry(["A", "B"])
    cluster = Cluster(Record([0.0]), labeled("A", "B", "A", "B"))
    assert entropy(cluster, registry) == pytest.approx(1.0)


def test_entropy_of_even_four_way_split_is_two():
    registry = ClassRegistry(["A", "B", "C", "D"])
    cluster = Cluster(Record([0.0]), labeled("A", "B", "C", "D"))
    assert entropy(cluster, registry) == pytest.approx(2.0)


def test_entropy_of_empty_cluster_is_zero():
    assert entropy(Cluster(Record([0.0])), ClassRegistry(["A", "B"])) == 0.0


def test_entropy_rejects_unregistered_label():
    cluster = Cluster(Record([0.0]), labeled("A", "Z"))
    with pytest.raises(ConfigurationError):
        entropy(cluster, ClassRegistry(["A"]))


def test_weighted_entropy_uses_cluster_sizes():
    registry = ClassRegistry(["A", "B"])
    pure = Cluster(Record([0.0]), labeled("A", "A"))
    mixed = Cluster(Record([0.0]), labeled("A", "B"))
    result = ClusteringResult([pure, mixed], np.zeros(4, dtype=int), 1, True, "euclidean")
    assert weighted_entropy(result, registry) == pytest.approx(0.5)


def test_wss_and_bss_by_hand():
    left = Cluster(Record([1.0]), [Record([0.0], "A"), Record([2.0], "A")])
    right = Cluster(Record([10.0]), [Record([9.0], "B"), Record([11.0], "B")])
    result = ClusteringResult([left, right], np.array([0, 0, 1, 1]), 1, True, "euclidean")

    assert data_midpoint(result.records).attributes[0] == pytest.approx(5.5)
    assert wss(result) == pytest.approx(4.0)
    # 2 * 4.5^2 + 2 * 4.5^2
    assert bss(result) == pytest.approx(81.0)


def test_wss_plus_bss_equals_total_for_euclidean():
    records = make_mixed_records()
    result = make_result(records)
    assert wss(result) + bss(result) == pytest.approx(total_sum_of_squares(records))


def test_scores_are_non_negative_for_both_metrics():
    records = make_mixed_records()
    for metric in ("euclidean", "cosine"):
        result = make_result(records, metric=metric)
        assert wss(result) >= 0
        assert bss(result) >= 0


def test_purity_and_contingency_matrix():
    registry = ClassRegistry(["A", "B"])
    c0 = Cluster(Record([0.0]), labeled("A", "A", "B"))
    c1 = Cluster(Record([0.0]), labeled("B"))
    c2 = Cluster(Record([0.0]))
    result = ClusteringResult([c0, c1, c2], np.zeros(4, dtype=int), 2, True, "euclidean")

    np.testing.assert_array_equal(class_cluster_matrix(result, registry), [[2, 0, 0], [1, 1, 0]])
    assert purity_score(result, registry) == pytest.approx(0.75)


def test_cluster_quality_table_columns():
    records = make_mixed_records()
    registry = ClassRegistry.from_records(records)
    result = make_result(records)
    table = cluster_quality_table(result, registry)

    assert list(table["cluster"]) == [0, 1, 2]
    assert table["size"].sum() == len(records)
    assert {"entropy", "wss", "bss", "n_p", "n_q", "n_r"} <= set(table.columns)
    assert table["wss"].sum() == pytest.approx(wss(result))


def test_compute_clustering_metrics_keys():
    records = make_mixed_records()
    registry = ClassRegistry.from_records(records)
    metrics = compute_clustering_metrics(make_result(records), registry)
    assert set(metrics) == {"entropy", "purity", "wss", "bss", "n_iter", "converged"}
    assert 0.0 <= metrics["purity"] <= 1.0
    assert 0.0 <= metrics["entropy"] <= np.log2(3) + 1e-12


def test_cosine_bss_with_zero_midpoint_names_the_cluster():
    positive = Cluster(Record([1.5, 1.5]), [Record([1.0, 1.0], "A"), Record([2.0, 2.0], "A")])
    negative = Cluster(Record([-1.5, -1.5]), [Record([-1.0, -1.0], "B"), Record([-2.0, -2.0], "B")])
    result = ClusteringResult([positive, negative], np.array([0, 0, 1, 1]), 1, True, "cosine")

    with pytest.raises(NumericError, match="cluster 0"):
        bss(result)
    with pytest.raises(NumericError, match="cluster 0"):
        cluster_quality_table(result, ClassRegistry(["A", "B"]))
