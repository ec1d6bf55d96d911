import numpy as np
import pytest

from utils.errors import DimensionMismatchError
from utils.records import ClassRegistry, Cluster, Record, check_equal_lengths, records_to_matrix


def test_record_owns_its_attributes():
    values = np.array([1.0, 2.0])
    record = Record(values, "A")
    values[0] = 99.0
    assert record.attributes[0] == 1.0


def test_copy_is_independent():
    record = Record([1.0, 2.0], "A")
    centroid = record.copy(keep_label=False)
    centroid.attributes[0] = 5.0
    assert record.attributes[0] == 1.0
    assert centroid.label is None


def test_registry_keeps_first_seen_order_and_skips_none():
    registry = ClassRegistry()
    for label in ["b", "a", None, "b", "c"]:
        registry.add(label)
    assert registry.labels == ["b", "a", "c"]
    assert len(registry) == 3
    assert "a" in registry
    assert None not in registry


def test_registry_from_records():
    records = [Record([0.0], "x"), Record([1.0], "y"), Record([2.0], "x")]
    assert ClassRegistry.from_records(records).labels == ["x", "y"]


def test_cluster_majority_label_tie_goes_to_first_seen():
    cluster = Cluster(Record([0.0]), [Record([0.0], "b"), Record([1.0], "a")])
    assert cluster.majority_label() == "b"
    assert Cluster(Record([0.0])).majority_label() is None


def test_equal_length_check():
    records = [Record([1.0, 2.0]), Record([3.0, 4.0])]
    assert check_equal_lengths(records) == 2
    assert records_to_matrix(records).shape == (2, 2)
    with pytest.raises(DimensionMismatchError):
        check_equal_lengths(records + [Record([1.0])])
