import pytest

from utils.errors import FormatError
from utils.parser import load_records
from utils.records import ClassRegistry

IRIS_SAMPLE = """@relation iris
@attribute sepallength numeric
@attribute sepalwidth numeric
@attribute class {Iris-setosa,Iris-versicolor}
@data
5.1,3.5,Iris-setosa
4.9,3.0,Iris-setosa
7.0,3.2,Iris-versicolor
"""


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_load_records_builds_registry(tmp_path):
    records, registry = load_records(write(tmp_path, "iris.arff", IRIS_SAMPLE))

    assert len(records) == 3
    assert list(records[0].attributes) == [5.1, 3.5]
    assert [r.label for r in records] == ["Iris-setosa", "Iris-setosa", "Iris-versicolor"]
    assert registry.labels == ["Iris-setosa", "Iris-versicolor"]


def test_registry_is_shared_between_files(tmp_path):
    registry = ClassRegistry(["Iris-virginica"])
    _, registry = load_records(write(tmp_path, "iris.arff", IRIS_SAMPLE), registry=registry)
    assert registry.labels == ["Iris-virginica", "Iris-setosa", "Iris-versicolor"]


def test_missing_file_raises():
    with pytest.raises(FileNotFoundError):
        load_records("does/not/exist.arff")


def test_missing_attribute_value_is_a_format_error(tmp_path):
    text = IRIS_SAMPLE.replace("4.9,3.0", "4.9,?")
    with pytest.raises(FormatError):
        load_records(write(tmp_path, "missing.arff", text))


def test_nominal_attribute_is_a_format_error(tmp_path):
    text = """@relation toy
@attribute colour {red,blue}
@attribute class {a,b}
@data
red,a
blue,b
"""
    with pytest.raises(FormatError):
        load_records(write(tmp_path, "nominal.arff", text))
