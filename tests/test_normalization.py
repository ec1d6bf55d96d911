import numpy as np
import pytest

from utils.errors import ConfigurationError
from utils.normalization import min_max_normalize, scaled_min_max_normalize, z_score_normalize
from utils.records import Record


def make_sets():
    train = [Record([0.0, 5.0, 3.0], "a"), Record([10.0, 5.0, 1.0], "b"), Record([5.0, 5.0, 2.0], "a")]
    test = [Record([20.0, 7.0, 2.0], "b")]
    return train, test


def test_min_max_uses_training_statistics_only():
    train, test = make_sets()
    params = min_max_normalize(train, test)

    np.testing.assert_allclose(params["min"], [0.0, 5.0, 1.0])
    np.testing.assert_allclose(params["max"], [10.0, 5.0, 3.0])
    np.testing.assert_allclose(train[0].attributes, [0.0, 0.5, 1.0])
    np.testing.assert_allclose(train[1].attributes, [1.0, 0.5, 0.0])
    # Outside the training range, and the constant attribute maps to 0.5
    np.testing.assert_allclose(test[0].attributes, [2.0, 0.5, 0.5])


def test_scaled_min_max_uses_fixed_bounds():
    train = [Record([20.0, 16000.0]), Record([8010.0, 20.0])]
    params = scaled_min_max_normalize(train)
    assert params == {"min": 20.0, "max": 16000.0}
    np.testing.assert_allclose(train[0].attributes, [0.0, 1.0])
    np.testing.assert_allclose(train[1].attributes, [0.5, 0.0])


def test_scaled_min_max_rejects_inverted_bounds():
    train, test = make_sets()
    with pytest.raises(ConfigurationError):
        scaled_min_max_normalize(train, test, lower=10.0, upper=1.0)


def test_z_score_standardizes_train_and_reuses_parameters():
    train, test = make_sets()
    params = z_score_normalize(train, test)

    X = np.vstack([r.attributes for r in train])
    np.testing.assert_allclose(X[:, 0].mean(), 0.0, atol=1e-12)
    np.testing.assert_allclose(X[:, 0].std(ddof=1), 1.0)
    np.testing.assert_allclose(X[:, 1], 0.0)
    assert params["std"][1] == 0.0
    assert test[0].attributes[0] == pytest.approx((20.0 - 5.0) / 5.0)


def test_single_training_record_is_constant_under_z_score():
    train = [Record([3.0, 4.0])]
    z_score_normalize(train)
    np.testing.assert_array_equal(train[0].attributes, [0.0, 0.0])


def test_empty_training_set_rejected():
    with pytest.raises(ConfigurationError):
        min_max_normalize([], [Record([1.0])])
