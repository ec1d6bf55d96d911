"""
Attribute normalization passes for train/test record sets.

Every pass learns its statistics on the training records only and then
rewrites the attribute vectors of both sets in place with the same
parameters, so test records are transformed exactly like training records.

- min_max_normalize: (x - min) / (max - min), per attribute.
- scaled_min_max_normalize: same formula with fixed bounds shared by all
  attributes (the gene-expression data is clipped to [20, 16000]).
- z_score_normalize: (x - mean) / std with the sample standard deviation.

Constant attributes map to 0.5 (min-max variants) or 0.0 (z-score).
"""

from typing import Dict, Optional, Sequence

import numpy as np

from .errors import ConfigurationError
from .records import Record, records_to_matrix

SCALED_MIN = 20.0
SCALED_MAX = 16000.0


def _check_sets(train: Sequence[Record], test: Optional[Sequence[Record]]) -> int:
    if len(train) == 0:
        raise ConfigurationError("Normalization needs at least one training record.")
    n_features = records_to_matrix(train).shape[1]
    if test:
        records_to_matrix(list(train[:1]) + list(test))
    return n_features


def _apply(records: Optional[Sequence[Record]], offset: np.ndarray, scale: np.ndarray,
           constant: np.ndarray, fill: float) -> None:
    if not records:
        return
    for record in records:
        values = (record.attributes - offset) / np.where(constant, 1.0, scale)
        values[constant] = fill
        record.attributes[:] = values


def min_max_normalize(train: Sequence[Record],
                      test: Optional[Sequence[Record]] = None) -> Dict[str, np.ndarray]:
    """
    Rescale every attribute to [0, 1] using the training min and max.

    Test values outside the training range land outside [0, 1].

    Returns
    -------
    Dict[str, np.ndarray]
        'min' and 'max' per attribute.
    """
    _check_sets(train, test)
    X = records_to_matrix(train)
    col_min = X.min(axis=0)
    col_max = X.max(axis=0)
    value_range = col_max - col_min
    constant = value_range == 0

    _apply(train, col_min, value_range, constant, 0.5)
    _apply(test, col_min, value_range, constant, 0.5)
    return {"min": col_min, "max": col_max}


def scaled_min_max_normalize(train: Sequence[Record],
                             test: Optional[Sequence[Record]] = None,
                             lower: float = SCALED_MIN,
                             upper: float = SCALED_MAX) -> Dict[str, float]:
    """
    Min-max scaling with fixed bounds instead of per-attribute statistics.

    Returns
    -------
    Dict[str, float]
        The 'min' and 'max' bounds used.
    """
    n_features = _check_sets(train, test)
    if upper < lower:
        raise ConfigurationError(f"upper ({upper}) must not be below lower ({lower}).")

    offset = np.full(n_features, float(lower))
    value_range = np.full(n_features, float(upper - lower))
    constant = value_range == 0

    _apply(train, offset, value_range, constant, 0.5)
    _apply(test, offset, value_range, constant, 0.5)
    return {"min": float(lower), "max": float(upper)}


def z_score_normalize(train: Sequence[Record],
                      test: Optional[Sequence[Record]] = None) -> Dict[str, np.ndarray]:
    """
    Standardize every attribute with the training mean and sample std.

    A single training record has no sample std; all its attributes are
    treated as constant.

    Returns
    -------
    Dict[str, np.ndarray]
        'mean' and 'std' per attribute.
    """
    _check_sets(train, test)
    X = records_to_matrix(train)
    mean = X.mean(axis=0)
    if X.shape[0] > 1:
        std = X.std(axis=0, ddof=1)
    else:
        std = np.zeros(X.shape[1])
    constant = std == 0

    _apply(train, mean, std, constant, 0.0)
    _apply(test, mean, std, constant, 0.0)
    return {"mean": mean, "std": std}


NORMALIZERS = {
    "min_max": min_max_normalize,
    "scaled_min_max": scaled_min_max_normalize,
    "z_score": z_score_normalize,
}
