"""
Exception taxonomy shared by the clustering and classification code.

ConfigurationError and DimensionMismatchError are raised before any expensive
work starts. NumericError aborts a run and carries enough context (record and
centroid indices) to diagnose it. Non-convergence of K-Means is not an error:
it is reported through the `converged` flag of the result.
"""


class ConfigurationError(ValueError):
    """Invalid parameters, e.g. k larger than the dataset or an empty pool."""


class DimensionMismatchError(ValueError):
    """Two attribute vectors of different length reached a distance metric."""


class NumericError(ArithmeticError):
    """A NaN/Inf distance or a zero-magnitude vector under cosine distance."""


class FormatError(ValueError):
    """The input file could not be turned into numeric records."""
