"""
Utilities package initialization.

Exposes the record data model, the exception taxonomy, parsing,
normalization and cluster quality functions for cleaner imports throughout
the project.
"""

from .errors import (
    ConfigurationError,
    DimensionMismatchError,
    NumericError,
    FormatError
)

from .records import (
    Record,
    ClassRegistry,
    Cluster,
    ClusteringResult
)

from .distance import (
    METRICS,
    get_metric,
    euclidean_distance,
    cosine_distance
)

from .parser import (
    load_arff,
    load_records,
    records_from_dataframe
)

from .normalization import (
    min_max_normalize,
    scaled_min_max_normalize,
    z_score_normalize
)

from .clustering_metrics import (
    entropy,
    wss,
    bss,
    compute_clustering_metrics,
    cluster_quality_table,
    purity_score
)
