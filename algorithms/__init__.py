"""
Algorithms Package.

Own-code implementations of the clustering and classification algorithms.
Distance metrics live in `utils.distance` and are injected by name.

Modules
-------
- kmeans: Standard K-Means (Lloyd's Algorithm) over labeled records.
- knn: Inverse-distance-weighted k-nearest-neighbors classifier.
"""

from .kmeans import KMeans
from .knn import KNNClassifier
