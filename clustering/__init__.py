"""
Spatial Clustering Module for Incident Hotspot Mapping

Groups geolocated incident records into a fixed number of clusters with an
iterative k-means engine seeded from distinct random incidents.

Main Components:
- points.py: IncidentPoint record, centroid averaging and the pairwise DistanceIndex
- kmeans_engine.py: ClusterEngine (initialization, assignment, convergence)
- clustering.py: Pipeline glue and logging setup
- exceptions.py: Error types surfaced to callers

Usage:
    # As standalone script
    python run_clustering.py --data data/raw/fatal-police-shootings-data.csv --k 6

    # As imported module
    from clustering import ClusterEngine
    groups = ClusterEngine(random_state=42).run(points, k=6)
"""

from .exceptions import (
    ClusteringError,
    MalformedInputError,
    InsufficientDataError,
    EmptyClusterError,
    ConvergenceError
)

from .points import (
    IncidentPoint,
    DistanceIndex,
    distance,
    average_point
)

from .kmeans_engine import (
    ClusterEngine,
    ClusteringResult,
    random_distinct_centroids
)

from .clustering import (
    run_clustering_analysis,
    run_kmeans_clustering,
    describe_spread,
    setup_logging
)

__version__ = "1.0.0"

__all__ = [
    # Data model
    "IncidentPoint",
    "DistanceIndex",
    "distance",
    "average_point",

    # Engine
    "ClusterEngine",
    "ClusteringResult",
    "random_distinct_centroids",

    # Pipeline
    "run_clustering_analysis",
    "run_kmeans_clustering",
    "describe_spread",
    "setup_logging",

    # Errors
    "ClusteringError",
    "MalformedInputError",
    "InsufficientDataError",
    "EmptyClusterError",
    "ConvergenceError"
]
