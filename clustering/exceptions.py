"""Error types raised by the incident clustering pipeline."""


class ClusteringError(Exception):
    """Base class for all clustering pipeline errors"""


class MalformedInputError(ClusteringError):
    """A coordinate field could not be parsed as a finite real number"""

    def __init__(self, row: int, column: str, value):
        self.row = row
        self.column = column
        self.value = value
        super().__init__(f"Row {row}: column '{column}' has non-numeric value {value!r}")


class InsufficientDataError(ClusteringError):
    """Fewer distinct points are available than requested clusters"""

    def __init__(self, requested_k: int, distinct_points: int):
        self.requested_k = requested_k
        self.distinct_points = distinct_points
        super().__init__(
            f"Cannot build {requested_k} clusters from {distinct_points} distinct points"
        )


class EmptyClusterError(ClusteringError):
    """A cluster received no members during an assignment pass"""

    def __init__(self, cluster_index: int = None, iteration: int = None):
        self.cluster_index = cluster_index
        self.iteration = iteration
        if cluster_index is None:
            message = "Cannot average an empty group of points"
        else:
            message = f"Cluster {cluster_index} is empty after assignment pass {iteration}"
        super().__init__(message)


class ConvergenceError(ClusteringError):
    """The iteration cap was reached before centroids settled"""

    def __init__(self, iterations: int):
        self.iterations = iterations
        super().__init__(f"Centroids did not converge within {iterations} iterations")
