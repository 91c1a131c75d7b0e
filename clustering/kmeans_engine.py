"""
K-means engine for incident points.

Centroids start at k distinct input points drawn at random, then the engine
alternates nearest-centroid assignment with centroid recomputation until no
centroid moves by more than the configured tolerance.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from config import CLUSTERING_CONFIG, EMPTY_CLUSTER_POLICIES
from .exceptions import ConvergenceError, EmptyClusterError, InsufficientDataError
from .points import IncidentPoint, average_point, coordinate_array

logger = logging.getLogger(__name__)

Partition = List[List[IncidentPoint]]
Initializer = Callable[[List[IncidentPoint], int, np.random.Generator], Sequence[IncidentPoint]]

def random_distinct_centroids(distinct_points: List[IncidentPoint], k: int,
                              rng: np.random.Generator) -> List[IncidentPoint]:
    """Draw k distinct points uniformly at random without replacement"""
    indices = rng.choice(len(distinct_points), size=k, replace=False)
    return [distinct_points[i] for i in indices]

@dataclass
class ClusteringResult:
    clusters: Partition
    centroids: List[IncidentPoint]
    labels: List[int]
    iterations: int
    converged: bool
    empty_cluster_events: int = 0
    initial_centroids: List[IncidentPoint] = field(default_factory=list)

    @property
    def n_clusters(self) -> int:
        return len(self.clusters)

    @property
    def sizes(self) -> List[int]:
        return [len(cluster) for cluster in self.clusters]

class ClusterEngine:
    def __init__(self, max_iterations: int = None, tolerance: float = None,
                 empty_cluster_policy: str = None, random_state=None,
                 initializer: Optional[Initializer] = None, strict: bool = False):
        if max_iterations is None:
            max_iterations = CLUSTERING_CONFIG["max_iterations"]
        if tolerance is None:
            tolerance = CLUSTERING_CONFIG["tolerance"]
        if empty_cluster_policy is None:
            empty_cluster_policy = CLUSTERING_CONFIG["empty_cluster_policy"]
        if random_state is None:
            random_state = CLUSTERING_CONFIG["random_state"]

        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        if tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {tolerance}")
        if empty_cluster_policy not in EMPTY_CLUSTER_POLICIES:
            raise ValueError(
                f"Unknown empty cluster policy '{empty_cluster_policy}', "
                f"expected one of {', '.join(EMPTY_CLUSTER_POLICIES)}"
            )

        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.empty_cluster_policy = empty_cluster_policy
        self.rng = np.random.default_rng(random_state)
        self.initializer = initializer or random_distinct_centroids
        self.strict = strict

    def run(self, points: Sequence[IncidentPoint], k: int) -> Partition:
        """Cluster points into k groups and return the groups by cluster index"""
        return self.fit(points, k).clusters

    def fit(self, points: Sequence[IncidentPoint], k: int) -> ClusteringResult:
        """Run the full clustering loop and keep the run's bookkeeping"""
        points = list(points)
        centroids = self.initialize_centroids(points, k)
        initial_centroids = list(centroids)
        coords = coordinate_array(points)

        iteration = 0
        empty_events = 0
        converged = False

        while True:
            iteration += 1
            labels = self.assign_labels(coords, centroids)
            partition = self.build_partition(points, labels, k)
            new_centroids, empties = self.recompute_centroids(partition, centroids, points, iteration)
            empty_events += empties

            shift = max(old.distance(new) for old, new in zip(centroids, new_centroids))
            logger.debug(f"Iteration {iteration}: sizes={[len(c) for c in partition]}, max shift={shift:.3e}")

            converged = self.has_converged(centroids, new_centroids)
            centroids = new_centroids

            if converged:
                break
            if iteration >= self.max_iterations:
                if self.strict:
                    raise ConvergenceError(iteration)
                logger.warning(
                    f"Stopped after {iteration} iterations without convergence "
                    f"(last max shift {shift:.3e})"
                )
                break

        if converged:
            logger.info(f"Converged after {iteration} iterations with {k} clusters")

        return ClusteringResult(
            clusters=partition,
            centroids=centroids,
            labels=[int(label) for label in labels],
            iterations=iteration,
            converged=converged,
            empty_cluster_events=empty_events,
            initial_centroids=initial_centroids
        )

    def initialize_centroids(self, points: Sequence[IncidentPoint], k: int) -> List[IncidentPoint]:
        """Pick k distinct input points as the starting centroids"""
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
            raise ValueError(f"Number of clusters must be a positive integer, got {k!r}")

        distinct_points = list(dict.fromkeys(points))
        if len(distinct_points) < k:
            raise InsufficientDataError(k, len(distinct_points))

        centroids = list(self.initializer(distinct_points, k, self.rng))
        if len(centroids) != k:
            raise ValueError(f"Initializer returned {len(centroids)} centroids, expected {k}")
        if len(set(centroids)) != k:
            raise ValueError("Initializer returned duplicate centroids")

        logger.debug(f"Initial centroids: {[c.coordinates for c in centroids]}")
        return centroids

    def assign_labels(self, coords: np.ndarray, centroids: Sequence[IncidentPoint]) -> np.ndarray:
        """Index of the nearest centroid for every row of coords.

        argmin keeps the first minimum, so ties go to the lowest cluster index.
        """
        centers = coordinate_array(centroids)
        d_lat = coords[:, np.newaxis, 0] - centers[np.newaxis, :, 0]
        d_lon = coords[:, np.newaxis, 1] - centers[np.newaxis, :, 1]
        distances = np.sqrt(d_lon**2 + d_lat**2)
        return np.argmin(distances, axis=1)

    def build_partition(self, points: Sequence[IncidentPoint], labels: np.ndarray, k: int) -> Partition:
        partition = [[] for _ in range(k)]
        for point, label in zip(points, labels):
            partition[label].append(point)
        return partition

    def recompute_centroids(self, partition: Partition, centroids: Sequence[IncidentPoint],
                            points: Sequence[IncidentPoint], iteration: int) -> Tuple[List[IncidentPoint], int]:
        """Mean of each cluster; empty clusters are handled by the configured policy"""
        new_centroids = [average_point(members) if members else None for members in partition]
        empty_indices = [index for index, members in enumerate(partition) if not members]

        for index in empty_indices:
            if self.empty_cluster_policy == "error":
                raise EmptyClusterError(index, iteration)

            logger.warning(
                f"Cluster {index} is empty after pass {iteration}; "
                f"applying '{self.empty_cluster_policy}' policy"
            )
            if self.empty_cluster_policy == "reseed":
                taken = list(centroids) + [c for c in new_centroids if c is not None]
                new_centroids[index] = self._reseed_centroid(index, centroids, taken, points)
            else:
                frozen = centroids[index]
                new_centroids[index] = IncidentPoint(frozen.lat, frozen.lon)

        return new_centroids, len(empty_indices)

    def _reseed_centroid(self, index: int, centroids: Sequence[IncidentPoint],
                         taken: Sequence[IncidentPoint],
                         points: Sequence[IncidentPoint]) -> IncidentPoint:
        """Move an empty cluster onto a random point that is not already any centroid"""
        taken_coordinates = {c.coordinates for c in taken}
        candidates = list(dict.fromkeys(p for p in points if p.coordinates not in taken_coordinates))
        if not candidates:
            logger.warning(f"No free point to reseed cluster {index}; keeping its centroid")
            frozen = centroids[index]
            return IncidentPoint(frozen.lat, frozen.lon)

        choice = candidates[int(self.rng.integers(len(candidates)))]
        return IncidentPoint(choice.lat, choice.lon)

    def has_converged(self, old_centroids: Sequence[IncidentPoint],
                      new_centroids: Sequence[IncidentPoint]) -> bool:
        return all(
            old.distance(new) <= self.tolerance
            for old, new in zip(old_centroids, new_centroids)
        )
