import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple
from scipy.spatial.distance import cdist

from .exceptions import EmptyClusterError

@dataclass(frozen=True)
class IncidentPoint:
    lat: float
    lon: float
    weapon: str = ""
    race: str = ""

    def distance(self, other: "IncidentPoint") -> float:
        """Euclidean distance in the (lat, lon) plane"""
        return float(np.sqrt((self.lon - other.lon)**2 + (self.lat - other.lat)**2))

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.lat, self.lon)

def distance(a: IncidentPoint, b: IncidentPoint) -> float:
    return a.distance(b)

def average_point(points: Sequence[IncidentPoint]) -> IncidentPoint:
    """Componentwise mean of a group; the result carries no labels"""
    if len(points) == 0:
        raise EmptyClusterError()

    coords = np.array([p.coordinates for p in points], dtype=float)
    lat, lon = coords.mean(axis=0)
    return IncidentPoint(float(lat), float(lon))

def coordinate_array(points: Sequence[IncidentPoint]) -> np.ndarray:
    """Stack points into an (N, 2) array of [lat, lon]"""
    if len(points) == 0:
        return np.empty((0, 2))
    return np.array([p.coordinates for p in points], dtype=float)

class DistanceIndex:
    """Dense pairwise distance matrix over a fixed, ordered set of points.

    Built once and read-only afterwards. The clustering loop never consults
    it; it exists for inspecting how spread out a dataset is.
    """

    def __init__(self, points: Sequence[IncidentPoint]):
        self.points = list(points)
        coords = coordinate_array(self.points)
        matrix = cdist(coords, coords, metric="euclidean")
        np.fill_diagonal(matrix, 0.0)
        matrix.setflags(write=False)
        self.matrix = matrix

    def __len__(self) -> int:
        return len(self.points)

    def distance(self, i: int, j: int) -> float:
        return float(self.matrix[i, j])

    def nearest_neighbours(self, i: int, n: int = 1) -> List[int]:
        """Indices of the n closest other points, ties broken by index"""
        row = self.matrix[i]
        order = np.lexsort((np.arange(len(row)), row))
        return [int(j) for j in order if j != i][:n]

    def summary(self) -> Dict[str, float]:
        if len(self.points) < 2:
            return {"min_distance": 0.0, "mean_distance": 0.0, "max_distance": 0.0}

        upper = self.matrix[np.triu_indices(len(self.points), k=1)]
        return {
            "min_distance": float(upper.min()),
            "mean_distance": float(upper.mean()),
            "max_distance": float(upper.max())
        }
