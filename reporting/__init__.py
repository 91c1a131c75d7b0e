"""
Reporting for incident clusters: per-cluster weapon/race modes, quality
scores, JSON export and plots.
"""

from .cluster_report import (
    ClusterReporter,
    category_counts,
    most_frequent
)

__all__ = [
    "ClusterReporter",
    "category_counts",
    "most_frequent"
]
