import json
import logging
import numpy as np
from matplotlib.figure import Figure
import matplotlib.pyplot as plt
import seaborn as sns
import pandas as pd
from typing import Dict, List, Tuple, Any, Sequence
from pathlib import Path
from datetime import datetime
from sklearn.metrics import silhouette_score, calinski_harabasz_score, davies_bouldin_score

from config import CLUSTERING_CONFIG, PROCESSED_DATA_DIR, FILE_PATTERNS
from clustering.points import IncidentPoint, average_point, coordinate_array

logger = logging.getLogger(__name__)

Partition = Sequence[Sequence[IncidentPoint]]

def category_counts(group: Sequence[IncidentPoint], attribute: str) -> Dict[str, int]:
    """Label -> count, keyed in first-seen order"""
    counts = {}
    for point in group:
        label = getattr(point, attribute)
        counts[label] = counts.get(label, 0) + 1
    return counts

def most_frequent(counts: Dict[str, int]) -> Tuple[str, int]:
    """Label with the strictly greatest count; the earliest label wins ties"""
    best_label, best_count = "", 0
    for label, count in counts.items():
        if count > best_count:
            best_label, best_count = label, count
    return best_label, best_count

class ClusterReporter:
    def __init__(self, output_dir: Path = None):
        self.output_dir = Path(output_dir) if output_dir else PROCESSED_DATA_DIR
        self.summaries = []

    def summarize(self, partition: Partition) -> List[Dict[str, Any]]:
        """Per-cluster size, centre and most frequent weapon and race"""
        summaries = []

        for cluster_id, group in enumerate(partition):
            weapon_counts = category_counts(group, "weapon")
            race_counts = category_counts(group, "race")
            top_weapon = most_frequent(weapon_counts)
            top_race = most_frequent(race_counts)

            centroid = None
            if group:
                center = average_point(group)
                centroid = {"lat": center.lat, "lon": center.lon}

            summaries.append({
                "cluster_id": cluster_id,
                "size": len(group),
                "centroid": centroid,
                "top_weapon": {"label": top_weapon[0], "count": top_weapon[1]},
                "top_race": {"label": top_race[0], "count": top_race[1]},
                "weapon_counts": weapon_counts,
                "race_counts": race_counts
            })

        self.summaries = summaries
        return summaries

    @staticmethod
    def format_line(summary: Dict[str, Any]) -> str:
        weapon = summary["top_weapon"]
        race = summary["top_race"]
        return f"weapon:{weapon['label']}:{weapon['count']}, race:{race['label']}:{race['count']}"

    def format_lines(self, partition: Partition) -> List[str]:
        """One summary line per cluster, in partition order"""
        return [self.format_line(summary) for summary in self.summarize(partition)]

    def evaluate_partition(self, partition: Partition) -> Dict[str, Any]:
        """Within-cluster inertia plus scikit-learn quality scores where defined"""
        coords = []
        labels = []
        inertia = 0.0

        for cluster_id, group in enumerate(partition):
            if not group:
                continue
            group_coords = coordinate_array(group)
            center = group_coords.mean(axis=0)
            inertia += float(np.sum((group_coords - center)**2))
            coords.append(group_coords)
            labels.extend([cluster_id] * len(group))

        evaluation = {
            "n_clusters": len(partition),
            "non_empty_clusters": len(coords),
            "n_points": len(labels),
            "inertia": inertia,
            "silhouette_score": None,
            "calinski_harabasz_score": None,
            "davies_bouldin_score": None
        }

        n_labels = len(coords)
        if n_labels < 2 or len(labels) <= n_labels:
            logger.debug("Skipping cluster quality scores: need at least two clusters with spare points")
            return evaluation

        X = np.vstack(coords)
        y = np.array(labels)
        evaluation["silhouette_score"] = float(silhouette_score(X, y))
        evaluation["calinski_harabasz_score"] = float(calinski_harabasz_score(X, y))
        evaluation["davies_bouldin_score"] = float(davies_bouldin_score(X, y))

        return evaluation

    def to_dataframe(self, partition: Partition) -> pd.DataFrame:
        """Flatten a partition into one row per incident with its cluster id"""
        rows = [
            {"lat": p.lat, "lon": p.lon, "weapon": p.weapon, "race": p.race, "cluster": cluster_id}
            for cluster_id, group in enumerate(partition)
            for p in group
        ]
        return pd.DataFrame(rows, columns=["lat", "lon", "weapon", "race", "cluster"])

    def export_cluster_results(self, summaries: List[Dict[str, Any]],
                               evaluation: Dict[str, Any] = None,
                               run_info: Dict[str, Any] = None,
                               filename: str = None) -> str:
        """Export clustering results to JSON"""
        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = FILE_PATTERNS["cluster_results"].format(timestamp=timestamp)

        export_data = {
            "clusters": summaries,
            "summary_lines": [self.format_line(summary) for summary in summaries],
            "evaluation": evaluation or {},
            "run": run_info or {},
            "timestamp": datetime.now().isoformat(),
            "config": CLUSTERING_CONFIG
        }

        self.output_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.output_dir / filename
        with open(filepath, 'w') as f:
            json.dump(export_data, f, indent=2)

        logger.info(f"Cluster results exported to {filepath}")
        return str(filepath)

    def create_cluster_visualization(self, partition: Partition,
                                     centroids: Sequence[IncidentPoint] = None,
                                     save_path: str = None) -> Figure:
        """Scatter incidents by longitude/latitude, coloured by cluster"""
        df = self.to_dataframe(partition)

        fig, ax = plt.subplots(figsize=(12, 8))
        sns.scatterplot(data=df, x="lon", y="lat", hue="cluster", palette="viridis",
                        alpha=0.6, s=15, ax=ax, legend="full")

        if centroids:
            ax.scatter([c.lon for c in centroids], [c.lat for c in centroids],
                       marker="X", s=150, c="red", edgecolors="black", label="centroid")

        ax.set_title(f"K-means Incident Clusters (k={len(partition)})")
        ax.set_xlabel("Longitude")
        ax.set_ylabel("Latitude")
        fig.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=300, bbox_inches='tight')
            plt.close(fig)
            logger.info(f"Clustering visualization saved to {save_path}")

        return fig
