"""
Incident clustering pipeline: load the incident CSV, run k-means over the
incident coordinates and report the dominant weapon and race per cluster.
"""

import sys
import logging
from pathlib import Path
from typing import Any, Dict, List

from config import CLUSTERING_CONFIG, LOG_FILE
from .kmeans_engine import ClusterEngine, ClusteringResult
from .points import DistanceIndex, IncidentPoint

logger = logging.getLogger(__name__)

def setup_logging(log_level=logging.INFO, log_file: str = LOG_FILE):
    """Setup logging configuration"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    return logging.getLogger(__name__)

def run_kmeans_clustering(points: List[IncidentPoint], n_clusters: int = None,
                          random_state=None, max_iterations: int = None,
                          tolerance: float = None,
                          empty_cluster_policy: str = None) -> ClusteringResult:
    """Cluster incident points with the configured k-means engine"""
    if n_clusters is None:
        n_clusters = CLUSTERING_CONFIG["n_clusters"]

    engine = ClusterEngine(
        max_iterations=max_iterations,
        tolerance=tolerance,
        empty_cluster_policy=empty_cluster_policy,
        random_state=random_state
    )

    logger.info(f"Clustering {len(points)} incidents into {n_clusters} clusters")
    result = engine.fit(points, n_clusters)
    logger.info(f"Cluster sizes: {result.sizes}")

    return result

def describe_spread(points: List[IncidentPoint]) -> Dict[str, float]:
    """Pairwise distance statistics for a set of incidents"""
    return DistanceIndex(points).summary()

def run_clustering_analysis(data_path: Path = None, n_clusters: int = None,
                            random_state=None, max_iterations: int = None,
                            tolerance: float = None, empty_cluster_policy: str = None,
                            export: bool = False, plot_path: str = None,
                            output_dir: Path = None) -> Dict[str, Any]:
    """Run the complete load -> cluster -> report pipeline"""
    from src.data.preprocessing import IncidentDataPreprocessor
    from reporting.cluster_report import ClusterReporter

    preprocessor = IncidentDataPreprocessor()
    points = preprocessor.process_incident_data(data_path)

    result = run_kmeans_clustering(
        points,
        n_clusters=n_clusters,
        random_state=random_state,
        max_iterations=max_iterations,
        tolerance=tolerance,
        empty_cluster_policy=empty_cluster_policy
    )

    reporter = ClusterReporter(output_dir)
    summaries = reporter.summarize(result.clusters)
    evaluation = reporter.evaluate_partition(result.clusters)

    results = {
        "method": "kmeans",
        "n_points": len(points),
        "dropped_records": preprocessor.dropped_rows,
        "iterations": result.iterations,
        "converged": result.converged,
        "empty_cluster_events": result.empty_cluster_events,
        "clusters": summaries,
        "summary_lines": [reporter.format_line(summary) for summary in summaries],
        "evaluation": evaluation,
        "result": result
    }

    if export:
        run_info = {key: results[key] for key in
                    ("method", "n_points", "dropped_records", "iterations",
                     "converged", "empty_cluster_events")}
        results["export_path"] = reporter.export_cluster_results(summaries, evaluation, run_info)

    if plot_path:
        reporter.create_cluster_visualization(result.clusters, result.centroids, save_path=plot_path)
        results["plot_path"] = str(plot_path)

    return results
