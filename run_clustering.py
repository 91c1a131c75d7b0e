#!/usr/bin/env python3
"""
Incident Hotspot Clustering Script
Clusters geolocated incident records and reports the dominant weapon and race per cluster
"""

import sys
import os
import argparse
import logging
from datetime import datetime

# Add project root to path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from clustering.clustering import run_clustering_analysis, describe_spread, setup_logging
from clustering.exceptions import ClusteringError
from config import CLUSTERING_CONFIG, EMPTY_CLUSTER_POLICIES, FILE_PATTERNS, PROCESSED_DATA_DIR

def default_plot_path() -> str:
    """Timestamped plot file in the processed data directory"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return str(PROCESSED_DATA_DIR / FILE_PATTERNS["cluster_plot"].format(timestamp=timestamp))

def run_pipeline(args) -> bool:
    """Run clustering and print one summary line per cluster"""
    logger = logging.getLogger(__name__)

    start_time = datetime.now()
    logger.info("Starting incident clustering...")

    plot_path = args.plot
    if plot_path == "":
        plot_path = default_plot_path()

    try:
        results = run_clustering_analysis(
            data_path=args.data,
            n_clusters=args.k,
            random_state=args.seed,
            max_iterations=args.max_iterations,
            tolerance=args.tolerance,
            empty_cluster_policy=args.empty_cluster_policy,
            export=args.export,
            plot_path=plot_path
        )
    except ClusteringError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return False
    except (OSError, ValueError) as e:
        logger.error(f"Error during clustering: {str(e)}")
        return False

    if not results["converged"]:
        logger.warning(f"Result is from an unconverged run ({results['iterations']} iterations)")

    for line in results["summary_lines"]:
        print(line)

    if args.spread:
        spread = describe_spread([p for group in results["result"].clusters for p in group])
        logger.info(f"Pairwise distance spread: {spread}")

    evaluation = results["evaluation"]
    if evaluation["silhouette_score"] is not None:
        logger.info(f"Silhouette score: {evaluation['silhouette_score']:.3f}")
    logger.info(f"Inertia: {evaluation['inertia']:.6f}")

    logger.info(f"Total duration: {datetime.now() - start_time}")
    return True

def main():
    """Main function"""
    parser = argparse.ArgumentParser(
        description="Cluster geolocated incidents and report dominant weapon and race per cluster"
    )

    parser.add_argument(
        "--data",
        default=None,
        help="Path to the incident CSV (defaults to the raw data directory)"
    )

    parser.add_argument(
        "--k",
        type=int,
        default=CLUSTERING_CONFIG["n_clusters"],
        help="Number of clusters"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for centroid initialization"
    )

    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Upper bound on assignment/recompute passes"
    )

    parser.add_argument(
        "--tolerance",
        type=float,
        default=None,
        help="Largest centroid shift still counted as converged (0 means exact)"
    )

    parser.add_argument(
        "--empty-cluster-policy",
        choices=EMPTY_CLUSTER_POLICIES,
        default=None,
        help="What to do when a cluster receives no incidents"
    )

    parser.add_argument(
        "--export",
        action="store_true",
        help="Export cluster results as JSON to the processed data directory"
    )

    parser.add_argument(
        "--plot",
        nargs="?",
        const="",
        default=None,
        help="Save a scatter plot of the clusters (to the processed data directory when no path is given)"
    )

    parser.add_argument(
        "--spread",
        action="store_true",
        help="Log pairwise distance statistics (quadratic in the number of incidents)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    try:
        success = run_pipeline(args)

        if success:
            logger.info("Operation completed successfully!")
            sys.exit(0)
        else:
            logger.error("Operation failed!")
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Operation interrupted by user")
        sys.exit(1)

if __name__ == "__main__":
    main()
