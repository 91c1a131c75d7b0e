import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = Path(os.getenv("INCIDENT_DATA_DIR", PROJECT_ROOT / "data"))
RAW_DATA_DIR = DATA_DIR / "raw"
PROCESSED_DATA_DIR = DATA_DIR / "processed"

# Input dataset (Washington Post fatal police shootings, v2 schema)
INPUT_CONFIG = {
    "filename": "fatal-police-shootings-data.csv",
    "lat_column": "latitude",
    "lon_column": "longitude",
    "weapon_column": "armed_with",
    "race_column": "race"
}

# Clustering parameters
CLUSTERING_CONFIG = {
    "n_clusters": 6,
    "max_iterations": 300,
    "tolerance": 0.0,  # exact centroid equality
    "empty_cluster_policy": "freeze",  # freeze | reseed | error
    "random_state": None
}

EMPTY_CLUSTER_POLICIES = ("freeze", "reseed", "error")

# File naming conventions
FILE_PATTERNS = {
    "cluster_results": "clusters_kmeans_{timestamp}.json",
    "cluster_plot": "clusters_kmeans_{timestamp}.png"
}

# Logging
LOG_FILE = "clustering.log"

# Ensure directories exist
for directory in [RAW_DATA_DIR, PROCESSED_DATA_DIR]:
    directory.mkdir(parents=True, exist_ok=True)
