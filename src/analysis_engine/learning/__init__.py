"""Unsupervised learning primitives: K-means and Isolation Forest."""

from .isolation_forest import (
    IsolationForestDetector,
    IsolationTree,
    average_path_length,
    build_isolation_tree,
)
from .kmeans import Cluster, ClusteringResult, KMeansClusterer
from .profiles import (
    AnomalyFlag,
    ProfileCluster,
    cluster_profiles,
    features_from_frame,
    flag_anomalies,
    score_entities,
)

__all__ = [
    "IsolationForestDetector",
    "IsolationTree",
    "average_path_length",
    "build_isolation_tree",
    "Cluster",
    "ClusteringResult",
    "KMeansClusterer",
    "AnomalyFlag",
    "ProfileCluster",
    "cluster_profiles",
    "features_from_frame",
    "flag_anomalies",
    "score_entities",
]
