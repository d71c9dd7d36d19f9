"""
Behavioural profile helpers.

Adapters between the feature extractor's output (entity id -> equal-length
vector, or a DataFrame of the same) and the clustering / anomaly primitives.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..config import settings
from .isolation_forest import IsolationForestDetector
from .kmeans import KMeansClusterer, RandomState

logger = logging.getLogger(__name__)

FeatureMap = Mapping[str, Sequence[float]]


@dataclass
class ProfileCluster:
    """A group of entities with similar behaviour."""
    cluster_id: int
    centroid: List[float]
    members: List[str]
    inertia: float


@dataclass
class AnomalyFlag:
    """An entity whose anomaly score is above the caller's threshold."""
    entity_id: str
    score: float


def features_from_frame(df: pd.DataFrame, id_column: Optional[str] = None) -> Dict[str, List[float]]:
    """
    Convert a feature DataFrame to an entity id -> vector mapping.

    Args:
        df: One row per entity, numeric feature columns
        id_column: Column holding entity ids; the index is used when omitted

    Returns:
        Dict of entity id to feature list, in row order
    """
    if id_column is not None:
        ids = df[id_column].astype(str).tolist()
        values = df.drop(columns=[id_column])
    else:
        ids = df.index.astype(str).tolist()
        values = df
    matrix = values.to_numpy(dtype=float)
    return {entity_id: row.tolist() for entity_id, row in zip(ids, matrix)}


def _as_matrix(features: FeatureMap) -> Tuple[List[str], np.ndarray]:
    ids = list(features.keys())
    return ids, np.asarray([features[i] for i in ids], dtype=float)


def cluster_profiles(
    features: FeatureMap,
    k: int,
    random_state: RandomState = None,
    clusterer: Optional[KMeansClusterer] = None,
) -> List[ProfileCluster]:
    """Group entities with K-means; empty list for empty input or k <= 0."""
    if not features:
        return []
    ids, X = _as_matrix(features)
    clusterer = clusterer or KMeansClusterer(k, random_state=random_state)
    clusters = clusterer.cluster(X)
    return [
        ProfileCluster(
            cluster_id=i,
            centroid=c.centroid,
            members=[ids[idx] for idx in c.member_indices],
            inertia=c.inertia,
        )
        for i, c in enumerate(clusters)
    ]


def score_entities(
    features: FeatureMap,
    detector: Optional[IsolationForestDetector] = None,
) -> Dict[str, float]:
    """Fit an isolation forest on all entities and score each of them."""
    if not features:
        return {}
    ids, X = _as_matrix(features)
    detector = detector or IsolationForestDetector()
    scores = detector.fit_score(X)
    return {entity_id: float(s) for entity_id, s in zip(ids, scores)}


def flag_anomalies(
    features: FeatureMap,
    threshold: Optional[float] = None,
    detector: Optional[IsolationForestDetector] = None,
) -> List[AnomalyFlag]:
    """
    Entities scoring above ``threshold``, most anomalous first.

    The threshold defaults to ``settings.forest.anomaly_threshold`` (0.7).
    """
    if threshold is None:
        threshold = settings.forest.anomaly_threshold
    scores = score_entities(features, detector)
    flags = [AnomalyFlag(entity_id=e, score=s) for e, s in scores.items() if s > threshold]
    flags.sort(key=lambda f: f.score, reverse=True)
    if flags:
        logger.info(f"Flagged {len(flags)} of {len(scores)} entities above {threshold}")
    return flags
