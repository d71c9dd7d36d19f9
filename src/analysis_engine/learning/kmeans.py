"""
K-means clustering (Lloyd's algorithm).

Centroids are initialized by sampling each coordinate uniformly inside the
bounding box of the data, not by picking data points. Results therefore vary
between runs unless a seed or ``numpy.random.Generator`` is injected through
``random_state``.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import numpy as np

from ..config import settings
from ..exceptions import ValidationError
from ..stats import squared_distances

logger = logging.getLogger(__name__)

RandomState = Union[None, int, np.random.Generator]


@dataclass
class Cluster:
    """One cluster of a clustering run."""
    centroid: List[float]
    member_indices: List[int]
    inertia: float  # sum of squared distances of members to the centroid

    @property
    def size(self) -> int:
        return len(self.member_indices)


@dataclass
class ClusteringResult:
    """Clusters plus convergence diagnostics."""
    clusters: List[Cluster] = field(default_factory=list)
    iterations: int = 0
    converged: bool = False
    inertia_history: List[float] = field(default_factory=list)

    @property
    def total_inertia(self) -> float:
        return float(sum(c.inertia for c in self.clusters))

    def labels(self, n_points: int) -> List[int]:
        """Cluster index of every point."""
        labels = [-1] * n_points
        for cluster_id, cluster in enumerate(self.clusters):
            for idx in cluster.member_indices:
                labels[idx] = cluster_id
        return labels


class KMeansClusterer:
    """
    Partition feature vectors into ``k`` clusters.

    Args:
        k: Number of clusters, fixed at construction
        max_iterations: Iteration cap (default 100)
        tolerance: Stop once no centroid moves farther than this (default 1e-4)
        n_init: Independent initializations; the lowest total inertia wins
        random_state: Seed or Generator for centroid initialization

    Raises:
        ValidationError: if max_iterations or n_init is below 1
    """

    def __init__(
        self,
        k: int,
        max_iterations: Optional[int] = None,
        tolerance: Optional[float] = None,
        n_init: Optional[int] = None,
        random_state: RandomState = None,
    ):
        self.k = k
        clustering = settings.clustering
        self.max_iterations = max_iterations if max_iterations is not None else clustering.max_iterations
        self.tolerance = tolerance if tolerance is not None else clustering.tolerance
        self.n_init = n_init if n_init is not None else clustering.n_init
        if self.max_iterations < 1 or self.n_init < 1:
            raise ValidationError(
                "max_iterations and n_init must be at least 1 "
                f"(got {self.max_iterations}, {self.n_init})"
            )
        self._rng = np.random.default_rng(random_state)

    def cluster(self, features: Sequence[Sequence[float]]) -> List[Cluster]:
        """Cluster features; empty list for empty input or k <= 0."""
        return self.fit(features).clusters

    def fit(self, features: Sequence[Sequence[float]]) -> ClusteringResult:
        """Cluster features and keep convergence diagnostics."""
        if len(features) == 0 or self.k <= 0:
            return ClusteringResult()

        X = np.asarray(features, dtype=float)
        best: Optional[ClusteringResult] = None
        for _ in range(self.n_init):
            result = self._run_once(X)
            if best is None or result.total_inertia < best.total_inertia:
                best = result

        logger.debug(
            f"K-means k={self.k} on {X.shape[0]} points: {best.iterations} iterations, "
            f"converged={best.converged}, inertia={best.total_inertia:.4f}"
        )
        return best

    def _initial_centroids(self, X: np.ndarray) -> np.ndarray:
        mins = X.min(axis=0)
        maxs = X.max(axis=0)
        return mins + self._rng.random((self.k, X.shape[1])) * (maxs - mins)

    def _run_once(self, X: np.ndarray) -> ClusteringResult:
        n_points = X.shape[0]
        centroids = self._initial_centroids(X)
        assignments: Optional[np.ndarray] = None
        history: List[float] = []
        converged = False
        iteration = 0

        while not converged and iteration < self.max_iterations:
            distances = squared_distances(X, centroids)
            # argmin keeps the first index on ties
            new_assignments = np.argmin(distances, axis=1)
            history.append(float(distances[np.arange(n_points), new_assignments].sum()))

            converged = assignments is not None and np.array_equal(new_assignments, assignments)
            assignments = new_assignments

            if not converged:
                new_centroids = centroids.copy()
                for i in range(self.k):
                    members = assignments == i
                    # Empty clusters keep their previous centroid
                    if members.any():
                        new_centroids[i] = X[members].mean(axis=0)

                max_movement = float(np.sqrt(np.sum((new_centroids - centroids) ** 2, axis=1)).max())
                centroids = new_centroids
                if max_movement < self.tolerance:
                    converged = True

            iteration += 1

        clusters = []
        for i in range(self.k):
            member_indices = np.flatnonzero(assignments == i)
            diff = X[member_indices] - centroids[i]
            clusters.append(Cluster(
                centroid=centroids[i].tolist(),
                member_indices=member_indices.tolist(),
                inertia=float(np.sum(diff * diff)),
            ))

        return ClusteringResult(
            clusters=clusters,
            iterations=iteration,
            converged=converged,
            inertia_history=history,
        )
