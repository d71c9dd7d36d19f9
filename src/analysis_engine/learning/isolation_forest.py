"""
Isolation Forest anomaly detection.

Each tree isolates points of a random subsample by splitting on a random
feature at a random value. Anomalies are isolated after few splits, so their
average path length is short:

    score(x) = 2 ** (-E[h(x)] / c(N))

where h(x) is the leaf depth plus c(leaf size), and c(n) is the expected path
length of an unsuccessful search in a random binary search tree. Scores near 1
are strong anomalies, about 0.5 typical points, well below 0.5 dense regions.

Trees are stored as flat node arrays addressed by integer index and built
with an explicit work stack, so depth is bounded by ``max_depth`` only.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from joblib import Parallel, delayed

from ..config import settings
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

EULER_GAMMA = 0.5772156649

RandomState = Union[None, int, np.random.Generator]


def average_path_length(n: int) -> float:
    """c(n): 0 for n <= 1, 1 for n == 2, else 2(ln(n-1) + γ) - 2(n-1)/n."""
    if n <= 1:
        return 0.0
    if n == 2:
        return 1.0
    return 2.0 * (math.log(n - 1) + EULER_GAMMA) - 2.0 * (n - 1) / n


@dataclass(frozen=True)
class IsolationTree:
    """
    Immutable isolation tree; node 0 is the root.

    Internal nodes use split_feature/split_value/left/right; leaves have
    left == right == -1. size and depth are recorded for every node.
    """
    is_leaf: Tuple[bool, ...]
    split_feature: Tuple[int, ...]
    split_value: Tuple[float, ...]
    left: Tuple[int, ...]
    right: Tuple[int, ...]
    size: Tuple[int, ...]
    depth: Tuple[int, ...]

    @property
    def n_nodes(self) -> int:
        return len(self.is_leaf)

    def leaf_for(self, point: Sequence[float]) -> int:
        node = 0
        while not self.is_leaf[node]:
            if point[self.split_feature[node]] < self.split_value[node]:
                node = self.left[node]
            else:
                node = self.right[node]
        return node

    def path_length(self, point: Sequence[float]) -> float:
        """Leaf depth plus the c(size) correction for the unbuilt subtree."""
        leaf = self.leaf_for(point)
        return self.depth[leaf] + average_path_length(self.size[leaf])

    def path_lengths(self, points: np.ndarray) -> np.ndarray:
        return np.array([self.path_length(p) for p in points], dtype=float)


def build_isolation_tree(data: np.ndarray, max_depth: int, rng: np.random.Generator) -> IsolationTree:
    """
    Grow one isolation tree over ``data`` (rows are points).

    A node becomes a leaf when it holds at most one point, reaches
    ``max_depth``, or the randomly chosen feature is constant on its points.
    """
    n_features = data.shape[1]
    is_leaf: List[bool] = [True]
    split_feature: List[int] = [-1]
    split_value: List[float] = [0.0]
    left: List[int] = [-1]
    right: List[int] = [-1]
    size: List[int] = [data.shape[0]]
    depth: List[int] = [0]

    def new_node(n_points: int, node_depth: int) -> int:
        is_leaf.append(True)
        split_feature.append(-1)
        split_value.append(0.0)
        left.append(-1)
        right.append(-1)
        size.append(n_points)
        depth.append(node_depth)
        return len(is_leaf) - 1

    stack = [(np.arange(data.shape[0]), 0)]
    while stack:
        indices, node = stack.pop()
        node_depth = depth[node]
        if indices.size <= 1 or node_depth >= max_depth:
            continue

        feature = int(rng.integers(n_features))
        column = data[indices, feature]
        lo = float(column.min())
        hi = float(column.max())
        if lo == hi:
            continue

        value = lo + float(rng.random()) * (hi - lo)
        if value <= lo:
            value = (lo + hi) / 2.0
        go_left = column < value

        left_id = new_node(int(go_left.sum()), node_depth + 1)
        right_id = new_node(int((~go_left).sum()), node_depth + 1)
        is_leaf[node] = False
        split_feature[node] = feature
        split_value[node] = value
        left[node] = left_id
        right[node] = right_id

        stack.append((indices[~go_left], right_id))
        stack.append((indices[go_left], left_id))

    return IsolationTree(
        is_leaf=tuple(is_leaf),
        split_feature=tuple(split_feature),
        split_value=tuple(split_value),
        left=tuple(left),
        right=tuple(right),
        size=tuple(size),
        depth=tuple(depth),
    )


def _fit_tree(X: np.ndarray, sample_size: int, max_depth: int, seed: int) -> IsolationTree:
    rng = np.random.default_rng(seed)
    # permutation is a Fisher-Yates shuffle; take the first sample_size rows
    subsample = X[rng.permutation(X.shape[0])[:sample_size]]
    return build_isolation_tree(subsample, max_depth, rng)


class IsolationForestDetector:
    """
    Unsupervised anomaly scoring over feature vectors.

    Args:
        num_trees: Number of isolation trees (default 100)
        subsample_size: Points per tree, capped at the dataset size (default 256)
        max_depth: Depth cap per tree (default 10)
        random_state: Seed or Generator for subsampling and splits
        n_jobs: joblib workers for building and scoring trees

    Raises:
        ValidationError: for non-positive num_trees or subsample_size, a
            negative max_depth, or n_jobs == 0
    """

    def __init__(
        self,
        num_trees: Optional[int] = None,
        subsample_size: Optional[int] = None,
        max_depth: Optional[int] = None,
        random_state: RandomState = None,
        n_jobs: Optional[int] = None,
    ):
        forest = settings.forest
        self.num_trees = num_trees if num_trees is not None else forest.num_trees
        self.subsample_size = subsample_size if subsample_size is not None else forest.subsample_size
        self.max_depth = max_depth if max_depth is not None else forest.max_depth
        self.n_jobs = n_jobs if n_jobs is not None else forest.n_jobs
        if self.num_trees < 1 or self.subsample_size < 1 or self.max_depth < 0:
            raise ValidationError(
                f"Invalid forest shape: num_trees={self.num_trees}, "
                f"subsample_size={self.subsample_size}, max_depth={self.max_depth}"
            )
        if self.n_jobs == 0:
            raise ValidationError("n_jobs must be non-zero")
        self._rng = np.random.default_rng(random_state)
        self.trees: List[IsolationTree] = []
        self.n_samples = 0

    @property
    def is_fitted(self) -> bool:
        return bool(self.trees)

    def fit(self, features: Sequence[Sequence[float]]) -> "IsolationForestDetector":
        """Build the forest. Empty input leaves the detector unfitted."""
        self.trees = []
        self.n_samples = len(features)
        if self.n_samples == 0:
            return self

        X = np.asarray(features, dtype=float)
        sample_size = min(self.subsample_size, self.n_samples)
        seeds = self._rng.integers(0, 2 ** 32, size=self.num_trees)

        self.trees = Parallel(n_jobs=self.n_jobs)(
            delayed(_fit_tree)(X, sample_size, self.max_depth, int(seed)) for seed in seeds
        )
        logger.debug(
            f"Isolation forest fitted: {self.num_trees} trees, subsample={sample_size}, "
            f"n={self.n_samples}"
        )
        return self

    def score(self, features: Sequence[Sequence[float]]) -> np.ndarray:
        """
        Anomaly score per point.

        Returns an empty array when the detector is not fitted or no points
        are given.
        """
        if not self.is_fitted or len(features) == 0:
            return np.empty(0, dtype=float)

        X = np.asarray(features, dtype=float)
        normalizer = average_path_length(self.n_samples)
        if normalizer == 0:
            return np.full(X.shape[0], 0.5)

        per_tree = Parallel(n_jobs=self.n_jobs)(
            delayed(tree.path_lengths)(X) for tree in self.trees
        )
        avg_path = np.mean(np.vstack(per_tree), axis=0)
        return np.power(2.0, -avg_path / normalizer)

    def fit_score(self, features: Sequence[Sequence[float]]) -> np.ndarray:
        """Fit on features and score the same points."""
        return self.fit(features).score(features)

    def predict(
        self,
        features: Sequence[Sequence[float]],
        threshold: Optional[float] = None,
    ) -> np.ndarray:
        """Boolean anomaly mask: score above ``threshold`` (default from settings)."""
        if threshold is None:
            threshold = settings.forest.anomaly_threshold
        return self.score(features) > threshold
