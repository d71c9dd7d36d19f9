"""
Descriptive statistics over plain numeric sequences.

Empty input yields 0.0 instead of NaN.
Standard deviation is the population form (ddof=0).
"""

from typing import Sequence

import numpy as np


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for empty input."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.mean(arr))


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for empty input."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.std(arr))


def percentile(sorted_values: Sequence[float], q: float) -> float:
    """
    Percentile by linear interpolation between order statistics.

    Args:
        sorted_values: Values in ascending order
        q: Quantile in [0, 1] (0.5 = median)

    Returns:
        Interpolated value at rank ``q * (n - 1)``
    """
    arr = np.asarray(sorted_values, dtype=float)
    if arr.size == 0:
        return 0.0
    index = q * (arr.size - 1)
    lower = int(np.floor(index))
    upper = int(np.ceil(index))
    if lower == upper:
        return float(arr[lower])
    weight = index - lower
    return float(arr[lower] * (1 - weight) + arr[upper] * weight)


def percentile_distribution(values: Sequence[float]) -> dict:
    """p25/p50/p75/p90/p95 of unsorted values."""
    ordered = np.sort(np.asarray(values, dtype=float))
    return {
        "p25": percentile(ordered, 0.25),
        "p50": percentile(ordered, 0.50),
        "p75": percentile(ordered, 0.75),
        "p90": percentile(ordered, 0.90),
        "p95": percentile(ordered, 0.95),
    }


def linear_trend(values: Sequence[float]) -> float:
    """
    Least-squares slope of values against their index (0, 1, 2, ...).

    Returns 0.0 when fewer than two values are given.
    """
    y = np.asarray(values, dtype=float)
    n = y.size
    if n < 2:
        return 0.0
    sum_x = n * (n - 1) / 2
    sum_y = float(np.sum(y))
    sum_xy = float(np.dot(np.arange(n), y))
    sum_xx = n * (n - 1) * (2 * n - 1) / 6
    return (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0.0 for mismatched, empty or constant input."""
    xa = np.asarray(x, dtype=float)
    ya = np.asarray(y, dtype=float)
    if xa.size != ya.size or xa.size == 0:
        return 0.0
    dx = xa - xa.mean()
    dy = ya - ya.mean()
    denominator = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if denominator == 0:
        return 0.0
    return float(np.sum(dx * dy) / denominator)


def entropy(values: Sequence[float]) -> float:
    """Shannon entropy (bits) of the empirical distribution of values."""
    if len(values) == 0:
        return 0.0
    _, counts = np.unique(np.asarray(values), return_counts=True)
    probs = counts / counts.sum()
    return float(-np.sum(probs * np.log2(probs)))


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance; ``inf`` when lengths differ."""
    aa = np.asarray(a, dtype=float)
    ba = np.asarray(b, dtype=float)
    if aa.shape != ba.shape:
        return float("inf")
    return float(np.sqrt(np.sum((aa - ba) ** 2)))


def squared_distances(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Pairwise squared Euclidean distances, shape (n_points, n_centroids)."""
    diff = points[:, np.newaxis, :] - centroids[np.newaxis, :, :]
    return np.sum(diff * diff, axis=2)
