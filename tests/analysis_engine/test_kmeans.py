"""Tests for K-means clustering."""
import numpy as np
import pytest
from src.analysis_engine.exceptions import ValidationError
from src.analysis_engine.learning import KMeansClusterer

CENTERS = np.array([[0.0, 0.0], [10.0, 10.0], [20.0, 0.0]])


@pytest.fixture
def blobs():
    """Three well separated blobs of 30 points each."""
    rng = np.random.default_rng(123)
    points = np.vstack([c + rng.normal(0, 0.5, size=(30, 2)) for c in CENTERS])
    truth = np.repeat(np.arange(3), 30)
    return points, truth


def test_empty_input_and_nonpositive_k():
    assert KMeansClusterer(3).cluster([]) == []
    assert KMeansClusterer(0).cluster([[1.0, 2.0]]) == []
    assert KMeansClusterer(-1).fit([[1.0, 2.0]]).clusters == []


def test_recovers_separated_blobs(blobs):
    points, truth = blobs
    result = KMeansClusterer(3, n_init=25, random_state=0).fit(points)

    assert len(result.clusters) == 3
    assert sorted(c.size for c in result.clusters) == [30, 30, 30]
    labels = np.array(result.labels(len(points)))
    for blob in range(3):
        assert len(set(labels[truth == blob])) == 1
    for cluster in result.clusters:
        nearest = np.min(np.linalg.norm(CENTERS - np.array(cluster.centroid), axis=1))
        assert nearest < 0.5


def test_inertia_never_increases(blobs):
    points, _ = blobs
    for seed in range(10):
        history = KMeansClusterer(4, random_state=seed).fit(points).inertia_history
        assert history
        for a, b in zip(history, history[1:]):
            assert b <= a + 1e-9


def test_cluster_inertia_matches_members(blobs):
    points, _ = blobs
    result = KMeansClusterer(3, n_init=5, random_state=1).fit(points)
    for cluster in result.clusters:
        members = points[cluster.member_indices]
        expected = float(np.sum((members - np.array(cluster.centroid)) ** 2))
        assert cluster.inertia == pytest.approx(expected)
    assert result.total_inertia == pytest.approx(sum(c.inertia for c in result.clusters))


def test_more_clusters_than_points_keeps_empty_clusters():
    points = [[0.0, 0.0], [1.0, 1.0], [5.0, 5.0]]
    clusters = KMeansClusterer(5, random_state=3).cluster(points)

    assert len(clusters) == 5
    assert sum(c.size for c in clusters) == 3
    for c in clusters:
        if c.size == 0:
            assert c.inertia == 0.0
            assert len(c.centroid) == 2


def test_identical_points():
    points = [[1.0, 1.0]] * 10
    result = KMeansClusterer(2, random_state=0).fit(points)

    assert result.converged
    assert result.clusters[0].size == 10
    assert result.clusters[1].size == 0
    assert result.clusters[1].centroid == [1.0, 1.0]
    assert result.total_inertia == 0.0


def test_seeded_runs_are_reproducible(blobs):
    points, _ = blobs
    a = KMeansClusterer(3, random_state=42).fit(points)
    b = KMeansClusterer(3, random_state=42).fit(points)
    assert a.labels(len(points)) == b.labels(len(points))
    assert a.inertia_history == b.inertia_history


def test_respects_iteration_cap(blobs):
    points, _ = blobs
    result = KMeansClusterer(3, max_iterations=1, random_state=0).fit(points)
    assert result.iterations == 1
    assert len(result.inertia_history) == 1


def test_exact_recovery_of_small_blobs_across_seeds():
    """Three groups of 10 points are partitioned exactly, up to label order."""
    rng = np.random.default_rng(2024)
    centers = np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 8.66]])
    points = np.vstack([c + rng.normal(0, 0.3, size=(10, 2)) for c in centers])
    truth = [set(range(g * 10, (g + 1) * 10)) for g in range(3)]

    recovered = 0
    for seed in range(40):
        # restarts per seed
        clusters = KMeansClusterer(3, n_init=30, random_state=seed).cluster(points)
        groups = [set(c.member_indices) for c in clusters]
        if sorted(groups, key=lambda g: min(g, default=-1)) == truth:
            recovered += 1
    assert recovered >= 38


def test_zero_tolerance_stops_on_stable_assignments(blobs):
    points, _ = blobs
    result = KMeansClusterer(3, tolerance=0.0, n_init=5, random_state=0).fit(points)
    assert result.converged
    assert result.iterations < 100


@pytest.mark.parametrize("kwargs", [{"max_iterations": 0}, {"n_init": 0}, {"n_init": -2}])
def test_explicit_invalid_settings_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        KMeansClusterer(3, **kwargs)
