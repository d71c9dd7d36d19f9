"""Tests for descriptive statistics."""
import math

import pytest
from src.analysis_engine.stats.descriptive import (
    correlation,
    entropy,
    euclidean_distance,
    linear_trend,
    mean,
    percentile,
    percentile_distribution,
    standard_deviation,
)


def test_percentile_midpoint_interpolation():
    """p50 of [10,20,30,40] interpolates between 20 and 30."""
    assert percentile([10, 20, 30, 40], 0.5) == pytest.approx(25.0)


def test_percentile_extremes():
    values = [10, 20, 30, 40]
    assert percentile(values, 0.0) == 10
    assert percentile(values, 1.0) == 40


def test_percentile_distribution_sorts_input():
    dist = percentile_distribution([40, 10, 30, 20])
    assert dist["p50"] == pytest.approx(25.0)
    assert dist["p25"] == pytest.approx(17.5)
    assert set(dist) == {"p25", "p50", "p75", "p90", "p95"}


def test_population_standard_deviation():
    assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)


def test_empty_input_is_zero():
    assert mean([]) == 0.0
    assert standard_deviation([]) == 0.0
    assert percentile([], 0.5) == 0.0
    assert entropy([]) == 0.0


def test_linear_trend_slope():
    assert linear_trend([1, 3, 5, 7]) == pytest.approx(2.0)
    assert linear_trend([5]) == 0.0


def test_correlation():
    assert correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
    assert correlation([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)
    assert correlation([1, 1, 1], [1, 2, 3]) == 0.0
    assert correlation([1, 2], [1, 2, 3]) == 0.0


def test_entropy_bits():
    assert entropy([0, 1, 0, 1]) == pytest.approx(1.0)
    assert entropy([1, 1, 1]) == pytest.approx(0.0)


def test_euclidean_distance():
    assert euclidean_distance([0, 0], [3, 4]) == pytest.approx(5.0)
    assert math.isinf(euclidean_distance([0, 0], [1, 2, 3]))
