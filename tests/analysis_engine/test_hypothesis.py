"""Tests for confidence intervals and the two-proportion z-test."""
import math

import pytest
from src.analysis_engine.stats.hypothesis_tests import (
    mean_confidence_interval,
    pooled_standard_error,
    proportions_z_test,
    wald_interval,
)


def test_mean_confidence_interval_closed_form():
    """Ten 0/1 conversions: mean 0.5, CI = 0.5 ± 1.96·σ/√10."""
    values = [1, 1, 1, 1, 1, 0, 0, 0, 0, 0]
    m, std, ci_low, ci_high = mean_confidence_interval(values)
    margin = 1.96 * 0.5 / math.sqrt(10)
    assert m == pytest.approx(0.5)
    assert std == pytest.approx(0.5)
    assert ci_low == pytest.approx(0.5 - margin)
    assert ci_high == pytest.approx(0.5 + margin)


def test_mean_confidence_interval_empty():
    assert mean_confidence_interval([]) == (0.0, 0.0, 0.0, 0.0)


def test_wald_interval_clamped():
    low, high = wald_interval(0.5, 100)
    assert low == pytest.approx(0.5 - 0.098)
    assert high == pytest.approx(0.5 + 0.098)
    assert wald_interval(0.99, 10)[1] == 1.0
    assert wald_interval(0.01, 10)[0] == 0.0


def test_wald_interval_empty_sample():
    assert wald_interval(0.0, 0) == (0.0, 0.0)


def test_proportions_z_test_known():
    """20/100 vs 10/100 is significant at 5%."""
    z, p_val = proportions_z_test(100, 20, 100, 10)
    assert z == pytest.approx(1.98, abs=0.01)
    assert p_val < 0.05


def test_proportions_z_test_equal():
    """Equal proportions -> p-value near 1."""
    z, p_val = proportions_z_test(100, 30, 100, 30)
    assert z == 0.0
    assert p_val > 0.99


def test_pooled_standard_error_degenerate():
    assert pooled_standard_error(0, 0, 100, 10) == 0.0
    assert pooled_standard_error(100, 0, 100, 0) == 0.0
    assert proportions_z_test(100, 0, 100, 0) == (0.0, 1.0)
