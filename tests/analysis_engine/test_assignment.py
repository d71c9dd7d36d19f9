"""Tests for deterministic assignment and eligibility filters."""
from collections import Counter

import pytest
from src.analysis_engine.experiments.assignment import (
    ASSIGNMENT_HASH_VERSION,
    evaluate_filter,
    fnv1a_32,
    hash_to_unit,
    is_user_eligible,
    select_variant,
)
from src.analysis_engine.experiments.schema import (
    DemographicFilter,
    ExperimentConfig,
    ExperimentVariant,
    PerformanceFilter,
    Segmentation,
)


def _experiment(experiment_id, splits, control_index=0):
    variants = [
        ExperimentVariant(id=name, traffic_percentage=pct, is_control=(i == control_index))
        for i, (name, pct) in enumerate(splits)
    ]
    return ExperimentConfig(id=experiment_id, name=experiment_id, variants=variants)


def test_fnv1a_reference_vectors():
    """Published FNV-1a 32-bit test vectors."""
    assert ASSIGNMENT_HASH_VERSION == "fnv1a32-v1"
    assert fnv1a_32("") == 0x811C9DC5
    assert fnv1a_32("a") == 0xE40C292C
    assert fnv1a_32("foobar") == 0xBF9CF968


def test_hash_to_unit_range_and_stability():
    u = hash_to_unit("user_1", "exp_1")
    assert 0.0 <= u < 1.0
    assert u == hash_to_unit("user_1", "exp_1")
    assert u == fnv1a_32("user_1exp_1") / 2 ** 32


def test_select_variant_deterministic():
    """Same user + experiment always gets the same variant."""
    exp = _experiment("exp_1", [("control", 50), ("treatment", 50)])
    first = [select_variant(f"u{i}", exp) for i in range(200)]
    second = [select_variant(f"u{i}", exp) for i in range(200)]
    assert first == second


def test_select_variant_follows_cumulative_shares():
    exp = _experiment("exp_walk", [("a", 20), ("b", 30), ("c", 50)])
    for i in range(500):
        u = hash_to_unit(f"u{i}", "exp_walk")
        expected = "a" if u < 0.2 else ("b" if u < 0.5 else "c")
        assert select_variant(f"u{i}", exp) == expected


def test_select_variant_falls_back_to_control():
    """Positions beyond the cumulative share land on the control."""
    exp = _experiment("exp_gap", [("treatment", 10), ("control", 0)], control_index=1)
    for i in range(300):
        u = hash_to_unit(f"u{i}", "exp_gap")
        expected = "treatment" if u < 0.1 else "control"
        assert select_variant(f"u{i}", exp) == expected


@pytest.mark.parametrize(
    "splits",
    [
        [("control", 50), ("treatment", 50)],
        [("control", 20), ("b", 30), ("c", 50)],
    ],
)
def test_traffic_converges_to_configured_shares(splits):
    exp = _experiment("exp_traffic", splits)
    n = 10000
    counts = Counter(select_variant(f"user_{i}", exp) for i in range(n))
    for name, pct in splits:
        assert abs(counts[name] / n - pct / 100) < 0.04


@pytest.mark.parametrize(
    "operator,threshold,value,expected",
    [
        ("gt", 0.5, 0.6, True),
        ("gt", 0.5, 0.5, False),
        ("lt", 0.5, 0.4, True),
        ("eq", 3, 3, True),
        ("gte", 0.5, 0.5, True),
        ("lte", 0.5, 0.6, False),
        ("between", (1, 5), 5, True),
        ("between", (1, 5), 6, False),
    ],
)
def test_evaluate_filter(operator, threshold, value, expected):
    flt = PerformanceFilter(metric="accuracy", operator=operator, value=threshold)
    assert evaluate_filter(value, flt) is expected


def test_non_numeric_value_fails_numeric_filter():
    flt = PerformanceFilter(metric="accuracy", operator="gt", value=0.5)
    assert not evaluate_filter("high", flt)
    assert not evaluate_filter(True, flt)


def test_missing_metric_skips_filter():
    seg = Segmentation(performance_filters=[PerformanceFilter("accuracy", "gte", 0.5)])
    assert is_user_eligible(seg, {})
    assert is_user_eligible(seg, {"accuracy": 0.7})
    assert not is_user_eligible(seg, {"accuracy": 0.3})


def test_demographic_and_profile_filters():
    seg = Segmentation(
        demographic_filters=[DemographicFilter("region", ("eu", "us"))],
        cognitive_profile_filters=["fast_learner"],
    )
    assert is_user_eligible(seg, {"region": "eu"}, {"segment": "fast_learner"})
    assert not is_user_eligible(seg, {"region": "apac"})
    assert not is_user_eligible(seg, {}, {"segment": "casual"})
    assert is_user_eligible(seg, {}, {})
