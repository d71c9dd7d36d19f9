"""End-to-end: simulated traffic through assignment, tracking and analysis."""
import pytest
from src.analysis_engine.experiments import simulate_experiment


@pytest.fixture
def running(engine, make_config):
    engine.create_experiment(make_config())
    return engine


def test_exact_rates_detect_treatment(running):
    """Control 50% vs treatment 60% over 1000 users is a significant win."""
    summary = simulate_experiment(
        running,
        "exp_difficulty",
        {"control": 0.5, "treatment": 0.6},
        n_users=1000,
        exact_rates=True,
    )
    assert summary["n_assigned"] == 1000
    assert summary["n_skipped"] == 0

    results = running.analyze_experiment("exp_difficulty")
    sig = results.statistical_significance

    assert results.overall_results.winner == "treatment"
    assert results.overall_results.effect_size == pytest.approx(0.2, abs=0.02)
    assert results.overall_results.practical_significance
    assert sig.is_significant
    assert sig.p_value < 0.01
    assert sig.test_statistic > 2.58
    assert results.overall_results.winner_confidence == pytest.approx(1 - sig.p_value)
    assert sig.power_analysis.current_sample_size == 1000
    assert sig.power_analysis.days_to_significance == 0
    assert any("Implement variant treatment" in r for r in results.recommendations)
    assert not any("low sample sizes" in r for r in results.recommendations)


def test_bernoulli_traffic_detects_treatment(running):
    simulate_experiment(
        running,
        "exp_difficulty",
        {"control": 0.5, "treatment": 0.6},
        n_users=4000,
        random_seed=7,
    )
    results = running.analyze_experiment("exp_difficulty")

    assert results.overall_results.winner == "treatment"
    assert results.statistical_significance.is_significant
    control = results.variant("control")
    treatment = results.variant("treatment")
    assert control.sample_size + treatment.sample_size == 4000
    assert abs(control.conversion_rate - 0.5) < 0.05
    assert abs(treatment.conversion_rate - 0.6) < 0.05


def test_equal_rates_not_significant(running):
    simulate_experiment(
        running,
        "exp_difficulty",
        {"control": 0.5, "treatment": 0.5},
        n_users=1000,
        exact_rates=True,
    )
    results = running.analyze_experiment("exp_difficulty")

    assert not results.statistical_significance.is_significant
    assert any("not statistically significant" in r for r in results.recommendations)


def test_sample_ratio_check_matches_observed_split(running):
    simulate_experiment(running, "exp_difficulty", {"control": 0.3, "treatment": 0.3}, n_users=2000)
    results = running.analyze_experiment("exp_difficulty")

    n_control = results.variant("control").sample_size
    n_treatment = results.variant("treatment").sample_size
    expected_chi2 = 2 * (n_control - 1000) ** 2 / 1000
    check = results.sample_ratio

    assert check.chi2 == pytest.approx(expected_chi2)
    assert check.passed == (check.p_value >= 0.01)
    assert n_control + n_treatment == 2000
    assert results.to_dict()["sample_ratio"]["chi2"] == pytest.approx(expected_chi2)
