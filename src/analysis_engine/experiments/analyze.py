"""
Experiment analysis.

Recomputes per-variant aggregates from the event log, picks a winner against
the control, runs a two-proportion z-test, estimates power and time to the
required sample size, and turns the outcome into plain-text recommendations.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from ..config import ExperimentDefaults, settings
from ..stats import (
    achieved_power,
    check_srm,
    days_to_significance,
    mean_confidence_interval,
    percentile_distribution,
    proportions_z_test,
    wald_interval,
)
from .event_store import EventStore
from .schema import (
    ExperimentConfig,
    ExperimentResults,
    MetricResults,
    OverallResults,
    PowerAnalysis,
    SampleRatioCheck,
    StatisticalSignificance,
    VariantResults,
)

logger = logging.getLogger(__name__)


def build_variant_results(
    experiment: ExperimentConfig,
    store: EventStore,
    z: float = 1.96,
) -> List[VariantResults]:
    """
    Aggregate exposures and conversions per variant.

    sample_size is the exposure count; conversion_rate is conversions over
    max(1, exposures). Target metrics without any values are omitted.
    """
    results = []
    for variant in experiment.variants:
        exposures = store.exposures(experiment.id, variant.id)
        conversions = store.conversions(experiment.id, variant.id)

        sample_size = len(exposures)
        conversion_rate = len(conversions) / max(1, sample_size)

        metrics = []
        for target in experiment.target_metrics:
            values = [c.value for c in conversions if c.metric == target]
            if not values:
                continue
            m, std, ci_low, ci_high = mean_confidence_interval(values, z)
            metrics.append(MetricResults(
                metric=target,
                mean=m,
                standard_deviation=std,
                confidence_interval=(ci_low, ci_high),
                percentile_distribution=percentile_distribution(values),
            ))

        results.append(VariantResults(
            variant_id=variant.id,
            sample_size=sample_size,
            conversion_rate=conversion_rate,
            confidence_interval=wald_interval(conversion_rate, sample_size, z),
            metrics=metrics,
        ))
    return results


def best_variant(variant_results: List[VariantResults]) -> VariantResults:
    """Highest conversion rate; the first declared variant wins ties."""
    best = variant_results[0]
    for current in variant_results[1:]:
        if current.conversion_rate > best.conversion_rate:
            best = current
    return best


def determine_winner(
    experiment: ExperimentConfig,
    variant_results: List[VariantResults],
    store: EventStore,
) -> Tuple[OverallResults, float, float]:
    """
    Compare the best variant against the control.

    A control with a zero conversion rate makes the relative lift undefined;
    no winner is declared in that case.

    Returns:
        Tuple of (OverallResults, z statistic, p_value)
    """
    control = experiment.control
    control_result = next(
        (v for v in variant_results if control is not None and v.variant_id == control.id),
        None,
    )
    if control_result is None or len(variant_results) < 2:
        return OverallResults(), 0.0, 1.0

    best = best_variant(variant_results)
    if best.variant_id == control_result.variant_id:
        return OverallResults(), 0.0, 1.0

    if control_result.conversion_rate == 0:
        logger.info(
            f"Experiment {experiment.id}: control conversion rate is 0, "
            "relative lift undefined; no winner declared"
        )
        return OverallResults(), 0.0, 1.0

    effect_size = (
        (best.conversion_rate - control_result.conversion_rate) / control_result.conversion_rate
    )
    z_stat, p_value = proportions_z_test(
        control_result.sample_size,
        len(store.conversions(experiment.id, control_result.variant_id)),
        best.sample_size,
        len(store.conversions(experiment.id, best.variant_id)),
    )
    practical = abs(effect_size) >= experiment.success_criteria.minimum_detectable_effect
    overall = OverallResults(
        winner=best.variant_id,
        winner_confidence=1 - p_value,
        effect_size=effect_size,
        practical_significance=practical,
    )
    return overall, z_stat, p_value


def generate_recommendations(
    variant_results: List[VariantResults],
    is_significant: bool,
    practical_significance: bool,
    low_sample_size: int = 100,
) -> List[str]:
    """Plain-text advisories derived from the test outcome only."""
    recommendations = []

    if not is_significant:
        recommendations.append(
            "Results are not statistically significant. "
            "Continue running the experiment or increase sample size."
        )
    elif not practical_significance:
        recommendations.append(
            "Results are statistically significant but may not be practically significant. "
            "Consider the business impact."
        )
    else:
        best = best_variant(variant_results)
        recommendations.append(
            f"Implement variant {best.variant_id} as it shows significant improvement."
        )

    if any(v.sample_size < low_sample_size for v in variant_results):
        recommendations.append(
            "Some variants have low sample sizes. "
            "Consider running the experiment longer for more reliable results."
        )
    return recommendations


def run_analysis(
    experiment: ExperimentConfig,
    store: EventStore,
    now: datetime,
    defaults: Optional[ExperimentDefaults] = None,
) -> ExperimentResults:
    """
    Run full experiment analysis.

    Args:
        experiment: Experiment configuration
        store: Event store holding the experiment's telemetry
        now: Analysis time (drives the enrollment-rate forecast)
        defaults: Analysis constants; falls back to global settings

    Returns:
        ExperimentResults
    """
    defaults = defaults or settings.experiments
    criteria = experiment.success_criteria
    alpha = criteria.significance_level

    variant_results = build_variant_results(experiment, store, defaults.confidence_z)
    overall, z_stat, p_value = determine_winner(experiment, variant_results, store)

    is_significant = p_value < alpha
    total_sample_size = sum(v.sample_size for v in variant_results)

    power = PowerAnalysis(
        achieved_power=achieved_power(overall.effect_size, total_sample_size, alpha),
        required_sample_size=criteria.minimum_sample_size,
        current_sample_size=total_sample_size,
        days_to_significance=days_to_significance(
            total_sample_size,
            criteria.minimum_sample_size,
            experiment.start_date,
            now,
        ),
    )

    assigned = store.count_assignments(experiment.id)
    srm_passed, chi2, srm_p = check_srm(
        [assigned.get(v.id, 0) for v in experiment.variants],
        [v.traffic_percentage / 100 for v in experiment.variants],
        alpha=defaults.srm_alpha,
    )
    if not srm_passed:
        logger.warning(
            f"Experiment {experiment.id}: sample ratio mismatch (chi2={chi2:.2f}, p={srm_p:.4g})"
        )

    result = ExperimentResults(
        experiment_id=experiment.id,
        analysis_date=now,
        variants=variant_results,
        overall_results=overall,
        statistical_significance=StatisticalSignificance(
            p_value=p_value,
            test_statistic=z_stat,
            is_significant=is_significant,
            alpha=alpha,
            power_analysis=power,
        ),
        sample_ratio=SampleRatioCheck(passed=srm_passed, chi2=chi2, p_value=srm_p),
        recommendations=generate_recommendations(
            variant_results,
            is_significant,
            overall.practical_significance,
            defaults.low_sample_size,
        ),
    )
    logger.info(
        f"Analyzed {experiment.id}: n={total_sample_size}, winner={overall.winner}, "
        f"p={p_value:.4g}, significant={is_significant}"
    )
    return result
