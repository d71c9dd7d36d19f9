"""Experiment configuration validation."""

import numbers
from typing import Optional

from ..config import settings
from ..exceptions import ValidationError
from .schema import ExperimentConfig, ExperimentStatus, FilterOperator, PerformanceFilter


def _validate_filter(flt: PerformanceFilter) -> None:
    try:
        operator = FilterOperator(flt.operator)
    except ValueError:
        raise ValidationError(
            f"Unknown filter operator '{flt.operator}' for metric '{flt.metric}'"
        ) from None

    if operator == FilterOperator.BETWEEN:
        bounds = flt.value
        if (
            not isinstance(bounds, (tuple, list))
            or len(bounds) != 2
            or not all(isinstance(b, numbers.Real) for b in bounds)
        ):
            raise ValidationError(
                f"Filter on '{flt.metric}' uses 'between' and needs a (low, high) pair"
            )
        if bounds[0] > bounds[1]:
            raise ValidationError(f"Filter on '{flt.metric}' has low bound above high bound")
    elif not isinstance(flt.value, numbers.Real) or isinstance(flt.value, bool):
        raise ValidationError(f"Filter on '{flt.metric}' needs a numeric value")


def validate_experiment_config(
    config: ExperimentConfig,
    traffic_tolerance: Optional[float] = None,
) -> None:
    """
    Check experiment invariants.

    Raises:
        ValidationError: naming the first violated rule
    """
    if traffic_tolerance is None:
        traffic_tolerance = settings.experiments.traffic_tolerance

    if not config.id or not config.name:
        raise ValidationError("Experiment must have id and name")

    if len(config.variants) < 2:
        raise ValidationError("Experiment must have at least 2 variants")

    total_traffic = sum(v.traffic_percentage for v in config.variants)
    if abs(total_traffic - 100) > traffic_tolerance:
        raise ValidationError(
            f"Variant traffic percentages must sum to 100% (got {total_traffic:g}%)"
        )

    n_controls = sum(1 for v in config.variants if v.is_control)
    if n_controls != 1:
        raise ValidationError(
            f"Experiment must have exactly one control variant (got {n_controls})"
        )

    variant_ids = [v.id for v in config.variants]
    if len(set(variant_ids)) != len(variant_ids):
        raise ValidationError("Variant ids must be unique")

    try:
        ExperimentStatus(config.status)
    except ValueError:
        raise ValidationError(f"Unknown experiment status '{config.status}'") from None

    alpha = config.success_criteria.significance_level
    if not 0.0 < alpha < 1.0:
        raise ValidationError(f"Significance level must be between 0 and 1 (got {alpha})")

    for flt in config.segmentation.performance_filters:
        _validate_filter(flt)
