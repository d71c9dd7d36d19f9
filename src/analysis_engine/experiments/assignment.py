"""
Deterministic variant assignment and eligibility filtering.

Assignment hashes the concatenation ``user_id + experiment_id`` with 32-bit
FNV-1a, maps the hash to [0, 1), and walks the variants' cumulative traffic
shares in declaration order. The same user therefore always lands in the same
bucket for a given experiment without any stored randomness, and the hash is
reproducible bit-for-bit in any language.
"""

import logging
import numbers
from typing import Mapping, Optional

from .schema import (
    ExperimentConfig,
    FilterOperator,
    MetricValue,
    PerformanceFilter,
    Segmentation,
)

logger = logging.getLogger(__name__)

ASSIGNMENT_HASH_VERSION = "fnv1a32-v1"

FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193
_UINT32 = 2 ** 32


def fnv1a_32(data: str) -> int:
    """32-bit FNV-1a hash of the UTF-8 encoding of ``data``."""
    h = FNV32_OFFSET_BASIS
    for byte in data.encode("utf-8"):
        h ^= byte
        h = (h * FNV32_PRIME) % _UINT32
    return h


def hash_to_unit(user_id: str, experiment_id: str) -> float:
    """
    Deterministic position of a user within an experiment, in [0, 1).

    Same user + experiment always maps to the same value.
    """
    return fnv1a_32(f"{user_id}{experiment_id}") / _UINT32


def select_variant(user_id: str, experiment: ExperimentConfig) -> str:
    """
    Pick the variant for a user.

    Variants are walked in declaration order accumulating
    ``traffic_percentage / 100``; the first variant whose cumulative share
    exceeds the user's hash position wins. If rounding leaves the position
    uncovered, the control variant is returned.
    """
    position = hash_to_unit(user_id, experiment.id)
    cumulative = 0.0
    for variant in experiment.variants:
        cumulative += variant.traffic_percentage / 100
        if position < cumulative:
            return variant.id

    control = experiment.control
    logger.debug(
        f"Position {position:.6f} beyond cumulative {cumulative:.6f} for "
        f"{user_id} in {experiment.id}; falling back to control"
    )
    return control.id if control is not None else experiment.variants[0].id


def is_numeric(value: object) -> bool:
    """True for real numbers; bools are flags, not metrics."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def evaluate_filter(value: MetricValue, flt: PerformanceFilter) -> bool:
    """
    Evaluate a performance filter against a context value.

    A non-numeric value never satisfies a numeric filter.
    """
    if not is_numeric(value):
        return False
    operator = FilterOperator(flt.operator)
    if operator == FilterOperator.BETWEEN:
        low, high = flt.value
        return low <= value <= high
    if operator == FilterOperator.GT:
        return value > flt.value
    if operator == FilterOperator.LT:
        return value < flt.value
    if operator == FilterOperator.EQ:
        return value == flt.value
    if operator == FilterOperator.GTE:
        return value >= flt.value
    return value <= flt.value


def is_user_eligible(
    segmentation: Segmentation,
    context: Mapping[str, MetricValue],
    profile: Optional[Mapping[str, MetricValue]] = None,
) -> bool:
    """
    Check a user against the experiment's segmentation.

    Every rule is skipped when the user's data does not carry the field it
    inspects, so partially known users are admitted.
    """
    if segmentation.cognitive_profile_filters and profile and "segment" in profile:
        if profile["segment"] not in segmentation.cognitive_profile_filters:
            return False

    for flt in segmentation.performance_filters:
        if flt.metric not in context:
            continue
        if not evaluate_filter(context[flt.metric], flt):
            return False

    for demo in segmentation.demographic_filters:
        if demo.attribute not in context:
            continue
        if str(context[demo.attribute]) not in demo.values:
            return False

    return True
