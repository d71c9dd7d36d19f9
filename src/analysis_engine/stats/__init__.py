"""Shared numeric utilities: descriptive statistics, normal approximations, tests."""

from .descriptive import (
    correlation,
    entropy,
    euclidean_distance,
    linear_trend,
    mean,
    percentile,
    percentile_distribution,
    squared_distances,
    standard_deviation,
)
from .distributions import erf, normal_cdf, normal_inverse
from .hypothesis_tests import (
    mean_confidence_interval,
    pooled_standard_error,
    proportions_z_test,
    wald_interval,
)
from .power import achieved_power, days_to_significance, sample_size_proportion
from .srm import check_srm, srm_chi_square

__all__ = [
    "correlation",
    "entropy",
    "euclidean_distance",
    "linear_trend",
    "mean",
    "percentile",
    "percentile_distribution",
    "squared_distances",
    "standard_deviation",
    "erf",
    "normal_cdf",
    "normal_inverse",
    "mean_confidence_interval",
    "pooled_standard_error",
    "proportions_z_test",
    "wald_interval",
    "achieved_power",
    "days_to_significance",
    "sample_size_proportion",
    "check_srm",
    "srm_chi_square",
]
