"""
Sample Ratio Mismatch (SRM) chi-square test.

Detects when the observed split across variants deviates from the configured
traffic percentages, which usually means broken assignment or logging.
"""

from typing import Sequence, Tuple

import numpy as np
from scipy import stats


def srm_chi_square(
    observed_counts: Sequence[int],
    expected_fractions: Sequence[float],
) -> Tuple[float, float]:
    """
    Chi-square goodness-of-fit of observed counts to expected fractions.

    H0: variants receive traffic in the configured proportions.

    Args:
        observed_counts: Sample size per variant
        expected_fractions: Configured share per variant (sums to 1)

    Returns:
        Tuple of (chi2_statistic, p_value)
    """
    observed = np.asarray(observed_counts, dtype=float)
    n_total = observed.sum()
    if n_total == 0 or observed.size < 2:
        return 0.0, 1.0

    expected = n_total * np.asarray(expected_fractions, dtype=float)
    # Avoid division by zero
    expected = np.where(expected == 0, 1e-10, expected)

    chi2 = float(np.sum((observed - expected) ** 2 / expected))
    p_value = float(stats.chi2.sf(chi2, df=observed.size - 1))
    return chi2, p_value


def check_srm(
    observed_counts: Sequence[int],
    expected_fractions: Sequence[float],
    alpha: float = 0.01,
) -> Tuple[bool, float, float]:
    """
    Check for sample ratio mismatch.

    Returns:
        Tuple of (srm_passed, chi2_statistic, p_value)
    """
    chi2, p_value = srm_chi_square(observed_counts, expected_fractions)
    return p_value >= alpha, chi2, p_value
