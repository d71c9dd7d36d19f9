"""
Power analysis and enrollment forecasting.

``achieved_power`` is the simplified normal approximation used by the
experiment dashboard; ``sample_size_proportion`` is the textbook per-arm
sample size for a two-proportion test.
"""

import math
from datetime import datetime, timezone
from typing import Optional

from .distributions import normal_cdf, normal_inverse

SECONDS_PER_DAY = 24 * 60 * 60


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def achieved_power(effect_size: float, sample_size: int, alpha: float = 0.05) -> float:
    """
    Approximate power: Φ(|effect|·√(n/2) − z_{1−α/2}).

    Args:
        effect_size: Effect (relative lift) to detect
        sample_size: Total observed sample size
        alpha: Two-sided significance level

    Returns:
        Statistical power (0-1)
    """
    z_alpha = normal_inverse(1 - alpha / 2)
    z_beta = abs(effect_size) * math.sqrt(max(sample_size, 0) / 2) - z_alpha
    return normal_cdf(z_beta)


def sample_size_proportion(
    baseline: float,
    mde_relative: float,
    alpha: float = 0.05,
    power: float = 0.8,
) -> int:
    """
    Sample size per arm for a two-proportion test.

    Args:
        baseline: Control conversion rate (e.g., 0.30)
        mde_relative: Minimum detectable effect as relative lift (0.10 = +10%)
        alpha: Type I error rate
        power: Target statistical power

    Returns:
        Required users per arm (0 when the effect is zero)
    """
    p1 = baseline
    p2 = baseline * (1 + mde_relative)
    effect = abs(p2 - p1)
    if effect == 0:
        return 0

    z_alpha = normal_inverse(1 - alpha / 2)
    z_beta = normal_inverse(power)
    p_pool = (p1 + p2) / 2
    variance = 2 * p_pool * (1 - p_pool)
    n_per_arm = ((z_alpha + z_beta) ** 2) * variance / effect ** 2
    return int(math.ceil(n_per_arm))


def days_to_significance(
    current_sample_size: int,
    required_sample_size: int,
    start_date: Optional[datetime],
    now: datetime,
) -> int:
    """
    Days until ``required_sample_size`` at the observed enrollment rate.

    Days running is floored at one so a freshly started experiment does not
    extrapolate from a fraction of a day. Naive datetimes are taken as UTC.
    """
    if current_sample_size >= required_sample_size:
        return 0

    remaining = required_sample_size - current_sample_size
    days_running = 1.0
    if start_date is not None:
        elapsed = _as_utc(now) - _as_utc(start_date)
        days_running = max(1.0, elapsed.total_seconds() / SECONDS_PER_DAY)
    samples_per_day = current_sample_size / days_running
    return int(math.ceil(remaining / max(1.0, samples_per_day)))
