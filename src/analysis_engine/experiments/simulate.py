"""
Synthetic traffic simulator.

Drives an ExperimentEngine with a population of users: assigns each user,
records one exposure, and records a conversion with the variant's configured
probability. Used for end-to-end checks and demos.

Two modes:
- bernoulli (default): each user converts independently with the variant rate
- exact: exactly round(rate * n) users of each variant convert, chosen at
  random, which removes sampling noise from the conversion counts
"""

import logging
from typing import Dict, List, Optional

import numpy as np

from .engine import ExperimentEngine

logger = logging.getLogger(__name__)

SIMULATOR_SEED = 42


def simulate_experiment(
    engine: ExperimentEngine,
    experiment_id: str,
    conversion_rates: Dict[str, float],
    n_users: int = 1000,
    metric: str = "conversion",
    user_prefix: str = "user_",
    exact_rates: bool = False,
    random_seed: int = SIMULATOR_SEED,
    user_context: Optional[Dict[str, float]] = None,
) -> Dict:
    """
    Run a traffic simulation against an active experiment.

    Args:
        engine: Engine holding the experiment
        experiment_id: Experiment identifier
        conversion_rates: True conversion probability per variant id
        n_users: Number of distinct users
        metric: Conversion metric name
        user_prefix: Prefix for synthetic user ids
        exact_rates: Convert exactly round(rate * n) users per variant
        random_seed: Random seed for reproducibility
        user_context: Context passed to eligibility filters

    Returns:
        Dict with n_assigned, per-variant assigned and converted counts
    """
    rng = np.random.default_rng(random_seed)

    by_variant: Dict[str, List[str]] = {}
    n_skipped = 0
    for i in range(n_users):
        user_id = f"{user_prefix}{i}"
        assignment = engine.assign_user_to_experiment(user_id, experiment_id, context=user_context)
        if assignment is None:
            n_skipped += 1
            continue
        engine.track_exposure(user_id, experiment_id, session_id=f"session_{i}")
        by_variant.setdefault(assignment.variant_id, []).append(user_id)

    converted: Dict[str, int] = {}
    for variant_id, users in by_variant.items():
        rate = float(np.clip(conversion_rates.get(variant_id, 0.0), 0.0, 1.0))
        if exact_rates:
            n_convert = int(round(rate * len(users)))
            chosen = rng.permutation(len(users))[:n_convert]
            converting = [users[j] for j in sorted(chosen)]
        else:
            draws = rng.random(len(users))
            converting = [u for u, d in zip(users, draws) if d < rate]

        for user_id in converting:
            engine.track_conversion(user_id, experiment_id, metric, 1.0)
        converted[variant_id] = len(converting)

    summary = {
        "experiment_id": experiment_id,
        "n_assigned": sum(len(u) for u in by_variant.values()),
        "n_skipped": n_skipped,
        "assigned": {k: len(v) for k, v in by_variant.items()},
        "converted": converted,
        "random_seed": random_seed,
    }
    logger.info(f"Simulation complete: {summary}")
    return summary
