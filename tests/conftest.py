"""Pytest configuration - add project root to path and shared fixtures."""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from src.analysis_engine.experiments import (  # noqa: E402
    ExperimentConfig,
    ExperimentEngine,
    ExperimentStatus,
    ExperimentVariant,
    SuccessCriteria,
)

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def engine(fixed_clock):
    """Fresh engine with a frozen clock."""
    return ExperimentEngine(clock=fixed_clock)


@pytest.fixture
def make_config():
    """Factory for a valid, active two-variant 50/50 experiment."""
    def _make(experiment_id="exp_difficulty", **overrides):
        params = dict(
            id=experiment_id,
            name="Adaptive difficulty",
            variants=[
                ExperimentVariant(id="control", traffic_percentage=50, is_control=True),
                ExperimentVariant(
                    id="treatment",
                    traffic_percentage=50,
                    configuration={"difficulty": "adaptive"},
                ),
            ],
            target_metrics=["conversion"],
            success_criteria=SuccessCriteria(
                primary_metric="conversion",
                minimum_detectable_effect=0.05,
                significance_level=0.05,
                minimum_sample_size=1000,
            ),
            status=ExperimentStatus.ACTIVE,
            start_date=FIXED_NOW - timedelta(days=4),
        )
        params.update(overrides)
        return ExperimentConfig(**params)
    return _make
