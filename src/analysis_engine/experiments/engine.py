"""
Experiment engine: lifecycle, assignment, telemetry and analysis.

The engine is an explicit stateful object owned by the host application.
Configuration errors raise ``ValidationError``; every runtime path
(assignment, tracking, analysis) returns ``None`` or does nothing instead of
raising, so analytics never blocks the rest of the application.
"""

import copy
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import pandas as pd

from ..config import ExperimentDefaults, settings
from .analyze import run_analysis
from .assignment import is_user_eligible, select_variant
from .event_store import EventStore
from .schema import (
    ConversionEvent,
    ExperimentAssignment,
    ExperimentConfig,
    ExperimentResults,
    ExperimentStatus,
    ExposureEvent,
    MetricValue,
)
from .validation import validate_experiment_config

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ExperimentEngine:
    """Owns experiments, the assignment table and the event logs."""

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        defaults: Optional[ExperimentDefaults] = None,
    ):
        self.clock = clock
        self.defaults = defaults or settings.experiments
        self._experiments: Dict[str, ExperimentConfig] = {}
        self._store = EventStore()
        # Serializes writes to the assignment table and event logs
        self._lock = threading.RLock()

    # Lifecycle

    def create_experiment(self, config: ExperimentConfig) -> None:
        """
        Validate and register an experiment.

        The engine stores its own copy, so later changes to ``config`` do not
        affect assignment. Naive start and end dates are taken as UTC.
        Re-creating an existing id overwrites the stored configuration.

        Raises:
            ValidationError: if the configuration violates an invariant
        """
        validate_experiment_config(config, self.defaults.traffic_tolerance)
        config = copy.deepcopy(config)
        config.status = ExperimentStatus(config.status)
        config.start_date = _as_utc(config.start_date)
        config.end_date = _as_utc(config.end_date)
        with self._lock:
            self._experiments[config.id] = config
        logger.info(f"Created experiment: {config.name} ({config.id})")

    def update_status(self, experiment_id: str, status: Union[ExperimentStatus, str]) -> bool:
        """Move an experiment to a new lifecycle status. Returns False if unknown."""
        with self._lock:
            experiment = self._experiments.get(experiment_id)
            if experiment is None:
                return False
            experiment.status = ExperimentStatus(status)
        logger.info(f"Experiment {experiment_id} is now {experiment.status.value}")
        return True

    def get_experiment(self, experiment_id: str) -> Optional[ExperimentConfig]:
        return self._experiments.get(experiment_id)

    def list_experiments(self, status: Optional[ExperimentStatus] = None) -> List[ExperimentConfig]:
        return [
            e for e in self._experiments.values()
            if status is None or e.status == status
        ]

    # Assignment

    def assign_user_to_experiment(
        self,
        user_id: str,
        experiment_id: str,
        profile: Optional[Mapping[str, MetricValue]] = None,
        context: Optional[Mapping[str, MetricValue]] = None,
    ) -> Optional[ExperimentAssignment]:
        """
        Assign a user to a variant.

        Args:
            user_id: User identifier
            experiment_id: Experiment identifier
            profile: Behavioural profile attributes (``segment`` is matched
                against cognitive profile filters)
            context: User metrics and attributes used by eligibility filters

        Returns:
            The user's assignment (existing one if already assigned), or None
            when the experiment is missing, not active, or the user is not
            eligible
        """
        experiment = self._experiments.get(experiment_id)
        if experiment is None or experiment.status != ExperimentStatus.ACTIVE:
            return None

        if not is_user_eligible(experiment.segmentation, context or {}, profile):
            logger.debug(f"User {user_id} not eligible for {experiment_id}")
            return None

        with self._lock:
            existing = self._store.get_assignment(user_id, experiment_id)
            if existing is not None:
                return existing

            variant_id = select_variant(user_id, experiment)
            assignment = ExperimentAssignment(
                user_id=user_id,
                experiment_id=experiment_id,
                variant_id=variant_id,
                assigned_at=self.clock(),
            )
            self._store.add_assignment(assignment)

        logger.debug(f"Assigned user {user_id} to variant {variant_id} in experiment {experiment_id}")
        return assignment

    def get_assignment(self, user_id: str, experiment_id: str) -> Optional[ExperimentAssignment]:
        return self._store.get_assignment(user_id, experiment_id)

    def resolve_configuration(self, user_id: str, defaults: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Effective variant configuration for a user.

        Configuration payloads of the user's variants in active experiments are
        layered over ``defaults`` in assignment order (later wins).
        """
        config = dict(defaults)
        for assignment in self._store.user_assignments(user_id):
            experiment = self._experiments.get(assignment.experiment_id)
            if experiment is None or experiment.status != ExperimentStatus.ACTIVE:
                continue
            variant = experiment.variant(assignment.variant_id)
            if variant is not None:
                config.update(variant.configuration)
        return config

    # Telemetry

    def track_exposure(
        self,
        user_id: str,
        experiment_id: str,
        session_id: str = "",
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record an exposure. Dropped silently if the user is not assigned."""
        with self._lock:
            assignment = self._store.get_assignment(user_id, experiment_id)
            if assignment is None:
                return
            event = ExposureEvent(timestamp=self.clock(), session_id=session_id, context=context or {})
            self._store.append_exposure(assignment, event)

    def track_conversion(
        self,
        user_id: str,
        experiment_id: str,
        metric: str,
        value: float,
        session_id: str = "",
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record a conversion. Dropped silently if the user is not assigned."""
        with self._lock:
            assignment = self._store.get_assignment(user_id, experiment_id)
            if assignment is None:
                return
            event = ConversionEvent(
                metric=metric,
                value=float(value),
                timestamp=self.clock(),
                session_id=session_id,
                context=context or {},
            )
            self._store.append_conversion(assignment, event)

    def exposures_frame(self, experiment_id: str) -> pd.DataFrame:
        return self._store.exposures_frame(experiment_id)

    def conversions_frame(self, experiment_id: str) -> pd.DataFrame:
        return self._store.conversions_frame(experiment_id)

    # Analysis

    def analyze_experiment(self, experiment_id: str) -> Optional[ExperimentResults]:
        """Analyze an experiment's telemetry; None if the experiment is unknown."""
        experiment = self._experiments.get(experiment_id)
        if experiment is None:
            return None
        with self._lock:
            return run_analysis(experiment, self._store, self.clock(), self.defaults)
