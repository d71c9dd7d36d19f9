"""
In-memory event store for experiment assignments, exposures and conversions.

Assignments are keyed by user; exposure and conversion events are also
indexed by (experiment_id, variant_id) for analysis. Nothing is persisted;
``exposures_frame`` / ``conversions_frame`` hand the log to reporting code as
pandas DataFrames.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .schema import ConversionEvent, ExperimentAssignment, ExposureEvent

logger = logging.getLogger(__name__)

EXPOSURE_COLUMNS = ["experiment_id", "variant_id", "user_id", "session_id", "timestamp", "context"]
CONVERSION_COLUMNS = [
    "experiment_id",
    "variant_id",
    "user_id",
    "session_id",
    "metric",
    "value",
    "timestamp",
    "context",
]

VariantKey = Tuple[str, str]


class EventStore:
    """Assignment table plus per-variant event logs."""

    def __init__(self):
        self._assignments: Dict[str, List[ExperimentAssignment]] = defaultdict(list)
        self._exposures: Dict[VariantKey, List[Tuple[str, ExposureEvent]]] = defaultdict(list)
        self._conversions: Dict[VariantKey, List[Tuple[str, ConversionEvent]]] = defaultdict(list)

    def get_assignment(self, user_id: str, experiment_id: str) -> Optional[ExperimentAssignment]:
        for assignment in self._assignments.get(user_id, ()):
            if assignment.experiment_id == experiment_id:
                return assignment
        return None

    def user_assignments(self, user_id: str) -> List[ExperimentAssignment]:
        return list(self._assignments.get(user_id, ()))

    def add_assignment(self, assignment: ExperimentAssignment) -> None:
        self._assignments[assignment.user_id].append(assignment)

    def count_assignments(self, experiment_id: str) -> Dict[str, int]:
        """Number of assigned users per variant id."""
        counts: Dict[str, int] = defaultdict(int)
        for assignments in self._assignments.values():
            for a in assignments:
                if a.experiment_id == experiment_id:
                    counts[a.variant_id] += 1
        return dict(counts)

    def append_exposure(self, assignment: ExperimentAssignment, event: ExposureEvent) -> None:
        assignment.exposure_events.append(event)
        key = (assignment.experiment_id, assignment.variant_id)
        self._exposures[key].append((assignment.user_id, event))

    def append_conversion(self, assignment: ExperimentAssignment, event: ConversionEvent) -> None:
        assignment.conversion_events.append(event)
        key = (assignment.experiment_id, assignment.variant_id)
        self._conversions[key].append((assignment.user_id, event))

    def exposures(self, experiment_id: str, variant_id: str) -> List[ExposureEvent]:
        return [e for _, e in self._exposures.get((experiment_id, variant_id), ())]

    def conversions(self, experiment_id: str, variant_id: str) -> List[ConversionEvent]:
        return [e for _, e in self._conversions.get((experiment_id, variant_id), ())]

    def exposures_frame(self, experiment_id: str) -> pd.DataFrame:
        """
        Exposure log of one experiment.

        Returns:
            DataFrame with EXPOSURE_COLUMNS, one row per exposure
        """
        rows = [
            {
                "experiment_id": exp_id,
                "variant_id": variant_id,
                "user_id": user_id,
                "session_id": evt.session_id,
                "timestamp": evt.timestamp,
                "context": evt.context,
            }
            for (exp_id, variant_id), events in self._exposures.items()
            if exp_id == experiment_id
            for user_id, evt in events
        ]
        return pd.DataFrame(rows, columns=EXPOSURE_COLUMNS)

    def conversions_frame(self, experiment_id: str) -> pd.DataFrame:
        """
        Conversion log of one experiment.

        Returns:
            DataFrame with CONVERSION_COLUMNS, one row per conversion
        """
        rows = [
            {
                "experiment_id": exp_id,
                "variant_id": variant_id,
                "user_id": user_id,
                "session_id": evt.session_id,
                "metric": evt.metric,
                "value": evt.value,
                "timestamp": evt.timestamp,
                "context": evt.context,
            }
            for (exp_id, variant_id), events in self._conversions.items()
            if exp_id == experiment_id
            for user_id, evt in events
        ]
        return pd.DataFrame(rows, columns=CONVERSION_COLUMNS)
