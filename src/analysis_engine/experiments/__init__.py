"""Experimentation engine: A/B assignment, telemetry and significance testing."""

from .schema import (
    ConversionEvent,
    DemographicFilter,
    ExperimentAssignment,
    ExperimentConfig,
    ExperimentResults,
    ExperimentStatus,
    ExperimentVariant,
    ExposureEvent,
    FilterOperator,
    PerformanceFilter,
    Segmentation,
    SuccessCriteria,
    VariantResults,
)
from .assignment import ASSIGNMENT_HASH_VERSION, fnv1a_32, hash_to_unit, select_variant
from .engine import ExperimentEngine
from .simulate import simulate_experiment

__all__ = [
    "ConversionEvent",
    "DemographicFilter",
    "ExperimentAssignment",
    "ExperimentConfig",
    "ExperimentResults",
    "ExperimentStatus",
    "ExperimentVariant",
    "ExposureEvent",
    "FilterOperator",
    "PerformanceFilter",
    "Segmentation",
    "SuccessCriteria",
    "VariantResults",
    "ASSIGNMENT_HASH_VERSION",
    "fnv1a_32",
    "hash_to_unit",
    "select_variant",
    "ExperimentEngine",
    "simulate_experiment",
]
