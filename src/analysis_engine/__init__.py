"""
Analysis engine for the reaction game's product analytics.

Two standalone subsystems: an A/B experimentation engine and unsupervised
learning primitives (K-means, Isolation Forest) over behavioural features.
"""

from .exceptions import AnalysisEngineError, ProbabilityDomainError, ValidationError
from .experiments import ExperimentEngine
from .learning import IsolationForestDetector, KMeansClusterer

__all__ = [
    "AnalysisEngineError",
    "ProbabilityDomainError",
    "ValidationError",
    "ExperimentEngine",
    "IsolationForestDetector",
    "KMeansClusterer",
]
