"""
Exceptions raised by the analysis engine.

Configuration problems surface as ``ValidationError`` at creation time.
Runtime query paths never raise; they return ``None`` or empty results.
"""


class AnalysisEngineError(Exception):
    """Base exception for analysis engine failures."""
    pass


class ValidationError(AnalysisEngineError, ValueError):
    """Raised when an experiment configuration violates an invariant."""
    pass


class ProbabilityDomainError(AnalysisEngineError, ValueError):
    """Raised when a probability falls outside the open interval (0, 1)."""
    pass
