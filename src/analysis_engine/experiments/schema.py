"""
Experiment data models.

Dataclass schemas for experiment configuration, assignments, exposure and
conversion events, and analysis results.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

# Values carried in user context and profile maps.
MetricValue = Union[int, float, bool, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExperimentStatus(str, Enum):
    """Experiment lifecycle status."""
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class FilterOperator(str, Enum):
    """Comparison applied by a performance filter."""
    GT = "gt"
    LT = "lt"
    EQ = "eq"
    GTE = "gte"
    LTE = "lte"
    BETWEEN = "between"


@dataclass(frozen=True)
class PerformanceFilter:
    """Numeric eligibility rule on a context metric (e.g. accuracy >= 0.6)."""
    metric: str
    operator: Union[FilterOperator, str]
    value: Union[float, Tuple[float, float]]


@dataclass(frozen=True)
class DemographicFilter:
    """Categorical eligibility rule: context attribute must be one of ``values``."""
    attribute: str
    values: Tuple[str, ...]


@dataclass
class Segmentation:
    """Who may enter the experiment."""
    performance_filters: List[PerformanceFilter] = field(default_factory=list)
    demographic_filters: List[DemographicFilter] = field(default_factory=list)
    cognitive_profile_filters: List[str] = field(default_factory=list)


@dataclass
class SuccessCriteria:
    """Decision thresholds for the experiment."""
    primary_metric: str = "conversion"
    secondary_metrics: List[str] = field(default_factory=list)
    minimum_detectable_effect: float = 0.05  # relative lift
    statistical_power: float = 0.8
    significance_level: float = 0.05  # alpha
    minimum_sample_size: int = 1000


@dataclass(frozen=True)
class ExperimentVariant:
    """One arm of an experiment."""
    id: str
    traffic_percentage: float
    is_control: bool = False
    name: str = ""
    configuration: Dict[str, Any] = field(default_factory=dict, hash=False)


@dataclass
class ExperimentConfig:
    """Configuration for an A/B experiment."""
    id: str
    name: str
    variants: List[ExperimentVariant]
    description: str = ""
    hypothesis: str = ""
    target_metrics: List[str] = field(default_factory=list)
    success_criteria: SuccessCriteria = field(default_factory=SuccessCriteria)
    segmentation: Segmentation = field(default_factory=Segmentation)
    status: ExperimentStatus = ExperimentStatus.DRAFT
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @property
    def control(self) -> Optional[ExperimentVariant]:
        for variant in self.variants:
            if variant.is_control:
                return variant
        return None

    def variant(self, variant_id: str) -> Optional[ExperimentVariant]:
        for v in self.variants:
            if v.id == variant_id:
                return v
        return None


@dataclass
class ExposureEvent:
    """A user encountered the experiment treatment."""
    timestamp: datetime = field(default_factory=_utcnow)
    session_id: str = ""
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ConversionEvent:
    """A user performed a measured outcome action."""
    metric: str
    value: float
    timestamp: datetime = field(default_factory=_utcnow)
    session_id: str = ""
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ExperimentAssignment:
    """Sticky (user, experiment) -> variant mapping plus the user's event log."""
    user_id: str
    experiment_id: str
    variant_id: str
    assigned_at: datetime = field(default_factory=_utcnow)
    exposure_events: List[ExposureEvent] = field(default_factory=list)
    conversion_events: List[ConversionEvent] = field(default_factory=list)


@dataclass
class MetricResults:
    """Distribution of one target metric within a variant."""
    metric: str
    mean: float
    standard_deviation: float
    confidence_interval: Tuple[float, float]
    percentile_distribution: Dict[str, float]


@dataclass
class VariantResults:
    """Per-variant aggregates."""
    variant_id: str
    sample_size: int
    conversion_rate: float
    confidence_interval: Tuple[float, float]
    metrics: List[MetricResults] = field(default_factory=list)


@dataclass
class OverallResults:
    """Winner determination."""
    winner: Optional[str] = None
    winner_confidence: float = 0.0
    effect_size: float = 0.0
    practical_significance: bool = False


@dataclass
class PowerAnalysis:
    achieved_power: float
    required_sample_size: int
    current_sample_size: int
    days_to_significance: int


@dataclass
class StatisticalSignificance:
    p_value: float
    test_statistic: float
    is_significant: bool
    alpha: float
    power_analysis: PowerAnalysis


@dataclass
class SampleRatioCheck:
    """Observed vs configured traffic split."""
    passed: bool
    chi2: float
    p_value: float


@dataclass
class ExperimentResults:
    """Complete experiment analysis; a derived view, never stored."""
    experiment_id: str
    variants: List[VariantResults]
    overall_results: OverallResults
    statistical_significance: StatisticalSignificance
    sample_ratio: SampleRatioCheck
    recommendations: List[str] = field(default_factory=list)
    analysis_date: datetime = field(default_factory=_utcnow)

    def variant(self, variant_id: str) -> Optional[VariantResults]:
        for v in self.variants:
            if v.variant_id == variant_id:
                return v
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        sig = self.statistical_significance
        power = sig.power_analysis
        return {
            "experiment_id": self.experiment_id,
            "analysis_date": self.analysis_date.isoformat(),
            "variants": [
                {
                    "variant_id": v.variant_id,
                    "sample_size": v.sample_size,
                    "conversion_rate": v.conversion_rate,
                    "confidence_interval": list(v.confidence_interval),
                    "metrics": [
                        {
                            "metric": m.metric,
                            "mean": m.mean,
                            "standard_deviation": m.standard_deviation,
                            "confidence_interval": list(m.confidence_interval),
                            "percentile_distribution": dict(m.percentile_distribution),
                        }
                        for m in v.metrics
                    ],
                }
                for v in self.variants
            ],
            "overall_results": {
                "winner": self.overall_results.winner,
                "winner_confidence": self.overall_results.winner_confidence,
                "effect_size": self.overall_results.effect_size,
                "practical_significance": self.overall_results.practical_significance,
            },
            "statistical_significance": {
                "p_value": sig.p_value,
                "test_statistic": sig.test_statistic,
                "is_significant": sig.is_significant,
                "alpha": sig.alpha,
                "power_analysis": {
                    "achieved_power": power.achieved_power,
                    "required_sample_size": power.required_sample_size,
                    "current_sample_size": power.current_sample_size,
                    "days_to_significance": power.days_to_significance,
                },
            },
            "sample_ratio": {
                "passed": self.sample_ratio.passed,
                "chi2": self.sample_ratio.chi2,
                "p_value": self.sample_ratio.p_value,
            },
            "recommendations": list(self.recommendations),
        }
