"""
Engine configuration.

Defaults mirror the constants the analytics layer has always used (100
Lloyd's iterations, 100 isolation trees of depth 10, a 0.7 anomaly cut-off).
Every value can be overridden through ``ANALYSIS_ENGINE_*`` environment
variables or by passing explicit arguments to the component constructors.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClusteringConfig(BaseModel):
    """K-means defaults."""

    max_iterations: int = Field(100, ge=1)
    tolerance: float = Field(1e-4, gt=0.0, description="Centroid displacement stop threshold")
    n_init: int = Field(1, ge=1, description="Independent initializations; best inertia wins")


class ForestConfig(BaseModel):
    """
    Isolation forest defaults.

    Notes:
    - subsample_size follows the original isolation-forest paper (256).
    - anomaly_threshold is only a default for callers; the detector itself
      never applies it implicitly.
    """

    num_trees: int = Field(100, ge=1)
    subsample_size: int = Field(256, ge=2)
    max_depth: int = Field(10, ge=1)
    n_jobs: int = Field(1, description="joblib workers used to build and score trees")
    anomaly_threshold: float = Field(0.7, gt=0.0, lt=1.0)


class ExperimentDefaults(BaseModel):
    """Experiment validation and analysis defaults."""

    traffic_tolerance: float = Field(0.01, ge=0.0, description="Allowed drift from 100% traffic")
    confidence_z: float = Field(1.96, gt=0.0, description="z used for 95% intervals")
    low_sample_size: int = Field(100, ge=0, description="Variants below this get a warning")
    srm_alpha: float = Field(0.01, gt=0.0, lt=1.0)


class EngineSettings(BaseSettings):
    """Global settings with environment overrides."""

    model_config = SettingsConfigDict(
        env_prefix="ANALYSIS_ENGINE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field("INFO", description="Level for the package logger")
    clustering: ClusteringConfig = ClusteringConfig()
    forest: ForestConfig = ForestConfig()
    experiments: ExperimentDefaults = ExperimentDefaults()


settings = EngineSettings()
