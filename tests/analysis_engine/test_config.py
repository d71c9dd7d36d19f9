"""Tests for settings, logging setup and the exception hierarchy."""
import logging

from src.analysis_engine.config import EngineSettings
from src.analysis_engine.exceptions import (
    AnalysisEngineError,
    ProbabilityDomainError,
    ValidationError,
)
from src.analysis_engine.logging_config import setup_logging


def test_default_settings():
    s = EngineSettings()
    assert s.clustering.max_iterations == 100
    assert s.forest.num_trees == 100
    assert s.forest.subsample_size == 256
    assert s.experiments.confidence_z == 1.96


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("ANALYSIS_ENGINE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("ANALYSIS_ENGINE_FOREST__NUM_TREES", "25")
    s = EngineSettings()
    assert s.log_level == "DEBUG"
    assert s.forest.num_trees == 25


def test_setup_logging_is_idempotent():
    name = "src.analysis_engine.tests"
    logger = setup_logging("warning", logger_name=name)
    setup_logging("warning", logger_name=name)
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_exception_hierarchy():
    assert issubclass(ValidationError, AnalysisEngineError)
    assert issubclass(ProbabilityDomainError, ValueError)
