"""Configuration module for IPEDSR."""

from .settings import config, DatabaseConfig, AppConfig, Config
from .config_loader import ConfigurationError, load_survey_data
from .survey_registry import (
    FormatChange,
    SurveyDefinition,
    SurveySummary,
    EraSegment,
    SurveyLineage,
    SurveyRegistry,
    load_registry,
    get_default_registry,
)

__all__ = [
    # Settings
    "config",
    "DatabaseConfig",
    "AppConfig",
    "Config",
    # Loading
    "ConfigurationError",
    "load_survey_data",
    # Survey Registry
    "FormatChange",
    "SurveyDefinition",
    "SurveySummary",
    "EraSegment",
    "SurveyLineage",
    "SurveyRegistry",
    "load_registry",
    "get_default_registry",
]
