"""Configuration loading, schema, and defaults."""

from rust_diff_analyzer.config.loader import ConfigError, load_config
from rust_diff_analyzer.config.schema import (
    ClassificationConfig,
    Config,
    ConfigValidationError,
    LimitsConfig,
    OutputConfig,
    WeightsConfig,
)

__all__ = [
    "ClassificationConfig",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "LimitsConfig",
    "OutputConfig",
    "WeightsConfig",
    "load_config",
]
