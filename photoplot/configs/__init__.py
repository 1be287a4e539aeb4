"""Configuration loading and validation."""

from photoplot.configs.loader import (
    ConversionConfig,
    LoggingConfig,
    PhotoplotConfig,
    ValidationConfig,
    load_config,
)

__all__ = [
    "ConversionConfig",
    "LoggingConfig",
    "PhotoplotConfig",
    "ValidationConfig",
    "load_config",
]
