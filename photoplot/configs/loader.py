"""Configuration loader for photoplot.

Loads and validates ``defaults.yaml`` (or a user file with the same
layout) into frozen dataclasses.  Missing sections or keys fall back to
the shipped defaults, so a user file only needs the values it changes.

Usage::

    from photoplot.configs.loader import load_config
    cfg = load_config()                      # shipped defaults
    cfg = load_config("/path/photoplot.yaml")
    doc = GerberDocument.from_config(cfg)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from photoplot.errors import ConfigError
from photoplot.utils.fs import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_MAX_MODIFIER_PLACES = 12


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationConfig:
    """Document validation flags."""

    ignore_invalid: bool = False
    ignore_blank: bool = False


@dataclass(frozen=True)
class ConversionConfig:
    """Conversion settings.

    ``modifier_places`` bounds the decimals kept when aperture modifiers
    are rescaled, which matters for millimetre-to-inch conversion where
    the exact result does not terminate.
    """

    modifier_places: int = 6


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    json: bool = False
    file: str | None = None


@dataclass(frozen=True)
class PhotoplotConfig:
    """Top-level configuration."""

    validation: ValidationConfig
    conversion: ConversionConfig
    logging: LoggingConfig


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{name}' must be a mapping, got {type(section).__name__}")
    return section


def _bool(section: str, key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{section}.{key} must be true or false, got {value!r}")
    return value


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _parse(data: dict[str, Any]) -> PhotoplotConfig:
    val = _section(data, "validation")
    validation = ValidationConfig(
        ignore_invalid=_bool("validation", "ignore_invalid", val.get("ignore_invalid", False)),
        ignore_blank=_bool("validation", "ignore_blank", val.get("ignore_blank", False)),
    )

    conv = _section(data, "conversion")
    places = conv.get("modifier_places", 6)
    if isinstance(places, bool) or not isinstance(places, int):
        raise ConfigError(f"conversion.modifier_places must be an integer, got {places!r}")
    if not 0 <= places <= _MAX_MODIFIER_PLACES:
        raise ConfigError(
            f"conversion.modifier_places must be in [0, {_MAX_MODIFIER_PLACES}], got {places}"
        )
    conversion = ConversionConfig(modifier_places=places)

    log = _section(data, "logging")
    level = str(log.get("level", "INFO")).upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {_LOG_LEVELS}, got {level!r}")
    log_file = log.get("file")
    if log_file is not None and not isinstance(log_file, str):
        raise ConfigError(f"logging.file must be a path string, got {log_file!r}")
    logging_cfg = LoggingConfig(
        level=level,
        json=_bool("logging", "json", log.get("json", False)),
        file=log_file,
    )

    unknown = set(data) - {"validation", "conversion", "logging"}
    if unknown:
        raise ConfigError(f"Unknown configuration sections: {sorted(unknown)}")

    return PhotoplotConfig(validation=validation, conversion=conversion, logging=logging_cfg)


def load_config(path: str | Path | None = None) -> PhotoplotConfig:
    """Load and validate configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        User configuration file.  ``None`` loads only the shipped defaults.

    Returns
    -------
    PhotoplotConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    data: dict[str, Any] = load_yaml(DEFAULT_CONFIG_PATH) or {}

    if path is not None:
        path = Path(path)
        logger.info("Loading configuration from %s", path)
        user = load_yaml(path)
        if user is None:
            raise ConfigError(f"Empty configuration file: {path}")
        if not isinstance(user, dict):
            raise ConfigError(f"Configuration file {path} must contain a mapping")
        data = _merge(data, user)

    return _parse(data)
