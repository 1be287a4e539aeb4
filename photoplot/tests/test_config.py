"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from photoplot.configs.loader import PhotoplotConfig, load_config
from photoplot.errors import ConfigError


def write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "photoplot.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_shipped_defaults(self) -> None:
        cfg = load_config()
        assert isinstance(cfg, PhotoplotConfig)
        assert cfg.validation.ignore_invalid is False
        assert cfg.validation.ignore_blank is False
        assert cfg.conversion.modifier_places == 6
        assert cfg.logging.level == "INFO"
        assert cfg.logging.json is False
        assert cfg.logging.file is None

    def test_frozen(self) -> None:
        cfg = load_config()
        with pytest.raises(AttributeError):
            cfg.conversion.modifier_places = 2  # type: ignore[misc]


class TestOverrides:
    def test_partial_override(self, tmp_path: Path) -> None:
        cfg = load_config(write(tmp_path, "conversion:\n  modifier_places: 3\n"))
        assert cfg.conversion.modifier_places == 3
        assert cfg.logging.level == "INFO"

    def test_section_keys_merge(self, tmp_path: Path) -> None:
        cfg = load_config(write(tmp_path, "logging:\n  json: true\n  level: debug\n"))
        assert cfg.logging.json is True
        assert cfg.logging.level == "DEBUG"
        assert cfg.logging.file is None

    def test_validation_flags(self, tmp_path: Path) -> None:
        cfg = load_config(write(tmp_path, "validation:\n  ignore_invalid: true\n"))
        assert cfg.validation.ignore_invalid is True
        assert cfg.validation.ignore_blank is False


class TestRejected:
    @pytest.mark.parametrize("text, match", [
        ("conversion:\n  modifier_places: 13\n", "modifier_places"),
        ("conversion:\n  modifier_places: two\n", "integer"),
        ("conversion:\n  modifier_places: true\n", "integer"),
        ("validation:\n  ignore_blank: maybe\n", "true or false"),
        ("logging:\n  level: LOUD\n", "logging.level"),
        ("logging:\n  file: 5\n", "logging.file"),
        ("validation: 5\n", "mapping"),
        ("plotting:\n  speed: 1\n", "Unknown configuration sections"),
        ("- a\n- b\n", "mapping"),
    ])
    def test_invalid_values(self, tmp_path: Path, text: str, match: str) -> None:
        with pytest.raises(ConfigError, match=match):
            load_config(write(tmp_path, text))

    def test_empty_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Empty"):
            load_config(write(tmp_path, ""))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")
