"""Tests for the command-line tool."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from photoplot.cli import main
from photoplot.files.document_file import SCHEMA_VERSION, load_document


SIMPLE = {
    "schema": SCHEMA_VERSION,
    "format": {"zero": "L", "coordinates": "A", "format": {"integer": 2, "decimal": 4}, "unit": "in"},
    "apertures": [
        {"code": "D10", "shape": "C", "modifiers": ["2"]},
        {"code": "D11", "shape": "C", "modifiers": ["6"], "blank": True},
    ],
    "functions": [
        {"aperture": "D10"},
        {"coord": "X010000Y010000", "op": "D03"},
        {"aperture": "D11"},
        {"coord": "X050000Y010000", "op": "D03"},
    ],
}


def write_yaml(path: Path, data: object) -> Path:
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture()
def simple_file(tmp_path: Path) -> Path:
    return write_yaml(tmp_path / "simple.yaml", SIMPLE)


# ---------------------------------------------------------------------------
# bbox
# ---------------------------------------------------------------------------


class TestBbox:
    def test_text_output(self, simple_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["bbox", str(simple_file)]) == 0
        out = capsys.readouterr().out
        assert "min: (0, -2)  max: (8, 4)" in out
        assert "size: 8 x 6 Inch" in out

    def test_ignore_blank(self, simple_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["bbox", str(simple_file), "--ignore-blank", "--json"]) == 0
        box = json.loads(capsys.readouterr().out)
        assert (box["min_x"], box["min_y"], box["max_x"], box["max_y"]) == (0.0, 0.0, 2.0, 2.0)
        assert box["unit"] == "Inch"
        assert box["unresolved_apertures"] == []

    def test_macro_apertures_reported(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        data = {
            **SIMPLE,
            "apertures": [{"code": "D10", "shape": "THERM"}],
            "functions": SIMPLE["functions"][:2],
        }
        path = write_yaml(tmp_path / "macro.yaml", data)
        assert main(["bbox", str(path)]) == 0
        assert "approximate: macro apertures D10" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# convert
# ---------------------------------------------------------------------------


class TestConvert:
    def test_to_file(self, simple_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "simple_mm.yaml"
        code = main([
            "convert", str(simple_file),
            "--unit", "mm", "--integer", "3", "--decimal", "4", "-o", str(out),
        ])
        assert code == 0
        doc = load_document(out)
        assert doc.get_aperture("D10").modifiers == ("50.8",)
        assert doc.get_aperture("D11").blank
        assert doc.functions()[1].coord == "X254000Y254000"

    def test_to_stdout(self, simple_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = main([
            "convert", str(simple_file), "--unit", "in", "--integer", "2",
            "--decimal", "3", "--zero", "T", "--coordinates", "I",
        ])
        assert code == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["format"]["zero"] == "Trailing"
        assert data["format"]["coordinates"] == "Incremental"
        assert [f.get("coord") for f in data["functions"]] == [None, "X01Y01", None, "X04Y0"]

    def test_refused_conversion(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        data = {**SIMPLE, "apertures": [{"code": "D10", "shape": "THERM"}], "functions": []}
        path = write_yaml(tmp_path / "macro.yaml", data)
        code = main(["convert", str(path), "--unit", "mm", "--integer", "3", "--decimal", "4"])
        assert code == 1
        assert "error:" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Errors and configuration
# ---------------------------------------------------------------------------


class TestErrors:
    def test_missing_document(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["bbox", str(tmp_path / "missing.yaml")]) == 1
        assert "error:" in capsys.readouterr().err

    def test_invalid_document(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_yaml(tmp_path / "bad.yaml", {**SIMPLE, "schema": "other"})
        assert main(["bbox", str(path)]) == 1
        assert "Invalid document file" in capsys.readouterr().err

    def test_bad_config(
        self, simple_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config = write_yaml(tmp_path / "cfg.yaml", {"conversion": {"modifier_places": 99}})
        assert main(["--config", str(config), "bbox", str(simple_file)]) == 2
        assert "modifier_places" in capsys.readouterr().err

    def test_config_flags_apply(
        self, simple_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config = write_yaml(tmp_path / "cfg.yaml", {"validation": {"ignore_blank": True}})
        assert main(["--config", str(config), "bbox", str(simple_file), "--json"]) == 0
        box = json.loads(capsys.readouterr().out)
        assert box["max_x"] == 2.0

    def test_json_logs(self, simple_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--json-logs", "--log-level", "INFO", "bbox", str(simple_file)]) == 0
        lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
        assert lines
        record = json.loads(lines[0])
        assert record["lvl"] == "INFO"
        assert record["doc"] == str(simple_file)
