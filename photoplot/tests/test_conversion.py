"""Tests for format and unit conversion."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from photoplot.conversion.converter import decimal_text
from photoplot.document.format_spec import Unit
from photoplot.document.functions import ApertureSelect, CodeOnly, Move, OpCode, Parameter
from photoplot.errors import UnsupportedConversionError, ValidationError
from photoplot.gerber import GerberDocument
from photoplot.tests.conftest import make_document


def coords(doc: GerberDocument) -> list[str]:
    return [f.coord for f in doc.functions() if isinstance(f, Move)]


# ---------------------------------------------------------------------------
# Unit scaling
# ---------------------------------------------------------------------------


class TestUnitScaling:
    def test_inch_to_mm(self, mm_target: GerberDocument) -> None:
        src = make_document()
        src.define_aperture("D10", "C", "1.0")
        src.function(aperture="D10")
        src.function(coord="X010000Y010000", op="D03")

        src.convert(mm_target)

        assert mm_target.get_aperture("D10").modifiers == ("25.4",)
        assert mm_target.functions() == (
            ApertureSelect("D10"),
            Move("X254000Y254000", OpCode.FLASH),
        )
        src_box = src.bounding_box().as_tuple()
        dst_box = mm_target.bounding_box().as_tuple()
        assert dst_box == pytest.approx(tuple(v * 25.4 for v in src_box))

    def test_source_untouched(self, mm_target: GerberDocument) -> None:
        src = make_document()
        src.define_aperture("D10", "C", "2")
        src.function(aperture="D10")
        src.function(coord="X010000Y010000", op="D03")
        src.convert(mm_target)
        assert src.get_mode() is Unit.INCH
        assert src.get_aperture("D10").modifiers == ("2",)
        assert coords(src) == ["X010000Y010000"]
        assert mm_target.get_format()["format"] == {"integer": 3, "decimal": 4}

    def test_length_modifiers_only(self, mm_target: GerberDocument) -> None:
        src = make_document()
        src.define_aperture("D10", "R", "0.1X0.05")
        src.define_aperture("D11", "P", "0.5,6,30,0.1")
        src.define_aperture("D12", "O", "0.2,0.1,0.05", blank=True)
        src.convert(mm_target)
        assert mm_target.get_aperture("D10").modifiers == ("2.54", "1.27")
        assert mm_target.get_aperture("D11").modifiers == ("12.7", "6", "30", "2.54")
        d12 = mm_target.get_aperture("D12")
        assert d12.modifiers == ("5.08", "2.54", "1.27")
        assert d12.blank

    def test_mm_to_inch_modifier_places(self) -> None:
        src = make_document(unit="mm", integer=3, decimal=3)
        src.define_aperture("D10", "C", "1")
        src.define_aperture("D11", "P", "25.4,6,30,2.54")
        target = make_document()
        src.convert(target)
        assert target.get_aperture("D10").modifiers == ("0.03937",)
        assert target.get_aperture("D11").modifiers == ("1", "6", "30", "0.1")

        coarse = make_document(unit="mm", integer=3, decimal=3, modifier_places=2)
        coarse.define_aperture("D10", "C", "1")
        target = make_document()
        coarse.convert(target)
        assert target.get_aperture("D10").modifiers == ("0.04",)

    def test_arc_offsets_scaled(self, mm_target: GerberDocument) -> None:
        src = make_document()
        src.define_aperture("D10", "C", "0.1")
        src.function(aperture="D10")
        src.function(func="G75")
        src.function(coord="X10000Y0", op="D02")
        src.function(func="G03", coord="X-10000Y0I-10000J0", op="D01")
        src.convert(mm_target)
        assert coords(mm_target) == ["X254000Y0", "X-254000Y0I-254000J0"]
        assert mm_target.functions()[-1].code == "G03"
        assert mm_target.width() == pytest.approx(src.width() * 25.4)

    def test_value_too_large_for_target(self, mm_target: GerberDocument) -> None:
        src = make_document()
        src.function(coord="X500000Y0", op="D02")
        with pytest.raises(ValidationError, match="does not fit"):
            src.convert(mm_target)


# ---------------------------------------------------------------------------
# Rounding and coordinate modes
# ---------------------------------------------------------------------------


class TestRounding:
    def test_half_away_from_zero(self) -> None:
        src = make_document(unit="mm", integer=3, decimal=3)
        src.function(coord="X125Y-125", op="D02")
        target = make_document(unit="mm", integer=3, decimal=2)
        src.convert(target)
        assert coords(target) == ["X13Y-13"]

    def test_absolute_to_incremental(self) -> None:
        src = make_document()
        src.define_aperture("D10", "C", "2")
        src.function(aperture="D10")
        src.function(coord="X10000Y10000", op="D02")
        src.function(coord="X30000Y10000", op="D01")
        src.function(coord="X30000Y40000", op="D01")
        target = make_document(coordinates="I")
        src.convert(target)
        assert coords(target) == ["X10000Y10000", "X20000Y0", "X0Y30000"]
        assert target.bounding_box().as_tuple() == src.bounding_box().as_tuple()

    def test_incremental_to_absolute(self) -> None:
        src = make_document(coordinates="I")
        src.function(coord="X10000Y10000", op="D02")
        src.function(coord="X10000", op="D02")
        target = make_document()
        src.convert(target)
        assert coords(target) == ["X10000Y10000", "X20000"]

    def test_incremental_rounding_does_not_drift(self) -> None:
        src = make_document(unit="mm", integer=3, decimal=3)
        for coord in ("X125", "X250", "X375"):
            src.function(coord=coord, op="D02")
        target = make_document(unit="mm", integer=3, decimal=2, coordinates="I")
        src.convert(target)
        assert coords(target) == ["X13", "X12", "X13"]

    def test_trailing_suppression_target(self) -> None:
        src = make_document()
        src.function(coord="X15000Y0", op="D02")
        target = make_document(zero="T")
        src.convert(target)
        assert coords(target) == ["X015Y0"]

    def test_decimal_text(self) -> None:
        assert decimal_text(Decimal("25.4000")) == "25.4"
        assert decimal_text(Decimal("2.5E+2")) == "250"
        assert decimal_text(Decimal("-0.000")) == "0"


# ---------------------------------------------------------------------------
# Carried records
# ---------------------------------------------------------------------------


class TestCarriedRecords:
    def test_non_move_records_copied(self, mm_target: GerberDocument) -> None:
        src = make_document()
        src.function(comment="top copper")
        src.function(param="LPD")
        src.function(func="G75")
        src.convert(mm_target)
        assert mm_target.functions() == (
            CodeOnly("G04", "top copper"),
            Parameter("LPD"),
            CodeOnly("G75"),
        )

    def test_modal_moves_need_permissive_target(self) -> None:
        src = make_document(ignore_invalid=True)
        src.define_aperture("D10", "C", "1")
        src.function(aperture="D10")
        src.function(coord="X10000Y0", op="D01")
        src.function(coord="X20000Y0")
        target = make_document(ignore_invalid=True)
        src.convert(target)
        assert target.functions()[-1] == Move("X20000Y0", None)

        strict = make_document()
        with pytest.raises(ValidationError, match="no operation code"):
            src.convert(strict)

    def test_macros_copied_when_units_match(self) -> None:
        src = make_document()
        src.define_macro("CIRC", ["1,1,$1,0,0"])
        target = make_document(integer=3, decimal=5)
        src.convert(target)
        assert target.get_macro("CIRC").lines == ("1,1,$1,0,0",)

    def test_macros_dropped_across_units(
        self, mm_target: GerberDocument, caplog: pytest.LogCaptureFixture
    ) -> None:
        src = make_document()
        src.define_macro("CIRC", ["1,1,$1,0,0"])
        with caplog.at_level(logging.WARNING, logger="photoplot"):
            src.convert(mm_target)
        assert mm_target.macros() == {}
        assert "CIRC" in caplog.text


# ---------------------------------------------------------------------------
# Refused conversions
# ---------------------------------------------------------------------------


class TestRefused:
    def test_macro_aperture(self, mm_target: GerberDocument) -> None:
        src = make_document()
        src.define_aperture("D20", "UNDEFINEDMACRO", "0.1")
        with pytest.raises(UnsupportedConversionError, match="D20"):
            src.convert(mm_target)
        assert "D20" in src.last_error()
        assert "D20" in mm_target.last_error()

    @pytest.mark.parametrize("code", ["G70", "G71", "G90", "G91"])
    def test_mode_codes(self, mm_target: GerberDocument, code: str) -> None:
        src = make_document(ignore_invalid=True)
        src.function(func=code)
        with pytest.raises(UnsupportedConversionError, match=code):
            src.convert(mm_target)

    def test_target_needs_digits(self) -> None:
        src = make_document()
        target = GerberDocument()
        target.set_format(unit="mm")
        with pytest.raises(ValidationError, match="digit widths"):
            src.convert(target)

    def test_into_itself(self) -> None:
        src = make_document()
        with pytest.raises(UnsupportedConversionError, match="itself"):
            src.convert(src)
