"""Re-express a document under another numeric format and/or unit.

All arithmetic is exact (``decimal.Decimal``) until the final rounding to
the target's decimal digit count, which rounds half away from zero.

Coordinate-mode translation:
    Absolute positions are tracked through the source replay, scaled, and
    rounded once.  Incremental targets receive the difference between
    consecutive *rounded* absolute positions, so rounding never drifts.

Refused input (``UnsupportedConversionError``):
    - apertures defined by a macro (macro geometry is never evaluated);
    - mid-stream unit or mode codes (G70, G71, G90, G91).

The target is appended to in place.  On failure it is left partially
populated and should be discarded.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from photoplot.document import coordinates
from photoplot.document.apertures import Aperture, ApertureShape
from photoplot.document.format_spec import CoordinateMode, FormatValues, unit_ratio
from photoplot.document.functions import CodeOnly, Function, Move
from photoplot.errors import UnsupportedConversionError, ValidationError
from photoplot.geometry.replay import MotionStep, Replayer

if TYPE_CHECKING:
    from photoplot.gerber import GerberDocument

logger = logging.getLogger(__name__)

DEFAULT_MODIFIER_PLACES = 6

MODE_CODES = frozenset({"G70", "G71", "G90", "G91"})

# Modifier positions that carry lengths; others (vertex count, rotation)
# are unit-free.
_LENGTH_MODIFIERS = {
    ApertureShape.CIRCLE: (0, 1),
    ApertureShape.RECTANGLE: (0, 1, 2),
    ApertureShape.OBROUND: (0, 1, 2),
    ApertureShape.POLYGON: (0, 3),
}


def decimal_text(value: Decimal) -> str:
    """Plain, minimal decimal text: ``25.4000`` -> ``25.4``, ``2.5E+2`` -> ``250``."""
    text = format(value.normalize(), "f")
    return "0" if text in ("-0", "") else text


def scale_modifiers(aperture: Aperture, ratio: Decimal, places: int) -> tuple[str, ...]:
    """Scale the length modifiers of a standard aperture by *ratio*."""
    if ratio == 1:
        return aperture.modifiers
    lengths = _LENGTH_MODIFIERS[aperture.shape]
    return tuple(
        decimal_text(coordinates.quantize(Decimal(raw) * ratio, places))
        if idx in lengths else raw
        for idx, raw in enumerate(aperture.modifiers)
    )


def _check_convertible(source: GerberDocument) -> None:
    macro_codes = sorted(
        code for code, ap in source.apertures().items() if not ap.geometry_resolved
    )
    if macro_codes:
        raise UnsupportedConversionError(
            f"Apertures {', '.join(macro_codes)} reference macros and cannot be converted"
        )
    for index, record in enumerate(source.functions()):
        code = record.code if isinstance(record, (CodeOnly, Move)) else None
        if code in MODE_CODES:
            raise UnsupportedConversionError(
                f"Function {index}: mode code {code} cannot be carried into another format"
            )


class _CoordinateTranslator:
    """Turn source motion steps into target coordinate strings."""

    def __init__(self, target_fmt: FormatValues, ratio: Decimal) -> None:
        self.fmt = target_fmt
        self.ratio = ratio
        self.position = [Decimal(0), Decimal(0)]

    def translate(self, step: MotionStep) -> str:
        values: dict[str, Decimal] = {}
        for idx, axis in enumerate(("X", "Y")):
            rounded = coordinates.quantize(step.end[idx] * self.ratio, self.fmt.decimal)
            if axis in step.offsets:
                if self.fmt.effective_coordinates == CoordinateMode.ABSOLUTE:
                    values[axis] = rounded
                else:
                    values[axis] = rounded - self.position[idx]
            self.position[idx] = rounded
        for axis in ("I", "J"):
            if axis in step.offsets:
                values[axis] = step.offsets[axis] * self.ratio
        return coordinates.encode(values, self.fmt)


def convert(
    source: GerberDocument,
    target: GerberDocument,
    *,
    modifier_places: int = DEFAULT_MODIFIER_PLACES,
) -> GerberDocument:
    """Append *source*'s content to *target* in the target's format.

    Parameters
    ----------
    source : GerberDocument
        Document to read.  Never modified.
    target : GerberDocument
        Document with its own format already configured.
    modifier_places : int
        Decimal places kept when scaling aperture modifiers.

    Returns
    -------
    GerberDocument
        *target*, for chaining.

    Raises
    ------
    ValidationError
        If the target format has no digit widths, or a value does not fit.
    UnsupportedConversionError
        If the source uses macro apertures or mid-stream mode codes.
    """
    source_fmt = source.format_spec.values
    target_fmt = target.format_spec.values
    if not target_fmt.has_digits:
        raise ValidationError("Target document must have its format digit widths set")

    _check_convertible(source)
    ratio = unit_ratio(source_fmt.effective_unit, target_fmt.effective_unit)
    logger.info(
        "Converting %d functions: %s -> %s (ratio %s)",
        source.function_count(), source_fmt.effective_unit.value,
        target_fmt.effective_unit.value, ratio,
    )

    for name, macro in source.macros().items():
        if ratio == 1:
            target.define_macro(name, macro.lines)
        else:
            logger.warning("Macro %s dropped: macro bodies cannot be rescaled", name)

    for code, aperture in source.apertures().items():
        target.define_aperture(
            code,
            aperture.shape,
            scale_modifiers(aperture, ratio, modifier_places),
            blank=aperture.blank,
        )

    translator = _CoordinateTranslator(target_fmt, ratio)
    record: Function
    for record, step in Replayer(source_fmt).run(source.functions()):
        if step is not None:
            record = Move(coord=translator.translate(step), op=record.op, code=record.code)
        target.append(record)

    logger.info("Conversion complete: %d functions", target.function_count())
    return target
