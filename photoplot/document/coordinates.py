"""Coordinate codec: axis-word strings <-> exact decimal offsets.

A coordinate string is a run of axis words such as ``X010000Y-25I5J0``.
Digits without a decimal point are placed according to the active
``FormatValues``:

* leading-zero suppression -- digits are right-aligned, so the last
  ``decimal`` digits are the fraction;
* trailing-zero suppression -- digits are left-aligned, so the first
  ``integer`` digits are the whole part.

Values are kept as ``decimal.Decimal`` so that conversion between units
and formats is exact until the final rounding step.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from photoplot.document.format_spec import FormatValues, ZeroSuppression
from photoplot.errors import ValidationError

AXES = ("X", "Y", "I", "J")

_WORD_RE = re.compile(r"([A-Za-z])([+-]?)(\d*\.?\d*)")


def parse_words(coord: str) -> list[tuple[str, str, str]]:
    """Split *coord* into ``(axis, sign, digits)`` words.

    Raises
    ------
    ValidationError
        On unknown axis letters, repeated axes, empty numbers, or stray
        characters.
    """
    if not isinstance(coord, str):
        raise ValidationError(f"coordinate must be a string, got {coord!r}")
    text = coord.strip()
    words: list[tuple[str, str, str]] = []
    seen: set[str] = set()
    pos = 0
    while pos < len(text):
        m = _WORD_RE.match(text, pos)
        if m is None:
            raise ValidationError(
                f"Malformed coordinate {coord!r} at position {pos}"
            )
        axis, sign, digits = m.group(1).upper(), m.group(2), m.group(3)
        if axis not in AXES:
            raise ValidationError(f"Unknown axis {axis!r} in coordinate {coord!r}")
        if axis in seen:
            raise ValidationError(f"Axis {axis} repeated in coordinate {coord!r}")
        if digits in ("", "."):
            raise ValidationError(f"Axis {axis} has no value in coordinate {coord!r}")
        seen.add(axis)
        words.append((axis, sign, digits))
        pos = m.end()
    return words


def _decode_digits(digits: str, fmt: FormatValues) -> Decimal:
    if "." in digits:
        try:
            return Decimal(digits)
        except InvalidOperation:
            raise ValidationError(f"Invalid number {digits!r}") from None

    if not fmt.has_digits:
        raise ValidationError(
            "Format digit widths must be set before coordinates can be decoded"
        )
    width = fmt.integer + fmt.decimal
    if len(digits) > width:
        raise ValidationError(
            f"Coordinate {digits!r} has {len(digits)} digits, "
            f"format allows {width} ({fmt.integer}.{fmt.decimal})"
        )
    if fmt.effective_zero == ZeroSuppression.TRAILING:
        digits = digits.ljust(width, "0")
    return Decimal(int(digits)).scaleb(-fmt.decimal)


def decode(coord: str, fmt: FormatValues) -> dict[str, Decimal]:
    """Decode *coord* into ``{axis: value}`` under *fmt*.

    Parameters
    ----------
    coord : str
        Axis-word string, e.g. ``"X010000Y010000"``.  May be empty.
    fmt : FormatValues
        Format active when the coordinate was recorded.

    Returns
    -------
    dict[str, Decimal]
        Only the axes present in *coord*.
    """
    values: dict[str, Decimal] = {}
    for axis, sign, digits in parse_words(coord):
        value = _decode_digits(digits, fmt)
        values[axis] = -value if sign == "-" else value
    return values


def quantize(value: Decimal, places: int) -> Decimal:
    """Round half away from zero to *places* decimals."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def encode_value(value: Decimal, fmt: FormatValues) -> str:
    """Encode one signed value as a digit string under *fmt*.

    Raises
    ------
    ValidationError
        If *fmt* has no digit widths or the whole part does not fit.
    """
    if not fmt.has_digits:
        raise ValidationError("Target format digit widths are not set")
    scaled = int(quantize(value, fmt.decimal).scaleb(fmt.decimal))
    sign = "-" if scaled < 0 else ""
    magnitude = abs(scaled)
    width = fmt.integer + fmt.decimal
    if magnitude >= 10 ** width:
        raise ValidationError(
            f"Value {value} does not fit format {fmt.integer}.{fmt.decimal}"
        )
    if magnitude == 0:
        return "0"
    padded = str(magnitude).rjust(width, "0")
    if fmt.effective_zero == ZeroSuppression.TRAILING:
        return sign + padded.rstrip("0")
    return sign + padded.lstrip("0")


def encode(values: dict[str, Decimal], fmt: FormatValues) -> str:
    """Encode ``{axis: value}`` into an axis-word string in X, Y, I, J order."""
    return "".join(
        f"{axis}{encode_value(values[axis], fmt)}"
        for axis in AXES
        if axis in values
    )
