"""Aperture definitions and the aperture table.

An aperture is a named tool shape used to draw or flash.  The four
standard shapes carry numeric modifiers whose meaning is fixed by the
format:

========== ==============================================
Circle     diameter [, hole]
Rectangle  x-size, y-size [, hole]
Obround    x-size, y-size [, hole]
Polygon    outer diameter, vertices [, rotation [, hole]]
========== ==============================================

Any other shape name refers to an aperture macro.  Macro geometry is never
evaluated, so such apertures report ``geometry_resolved = False``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Union

from photoplot.errors import ValidationError

logger = logging.getLogger(__name__)

APERTURE_CODE_RE = re.compile(r"^D0*([1-9]\d+)$")
MACRO_NAME_RE = re.compile(r"^[A-Za-z_.$][A-Za-z0-9_.$]*$")

_MODIFIER_SPLIT_RE = re.compile(r"[,Xx]")


class ApertureShape(str, Enum):
    CIRCLE = "Circle"
    RECTANGLE = "Rectangle"
    OBROUND = "Obround"
    POLYGON = "Polygon"

    @property
    def letter(self) -> str:
        return {"Circle": "C", "Rectangle": "R", "Obround": "O", "Polygon": "P"}[self.value]


_SHAPE_NAMES = {s.letter: s for s in ApertureShape} | {
    s.value.upper(): s for s in ApertureShape
}

# Minimum modifier count per standard shape.
_MIN_MODIFIERS = {
    ApertureShape.CIRCLE: 1,
    ApertureShape.RECTANGLE: 2,
    ApertureShape.OBROUND: 2,
    ApertureShape.POLYGON: 2,
}


@dataclass(frozen=True, slots=True)
class MacroReference:
    """Aperture shape defined by a named aperture macro."""

    name: str

    def __post_init__(self) -> None:
        if not MACRO_NAME_RE.match(self.name or ""):
            raise ValidationError(f"Invalid macro name {self.name!r}")


Shape = Union[ApertureShape, MacroReference]


def check_aperture_code(code: str) -> str:
    """Validate an aperture code and return its canonical form (``d010`` -> ``D10``).

    Raises
    ------
    ValidationError
        If *code* is empty or not ``D`` followed by a number >= 10.
    """
    if not isinstance(code, str) or not code.strip():
        raise ValidationError("Aperture code must be a non-empty string")
    m = APERTURE_CODE_RE.match(code.strip().upper())
    if m is None:
        raise ValidationError(
            f"Malformed aperture code {code!r} (expected D10 or higher)"
        )
    return f"D{int(m.group(1))}"


def resolve_shape(shape: str | Shape) -> Shape:
    """Map a shape letter, name, enum, or macro name to a ``Shape``."""
    if isinstance(shape, (ApertureShape, MacroReference)):
        return shape
    if not isinstance(shape, str) or not shape.strip():
        raise ValidationError(f"Aperture shape must be a non-empty string, got {shape!r}")
    token = shape.strip()
    standard = _SHAPE_NAMES.get(token.upper())
    if standard is not None:
        return standard
    return MacroReference(token)


def parse_modifiers(modifiers: str | Iterable[object] | None) -> tuple[str, ...]:
    """Normalize modifiers to a tuple of raw numeric strings.

    Accepts ``"0.02,0.01"``, ``"0.02X0.01"`` or any iterable of numbers or
    strings.  The raw text of each entry is preserved.
    """
    if modifiers is None:
        return ()
    if isinstance(modifiers, str):
        raw = [m.strip() for m in _MODIFIER_SPLIT_RE.split(modifiers)] if modifiers.strip() else []
    else:
        raw = [str(m).strip() for m in modifiers]

    for item in raw:
        try:
            finite = Decimal(item).is_finite()
        except InvalidOperation:
            finite = False
        if not finite:
            raise ValidationError(f"Aperture modifier {item!r} is not a number")
    return tuple(raw)


@dataclass(frozen=True, slots=True)
class Aperture:
    """One aperture table entry.

    Parameters
    ----------
    code : str
        Aperture code, e.g. ``"D10"``.
    shape : ApertureShape | MacroReference
        Standard shape or macro reference.
    modifiers : tuple[str, ...]
        Raw numeric modifiers in definition order.
    blank : bool
        Marks a non-drawing aperture (borders, annotations).  Such apertures
        are skipped by the geometry engine when blank-skipping is enabled.
    """

    code: str
    shape: Shape
    modifiers: tuple[str, ...] = ()
    blank: bool = False
    diameter: float | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        if isinstance(self.shape, ApertureShape):
            needed = _MIN_MODIFIERS[self.shape]
            if len(self.modifiers) < needed:
                raise ValidationError(
                    f"{self.shape.value} aperture {self.code} needs at least "
                    f"{needed} modifier(s), got {len(self.modifiers)}"
                )
            if self.shape == ApertureShape.POLYGON:
                vertices = Decimal(self.modifiers[1])
                if vertices != vertices.to_integral_value() or not 3 <= vertices <= 12:
                    raise ValidationError(
                        f"Polygon aperture {self.code} vertex count must be an "
                        f"integer in [3, 12], got {self.modifiers[1]}"
                    )
            if self.shape == ApertureShape.CIRCLE:
                object.__setattr__(self, "diameter", float(self.modifiers[0]))

    @property
    def geometry_resolved(self) -> bool:
        """``False`` when the shape is a macro the core cannot measure."""
        return isinstance(self.shape, ApertureShape)

    @property
    def macro_name(self) -> str | None:
        return self.shape.name if isinstance(self.shape, MacroReference) else None

    def numbers(self) -> tuple[float, ...]:
        return tuple(float(m) for m in self.modifiers)


class ApertureTable:
    """Aperture definitions keyed by code.  Redefinition overwrites."""

    def __init__(self) -> None:
        self._apertures: dict[str, Aperture] = {}

    def define(
        self,
        code: str,
        shape: str | Shape,
        modifiers: str | Iterable[object] | None = None,
        *,
        blank: bool = False,
    ) -> Aperture:
        """Create or replace the definition for *code*.

        Macro names are accepted before the macro itself is defined.

        Raises
        ------
        ValidationError
            On a malformed code, shape, or modifier list.
        """
        aperture = Aperture(
            code=check_aperture_code(code),
            shape=resolve_shape(shape),
            modifiers=parse_modifiers(modifiers),
            blank=bool(blank),
        )
        if aperture.code in self._apertures:
            logger.debug("Redefining aperture %s", aperture.code)
        self._apertures[aperture.code] = aperture
        return aperture

    def get(self, code: str) -> Aperture | None:
        return self._apertures.get(check_aperture_code(code))

    def all(self) -> dict[str, Aperture]:
        return dict(self._apertures)

    def __contains__(self, code: object) -> bool:
        if not isinstance(code, str):
            return False
        try:
            return check_aperture_code(code) in self._apertures
        except ValidationError:
            return False

    def __len__(self) -> int:
        return len(self._apertures)
