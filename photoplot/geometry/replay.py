"""Modal state machine shared by the geometry and conversion engines.

Replaying a function sequence resolves everything that depends on earlier
statements: the cursor position, the selected aperture, interpolation and
quadrant modes, region mode, and the operation repeated by modal moves.
Each move is reported as a ``MotionStep`` holding absolute start and end
points in exact decimals.

Tracks:
    - Cursor (X, Y), starting at the origin
    - Current aperture code
    - Interpolation mode (G01/G02/G03), initially linear
    - Quadrant mode (G74 single / G75 multi), initially single
    - Region mode (G36/G37)
    - Coordinate mode, from the format or deprecated G90/G91
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from decimal import Decimal

from photoplot.document import coordinates
from photoplot.document.format_spec import CoordinateMode, FormatValues
from photoplot.document.functions import (
    CIRCULAR_CCW,
    CIRCULAR_CW,
    INTERPOLATION_CODES,
    LINEAR,
    MULTI_QUADRANT,
    REGION_OFF,
    REGION_ON,
    SINGLE_QUADRANT,
    ApertureSelect,
    CodeOnly,
    Function,
    Move,
    OpCode,
)
from photoplot.errors import ValidationError

logger = logging.getLogger(__name__)

Point = tuple[Decimal, Decimal]

_ZERO = Decimal(0)


@dataclass(frozen=True, slots=True)
class MotionStep:
    """Resolved effect of one ``Move`` record.

    Attributes
    ----------
    index : int
        Position of the move in the sequence.
    op : OpCode
        Operation after modal resolution.
    start, end : Point
        Absolute cursor before and after the move.
    offsets : dict[str, Decimal]
        Decoded axis words exactly as written (``X``, ``Y``, ``I``, ``J``).
    interpolation : str
        ``G01``, ``G02`` or ``G03`` in effect for this move.
    multi_quadrant : bool
        ``True`` under G75.
    aperture : str | None
        Selected aperture code.
    in_region : bool
        ``True`` between G36 and G37.
    """

    index: int
    op: OpCode
    start: Point
    end: Point
    offsets: dict[str, Decimal]
    interpolation: str
    multi_quadrant: bool
    aperture: str | None
    in_region: bool

    @property
    def center_offset(self) -> tuple[Decimal, Decimal] | None:
        """``(I, J)`` if either was given, missing one defaulting to zero."""
        if "I" not in self.offsets and "J" not in self.offsets:
            return None
        return self.offsets.get("I", _ZERO), self.offsets.get("J", _ZERO)

    @property
    def clockwise(self) -> bool:
        return self.interpolation == CIRCULAR_CW

    @property
    def circular(self) -> bool:
        return self.interpolation in (CIRCULAR_CW, CIRCULAR_CCW)


class Replayer:
    """Walk a function sequence and resolve modal state.

    Parameters
    ----------
    fmt : FormatValues
        Format the sequence was recorded under.
    """

    def __init__(self, fmt: FormatValues) -> None:
        self.fmt = fmt
        self.reset()

    def reset(self) -> None:
        self.cursor: Point = (_ZERO, _ZERO)
        self.aperture: str | None = None
        self.interpolation = LINEAR
        self.multi_quadrant = False
        self.in_region = False
        self.mode = self.fmt.effective_coordinates
        self.last_op: OpCode | None = None

    def _apply_code(self, code: str) -> None:
        if code in INTERPOLATION_CODES:
            self.interpolation = code
        elif code == SINGLE_QUADRANT:
            self.multi_quadrant = False
        elif code == MULTI_QUADRANT:
            self.multi_quadrant = True
        elif code == REGION_ON:
            self.in_region = True
        elif code == REGION_OFF:
            self.in_region = False
        elif code == "G90":
            self.mode = CoordinateMode.ABSOLUTE
        elif code == "G91":
            self.mode = CoordinateMode.INCREMENTAL
        elif code in ("G70", "G71"):
            logger.warning(
                "Unit code %s ignored; the document format sets units (%s)",
                code, self.fmt.effective_unit.value,
            )

    def _move(self, index: int, record: Move) -> MotionStep:
        if record.code is not None:
            self._apply_code(record.code)

        op = record.op
        if op is None:
            if self.last_op != OpCode.DRAW:
                raise ValidationError(
                    f"Function {index}: coordinate without operation code "
                    f"after {self.last_op.value if self.last_op else 'no operation'}"
                )
            op = self.last_op

        offsets = coordinates.decode(record.coord, self.fmt)
        x, y = self.cursor
        if self.mode == CoordinateMode.ABSOLUTE:
            end = (offsets.get("X", x), offsets.get("Y", y))
        else:
            end = (x + offsets.get("X", _ZERO), y + offsets.get("Y", _ZERO))

        step = MotionStep(
            index=index,
            op=op,
            start=self.cursor,
            end=end,
            offsets=offsets,
            interpolation=self.interpolation,
            multi_quadrant=self.multi_quadrant,
            aperture=self.aperture,
            in_region=self.in_region,
        )
        self.cursor = end
        self.last_op = op
        return step

    def run(self, functions: Iterable[Function]) -> Iterator[tuple[Function, MotionStep | None]]:
        """Yield every record with its ``MotionStep`` (``None`` for non-moves)."""
        self.reset()
        for index, record in enumerate(functions):
            step = None
            if isinstance(record, ApertureSelect):
                self.aperture = record.code
            elif isinstance(record, CodeOnly):
                self._apply_code(record.code)
            elif isinstance(record, Move):
                step = self._move(index, record)
            yield record, step
