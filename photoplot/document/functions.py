"""Function records and the append-only function sequence.

Every statement of a photoplotter program is an immutable, slotted
dataclass.  Records normalize their own syntax on construction (``G1`` ->
``G01``, ``1`` -> ``D01``); whether a record is *acceptable* in a given
document (known code, defined aperture, decodable coordinate) is decided
by ``FunctionSequence.append``.

Records
-------
``ApertureSelect``  select the current aperture (``D10`` ...)
``CodeOnly``        a standalone G/M code, optionally a ``G04`` comment
``Move``            coordinate data with a D01/D02/D03 operation
``Parameter``       a repeatable special parameter (``LPD``, ``SRX2Y2...``)
"""

from __future__ import annotations

import logging
import re
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Any

from photoplot.document import coordinates
from photoplot.document.apertures import ApertureTable, check_aperture_code
from photoplot.document.format_spec import FormatSpec
from photoplot.errors import (
    FunctionIndexError,
    UndefinedApertureError,
    UnknownCodeError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Code tables
# ---------------------------------------------------------------------------

LINEAR = "G01"
CIRCULAR_CW = "G02"
CIRCULAR_CCW = "G03"
COMMENT = "G04"
REGION_ON = "G36"
REGION_OFF = "G37"
SINGLE_QUADRANT = "G74"
MULTI_QUADRANT = "G75"
END_OF_PROGRAM = "M02"

RECOGNIZED_CODES = frozenset({
    LINEAR, CIRCULAR_CW, CIRCULAR_CCW, COMMENT,
    REGION_ON, REGION_OFF, SINGLE_QUADRANT, MULTI_QUADRANT, END_OF_PROGRAM,
})

# Accepted only when the document ignores invalid input.
DEPRECATED_CODES = frozenset({
    "G54", "G55", "G70", "G71", "G90", "G91", "M00", "M01",
})

INTERPOLATION_CODES = frozenset({LINEAR, CIRCULAR_CW, CIRCULAR_CCW})
MOVE_CODES = INTERPOLATION_CODES | {"G54", "G55"}

RECOGNIZED_PARAMETERS = frozenset({"LP", "SR", "LM", "LR", "LS", "TF", "TA", "TO", "TD"})
DEPRECATED_PARAMETERS = frozenset({"AS", "IN", "IP", "IR", "LN", "MI", "OF", "SF"})
STRUCTURAL_PARAMETERS = frozenset({"FS", "MO", "AD", "AM"})

_CODE_RE = re.compile(r"^([GM])0*(\d+)$")
_OP_RE = re.compile(r"^D?0*([1-3])$")
_PARAM_RE = re.compile(r"^%?([A-Z]{2})")


def normalize_code(code: str) -> str:
    """Return *code* in two-digit form (``g1`` -> ``G01``).

    Raises
    ------
    ValidationError
        If *code* is not a G or M code token.
    """
    if not isinstance(code, str):
        raise ValidationError(f"Function code must be a string, got {code!r}")
    m = _CODE_RE.match(code.strip().upper())
    if m is None:
        raise ValidationError(f"Malformed function code {code!r}")
    return f"{m.group(1)}{int(m.group(2)):02d}"


class OpCode(str, Enum):
    DRAW = "D01"
    MOVE = "D02"
    FLASH = "D03"

    @classmethod
    def parse(cls, value: Any) -> OpCode:
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str):
            m = _OP_RE.match(value.strip().upper())
            if m is not None:
                return cls(f"D0{m.group(1)}")
        raise ValidationError(f"Unknown operation code {value!r} (expected D01, D02 or D03)")


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Function(ABC):
    """Base class for all function records."""

    pass


@dataclass(frozen=True, slots=True)
class ApertureSelect(Function):
    code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", check_aperture_code(self.code))


@dataclass(frozen=True, slots=True)
class CodeOnly(Function):
    """A G or M code without coordinates.

    Parameters
    ----------
    code : str
        The code, e.g. ``"G75"``.
    comment : str | None
        Comment text; only valid on ``G04``.
    """

    code: str
    comment: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", normalize_code(self.code))
        if self.comment is not None:
            if not isinstance(self.comment, str):
                raise ValidationError(f"Comment must be a string, got {self.comment!r}")
            if self.code != COMMENT:
                raise ValidationError(
                    f"Comments attach only to {COMMENT}, not {self.code}"
                )


@dataclass(frozen=True, slots=True)
class Move(Function):
    """Coordinate data plus an operation.

    Parameters
    ----------
    coord : str
        Raw axis words (``X``, ``Y``, ``I``, ``J``) decoded against the
        document format.  Empty means "stay at the current point".
    op : OpCode | None
        D01 draw, D02 move, D03 flash.  ``None`` repeats the previous
        operation and is only accepted by permissive documents.
    code : str | None
        Optional interpolation code issued with the move (``G01`` ...).
    """

    coord: str
    op: OpCode | None
    code: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.coord, str):
            raise ValidationError(f"Coordinate must be a string, got {self.coord!r}")
        object.__setattr__(self, "coord", self.coord.strip())
        if self.op is not None:
            object.__setattr__(self, "op", OpCode.parse(self.op))
        if self.code is not None:
            object.__setattr__(self, "code", normalize_code(self.code))


@dataclass(frozen=True, slots=True)
class Parameter(Function):
    """A repeatable special parameter, kept verbatim."""

    raw: str

    def __post_init__(self) -> None:
        if not isinstance(self.raw, str) or not self.raw.strip():
            raise ValidationError("Parameter must be a non-empty string")

    @property
    def name(self) -> str:
        m = _PARAM_RE.match(self.raw.strip().upper())
        if m is None:
            raise ValidationError(f"Malformed parameter {self.raw!r}")
        return m.group(1)


def function_from_options(
    *,
    aperture: str | None = None,
    param: str | None = None,
    func: str | None = None,
    coord: str | None = None,
    op: Any = None,
    comment: str | None = None,
) -> Function:
    """Build a record from the legacy keyword option bag.

    Precedence is fixed: ``aperture`` wins over everything, then
    ``param``; otherwise ``func``, ``coord``, ``op`` and ``comment``
    combine into a ``Move`` (when ``coord`` or ``op`` is given) or a
    ``CodeOnly``.  A comment without a code implies ``G04``.
    """
    if aperture is not None:
        ignored = [k for k, v in (("param", param), ("func", func), ("coord", coord),
                                  ("op", op), ("comment", comment)) if v is not None]
        if ignored:
            logger.debug("Aperture select ignores options %s", ignored)
        return ApertureSelect(aperture)
    if param is not None:
        return Parameter(param)
    if coord is not None or op is not None:
        if comment is not None:
            raise ValidationError("A comment cannot be attached to a move")
        return Move(coord=coord or "", op=op, code=func)
    if func is not None or comment is not None:
        return CodeOnly(func if func is not None else COMMENT, comment)
    raise ValidationError("Function needs one of aperture, param, func, coord, op or comment")


# ---------------------------------------------------------------------------
# Sequence
# ---------------------------------------------------------------------------


class FunctionSequence:
    """Ordered, append-only record of a document's functions.

    Parameters
    ----------
    format_spec : FormatSpec
        Live format of the owning document; coordinates are checked against
        its state at append time.
    apertures : ApertureTable
        Aperture table used to validate aperture selects.
    ignore_invalid : bool
        Accept deprecated or unknown codes and parameters, undefined
        aperture selects, and coordinates without an operation code that
        repeat a preceding D01.
    """

    def __init__(
        self,
        format_spec: FormatSpec,
        apertures: ApertureTable,
        *,
        ignore_invalid: bool = False,
    ) -> None:
        self._format = format_spec
        self._apertures = apertures
        self.ignore_invalid = ignore_invalid
        self._functions: list[Function] = []
        self._aperture_selected = False
        self._region_open = False
        self._last_op: OpCode | None = None

    # -- validation --------------------------------------------------------

    def _check_code(self, code: str) -> None:
        if code in RECOGNIZED_CODES:
            return
        kind = "Deprecated" if code in DEPRECATED_CODES else "Unknown"
        if self.ignore_invalid:
            logger.debug("%s code %s accepted (ignore_invalid)", kind, code)
            return
        raise UnknownCodeError(f"{kind} code {code}")

    def _check_parameter(self, record: Parameter) -> None:
        name = record.name
        if name in STRUCTURAL_PARAMETERS:
            raise ValidationError(
                f"Parameter {name} is structural; use the format, aperture or macro operations"
            )
        if name in RECOGNIZED_PARAMETERS:
            return
        kind = "Deprecated" if name in DEPRECATED_PARAMETERS else "Unknown"
        if self.ignore_invalid:
            logger.debug("%s parameter %s accepted (ignore_invalid)", kind, name)
            return
        raise UnknownCodeError(f"{kind} parameter {name}")

    def _check_move(self, record: Move) -> None:
        if record.code is not None:
            self._check_code(record.code)
            if record.code in RECOGNIZED_CODES and record.code not in MOVE_CODES:
                raise ValidationError(f"Code {record.code} cannot carry coordinates")
        if record.op is None:
            if not self.ignore_invalid:
                raise ValidationError(
                    f"Coordinate {record.coord!r} has no operation code"
                )
            if self._last_op != OpCode.DRAW:
                previous = self._last_op.value if self._last_op else "no operation"
                raise ValidationError(
                    f"Coordinate {record.coord!r} has no operation code to repeat "
                    f"(previous: {previous})"
                )
        coordinates.decode(record.coord, self._format.values)

        needs_aperture = record.op == OpCode.FLASH or (
            record.op == OpCode.DRAW and not self._region_open
        )
        if needs_aperture and not self._aperture_selected:
            raise UndefinedApertureError(
                f"{record.op.value} at {record.coord!r} before any aperture was selected"
            )

    def validate(self, record: Function) -> None:
        """Check *record* against the current document state without appending."""
        if isinstance(record, ApertureSelect):
            if record.code not in self._apertures and not self.ignore_invalid:
                raise UndefinedApertureError(f"Aperture {record.code} is not defined")
        elif isinstance(record, CodeOnly):
            self._check_code(record.code)
        elif isinstance(record, Move):
            self._check_move(record)
        elif isinstance(record, Parameter):
            self._check_parameter(record)
        else:
            raise ValidationError(f"Unsupported function record {record!r}")

    # -- mutation ----------------------------------------------------------

    def append(self, record: Function) -> Function:
        """Validate and append *record*.  Nothing is appended on failure."""
        self.validate(record)
        self._functions.append(record)
        if isinstance(record, ApertureSelect):
            self._aperture_selected = True
        elif isinstance(record, Move) and record.op is not None:
            self._last_op = record.op
        elif isinstance(record, CodeOnly):
            if record.code == REGION_ON:
                self._region_open = True
            elif record.code == REGION_OFF:
                self._region_open = False
        return record

    # -- access ------------------------------------------------------------

    def count(self) -> int:
        return len(self._functions)

    def at(self, index: int) -> Function:
        if not isinstance(index, int) or isinstance(index, bool):
            raise FunctionIndexError(f"Function index must be an integer, got {index!r}")
        if not 0 <= index < len(self._functions):
            raise FunctionIndexError(
                f"Function index {index} out of range [0, {len(self._functions)})"
            )
        return self._functions[index]

    def all(self) -> tuple[Function, ...]:
        return tuple(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self):
        return iter(tuple(self._functions))
