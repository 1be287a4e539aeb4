"""The Gerber document: public operations over the document model.

``GerberDocument`` owns one format spec, aperture table, macro table, and
function sequence, and exposes the operations used by text parsers,
writers, and the engines.

Error contract:
    Failing operations raise a ``GerberError`` subclass and commit nothing
    (``convert`` excepted, which may leave the *target* partially built).
    The message of the most recent failure is kept and returned by
    ``last_error()``.  It is overwritten by every later failure and left
    untouched by successful calls; it starts as ``None``.

Ordering:
    Configure the format first, then apertures and macros, then append
    functions.  This is not enforced, but coordinates are checked against
    the format in force at append time and changing digit widths afterwards
    is unsupported.  Use ``convert`` into a fresh document instead.

Usage::

    doc = GerberDocument()
    doc.set_format(zero="L", coordinates="A", format={"integer": 2, "decimal": 4}, unit="in")
    doc.define_aperture("D10", "C", "2")
    doc.function(aperture="D10")
    doc.function(coord="X010000Y010000", op="D03")
    doc.bounding_box().as_tuple()   # (0.0, 0.0, 2.0, 2.0)
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable
from typing import Any, Callable, TypeVar

from photoplot.conversion import converter
from photoplot.document.apertures import Aperture, ApertureTable, Shape
from photoplot.document.format_spec import FormatSpec, Unit
from photoplot.document.functions import Function, FunctionSequence, function_from_options
from photoplot.document.macros import MacroDefinition, MacroTable
from photoplot.errors import GerberError, UnsupportedConversionError
from photoplot.geometry.bounds import BoundingBox, GeometryEngine

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _records_errors(method: F) -> F:
    """Store the message of a raised ``GerberError`` as the last error."""

    @functools.wraps(method)
    def wrapper(self: GerberDocument, *args: Any, **kwargs: Any) -> Any:
        try:
            return method(self, *args, **kwargs)
        except GerberError as exc:
            self._last_error = str(exc)
            logger.debug("%s failed: %s", method.__name__, exc)
            raise

    return wrapper  # type: ignore[return-value]


class GerberDocument:
    """An in-memory photoplotter program.

    Parameters
    ----------
    ignore_invalid : bool
        Accept deprecated or unknown codes and parameters, undefined
        aperture selects, and moves without an operation code.
    ignore_blank : bool
        Leave apertures marked ``blank`` out of the bounding box.
    modifier_places : int
        Decimal places kept when ``convert`` rescales aperture modifiers.
    name : str | None
        Label used in log messages.
    """

    def __init__(
        self,
        *,
        ignore_invalid: bool = False,
        ignore_blank: bool = False,
        modifier_places: int = converter.DEFAULT_MODIFIER_PLACES,
        name: str | None = None,
    ) -> None:
        self.name = name
        self.modifier_places = modifier_places
        self.format_spec = FormatSpec()
        self.aperture_table = ApertureTable()
        self.macro_table = MacroTable()
        self.sequence = FunctionSequence(
            self.format_spec, self.aperture_table, ignore_invalid=ignore_invalid,
        )
        self._ignore_blank = ignore_blank
        self._last_error: str | None = None

    @classmethod
    def from_config(cls, config: Any, name: str | None = None) -> GerberDocument:
        """Create a document with flags taken from a ``PhotoplotConfig``."""
        return cls(
            ignore_invalid=config.validation.ignore_invalid,
            ignore_blank=config.validation.ignore_blank,
            modifier_places=config.conversion.modifier_places,
            name=name,
        )

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return (
            f"<GerberDocument{label}: {len(self.aperture_table)} apertures, "
            f"{len(self.macro_table)} macros, {self.sequence.count()} functions>"
        )

    # -- flags ---------------------------------------------------------------

    def ignore_invalid(self, flag: bool | None = None) -> bool:
        """Get, or set and return, the permissive-validation flag."""
        if flag is not None:
            self.sequence.ignore_invalid = bool(flag)
        return self.sequence.ignore_invalid

    def ignore_blank(self, flag: bool | None = None) -> bool:
        """Get, or set and return, the blank-aperture skipping flag."""
        if flag is not None:
            self._ignore_blank = bool(flag)
        return self._ignore_blank

    def last_error(self) -> str | None:
        return self._last_error

    # -- format --------------------------------------------------------------

    @_records_errors
    def set_format(self, **options: Any) -> None:
        """Set any of ``zero``, ``coordinates``, ``format``, ``unit``."""
        self.format_spec.set(**options)

    def get_format(self) -> dict[str, Any]:
        return self.format_spec.get()

    @_records_errors
    def set_mode(self, unit: str | Unit) -> None:
        """Set the linear unit (alias for ``set_format(unit=...)``)."""
        self.format_spec.set_unit(unit)

    def get_mode(self) -> Unit | None:
        return self.format_spec.values.unit

    # -- apertures and macros --------------------------------------------------

    @_records_errors
    def define_aperture(
        self,
        code: str,
        shape: str | Shape,
        modifiers: str | Iterable[object] | None = None,
        *,
        blank: bool = False,
    ) -> Aperture:
        return self.aperture_table.define(code, shape, modifiers, blank=blank)

    @_records_errors
    def get_aperture(self, code: str) -> Aperture | None:
        return self.aperture_table.get(code)

    def apertures(self) -> dict[str, Aperture]:
        return self.aperture_table.all()

    @_records_errors
    def define_macro(self, name: str, lines: str | Iterable[str]) -> MacroDefinition:
        return self.macro_table.define(name, lines)

    def get_macro(self, name: str) -> MacroDefinition | None:
        return self.macro_table.get(name)

    def macros(self) -> dict[str, MacroDefinition]:
        return self.macro_table.all()

    # -- functions -------------------------------------------------------------

    @_records_errors
    def append(self, record: Function) -> Function:
        """Append a prepared function record."""
        return self.sequence.append(record)

    @_records_errors
    def function(self, **options: Any) -> Function:
        """Append a function described by the legacy option bag.

        Keys: ``aperture``, ``param``, ``func``, ``coord``, ``op``,
        ``comment``.  See ``function_from_options`` for precedence.
        """
        return self.sequence.append(function_from_options(**options))

    def function_count(self) -> int:
        return self.sequence.count()

    @_records_errors
    def function_at(self, index: int) -> Function:
        return self.sequence.at(index)

    def functions(self) -> tuple[Function, ...]:
        return self.sequence.all()

    # -- geometry --------------------------------------------------------------

    @_records_errors
    def bounding_box(self) -> BoundingBox:
        """Replay the functions and return the bounding box (never cached)."""
        engine = GeometryEngine(
            self.format_spec.values,
            self.aperture_table,
            self.sequence.all(),
            ignore_blank=self._ignore_blank,
        )
        return engine.run()

    def width(self) -> float:
        return self.bounding_box().width

    def height(self) -> float:
        return self.bounding_box().height

    # -- conversion ------------------------------------------------------------

    @_records_errors
    def convert(self, target: GerberDocument) -> GerberDocument:
        """Re-express this document in *target*'s format and unit."""
        if target is self:
            raise UnsupportedConversionError("A document cannot be converted into itself")
        try:
            return converter.convert(self, target, modifier_places=self.modifier_places)
        except GerberError as exc:
            target._last_error = str(exc)
            raise
