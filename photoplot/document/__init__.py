"""
Document model.

Format spec, aperture table, macro table, and the append-only function
sequence, plus the coordinate codec they share.
"""

from photoplot.document.apertures import (
    Aperture,
    ApertureShape,
    ApertureTable,
    MacroReference,
)
from photoplot.document.format_spec import (
    CoordinateMode,
    FormatSpec,
    FormatValues,
    Unit,
    ZeroSuppression,
)
from photoplot.document.functions import (
    ApertureSelect,
    CodeOnly,
    Function,
    FunctionSequence,
    Move,
    OpCode,
    Parameter,
    function_from_options,
)
from photoplot.document.macros import MacroDefinition, MacroTable

__all__ = [
    "Aperture",
    "ApertureSelect",
    "ApertureShape",
    "ApertureTable",
    "CodeOnly",
    "CoordinateMode",
    "FormatSpec",
    "FormatValues",
    "Function",
    "FunctionSequence",
    "MacroDefinition",
    "MacroReference",
    "MacroTable",
    "Move",
    "OpCode",
    "Parameter",
    "Unit",
    "ZeroSuppression",
    "function_from_options",
]
