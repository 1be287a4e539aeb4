"""YAML document files: a structured description of a Gerber document.

This is not Gerber source text.  It lists the format, apertures, macros,
and functions using the same keys as the public operations, so a file is
replayed into a ``GerberDocument`` purely through ``set_format``,
``define_aperture``, ``define_macro`` and ``function``.

Example::

    schema: photoplot.document.v1
    format: {zero: L, coordinates: A, format: {integer: 2, decimal: 4}, unit: inch}
    apertures:
      - {code: D10, shape: C, modifiers: ["2"]}
    functions:
      - {aperture: D10}
      - {coord: X010000Y010000, op: D03}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as SchemaError

from photoplot.configs.loader import PhotoplotConfig
from photoplot.document.apertures import ApertureShape
from photoplot.document.functions import ApertureSelect, CodeOnly, Function, Move, Parameter
from photoplot.errors import ValidationError
from photoplot.gerber import GerberDocument
from photoplot.utils.fs import load_yaml, write_yaml_atomic

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "photoplot.document.v1"


# ============================================================================
# SCHEMA
# ============================================================================

class DigitsModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    integer: Optional[int] = Field(None, description="Integer digits [0, 7]")
    decimal: Optional[int] = Field(None, description="Decimal digits [0, 7]")


class FormatModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    zero: Optional[str] = Field(None, description="Leading | Trailing (prefix)")
    coordinates: Optional[str] = Field(None, description="Absolute | Incremental (prefix)")
    format: Optional[DigitsModel] = None
    unit: Optional[str] = Field(None, description="Inch | Millimeter (prefix, mm, in)")


class ApertureModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str
    shape: str
    modifiers: List[Union[str, int, float]] = Field(default_factory=list)
    blank: bool = False

    @field_validator('modifiers')
    @classmethod
    def modifiers_as_text(cls, v: List[Union[str, int, float]]) -> List[str]:
        return [str(m) for m in v]


class MacroModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    lines: List[str]


class FunctionModel(BaseModel):
    """One function in option-bag form."""

    model_config = ConfigDict(extra="forbid")

    aperture: Optional[str] = None
    param: Optional[str] = None
    func: Optional[str] = None
    coord: Optional[str] = None
    op: Optional[Union[str, int]] = None
    comment: Optional[str] = None

    @model_validator(mode='after')
    def not_empty(self) -> 'FunctionModel':
        if all(getattr(self, k) is None for k in ("aperture", "param", "func", "coord", "op", "comment")):
            raise ValueError("function entry has no keys")
        return self


class DocumentFileV1(BaseModel):
    """Top-level document file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_version: str = Field(SCHEMA_VERSION, alias="schema")
    ignore_invalid: Optional[bool] = None
    ignore_blank: Optional[bool] = None
    format: FormatModel = Field(default_factory=FormatModel)
    apertures: List[ApertureModel] = Field(default_factory=list)
    macros: List[MacroModel] = Field(default_factory=list)
    functions: List[FunctionModel] = Field(default_factory=list)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != SCHEMA_VERSION:
            raise ValueError(f"Expected schema '{SCHEMA_VERSION}', got '{v}'")
        return v


# ============================================================================
# LOAD
# ============================================================================

def document_from_dict(
    data: Dict[str, Any],
    *,
    config: Optional[PhotoplotConfig] = None,
    name: Optional[str] = None,
) -> GerberDocument:
    """Validate *data* and replay it into a new document.

    Raises
    ------
    ValidationError
        If the structure does not match the schema.
    GerberError
        Any error raised by the document operations themselves.
    """
    try:
        parsed = DocumentFileV1.model_validate(data or {})
    except SchemaError as e:
        raise ValidationError(f"Invalid document file: {e}") from e

    doc = GerberDocument.from_config(config, name=name) if config else GerberDocument(name=name)
    if parsed.ignore_invalid is not None:
        doc.ignore_invalid(parsed.ignore_invalid)
    if parsed.ignore_blank is not None:
        doc.ignore_blank(parsed.ignore_blank)

    fmt = parsed.format.model_dump(exclude_none=True)
    if fmt:
        doc.set_format(**fmt)
    for macro in parsed.macros:
        doc.define_macro(macro.name, macro.lines)
    for ap in parsed.apertures:
        doc.define_aperture(ap.code, ap.shape, ap.modifiers, blank=ap.blank)
    for index, entry in enumerate(parsed.functions):
        try:
            doc.function(**entry.model_dump(exclude_none=True))
        except ValidationError as e:
            raise ValidationError(f"functions[{index}]: {e}") from e

    logger.debug("Loaded %r", doc)
    return doc


def load_document(
    path: Union[str, Path],
    *,
    config: Optional[PhotoplotConfig] = None,
) -> GerberDocument:
    """Load a YAML document file.

    Raises
    ------
    FileNotFoundError
        If *path* doesn't exist.
    ValidationError
        If the file does not match the schema.
    """
    path = Path(path)
    logger.info("Loading document %s", path)
    return document_from_dict(load_yaml(path), config=config, name=path.name)


# ============================================================================
# DUMP
# ============================================================================

def function_to_options(record: Function) -> Dict[str, Any]:
    """Inverse of ``function_from_options`` for one record."""
    if isinstance(record, ApertureSelect):
        return {"aperture": record.code}
    if isinstance(record, Parameter):
        return {"param": record.raw}
    if isinstance(record, Move):
        out: Dict[str, Any] = {}
        if record.code is not None:
            out["func"] = record.code
        out["coord"] = record.coord
        if record.op is not None:
            out["op"] = record.op.value
        return out
    if isinstance(record, CodeOnly):
        out = {"func": record.code}
        if record.comment is not None:
            out["comment"] = record.comment
        return out
    raise ValidationError(f"Cannot serialize function record {record!r}")


def document_to_dict(doc: GerberDocument) -> Dict[str, Any]:
    fmt: Dict[str, Any] = {}
    for key, value in doc.get_format().items():
        fmt[key] = dict(value) if key == "format" else value.value

    apertures = []
    for ap in doc.apertures().values():
        shape = ap.shape.letter if isinstance(ap.shape, ApertureShape) else ap.shape.name
        entry: Dict[str, Any] = {"code": ap.code, "shape": shape, "modifiers": list(ap.modifiers)}
        if ap.blank:
            entry["blank"] = True
        apertures.append(entry)

    return {
        "schema": SCHEMA_VERSION,
        "ignore_invalid": doc.ignore_invalid(),
        "ignore_blank": doc.ignore_blank(),
        "format": fmt,
        "apertures": apertures,
        "macros": [{"name": m.name, "lines": list(m.lines)} for m in doc.macros().values()],
        "functions": [function_to_options(f) for f in doc.functions()],
    }


def save_document(doc: GerberDocument, path: Union[str, Path]) -> None:
    """Write *doc* as a YAML document file atomically."""
    write_yaml_atomic(document_to_dict(doc), path)
    logger.info("Wrote %s (%d functions)", path, doc.function_count())
