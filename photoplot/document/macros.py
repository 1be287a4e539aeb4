"""Aperture macro storage.

Macro bodies are kept verbatim as ordered primitive lines.  Nothing here
evaluates arithmetic, substitutes parameters, or interprets primitives.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from photoplot.document.apertures import MACRO_NAME_RE
from photoplot.errors import ValidationError


@dataclass(frozen=True, slots=True)
class MacroDefinition:
    name: str
    lines: tuple[str, ...]


class MacroTable:
    """Macro definitions keyed by name.  Redefinition overwrites."""

    def __init__(self) -> None:
        self._macros: dict[str, MacroDefinition] = {}

    def define(self, name: str, lines: str | Iterable[str]) -> MacroDefinition:
        if not isinstance(name, str) or not MACRO_NAME_RE.match(name):
            raise ValidationError(f"Invalid macro name {name!r}")
        if isinstance(lines, str):
            lines = (lines,)
        body = tuple(lines)
        if not all(isinstance(line, str) for line in body):
            raise ValidationError(f"Macro {name} lines must all be strings")
        macro = MacroDefinition(name=name, lines=body)
        self._macros[name] = macro
        return macro

    def get(self, name: str) -> MacroDefinition | None:
        return self._macros.get(name)

    def all(self) -> dict[str, MacroDefinition]:
        return dict(self._macros)

    def __len__(self) -> int:
        return len(self._macros)
