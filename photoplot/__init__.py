"""
Photoplot Package.

In-memory model of RS-274X (Gerber) photoplotter programs with exact
bounding-box computation and lossless format/unit conversion.

Subpackages:
    document: Format spec, aperture and macro tables, function sequence
    geometry: Replay state machine and bounding-box engine
    conversion: Format and unit conversion between documents
    configs: Configuration loading and validation
    files: YAML document files
    utils: Logging and filesystem helpers
"""

from photoplot.errors import (
    ConfigError,
    FunctionIndexError,
    GerberError,
    UndefinedApertureError,
    UnknownCodeError,
    UnsupportedConversionError,
    ValidationError,
)
from photoplot.gerber import GerberDocument
from photoplot.geometry.bounds import BoundingBox

__all__ = [
    "BoundingBox",
    "ConfigError",
    "FunctionIndexError",
    "GerberDocument",
    "GerberError",
    "UndefinedApertureError",
    "UnknownCodeError",
    "UnsupportedConversionError",
    "ValidationError",
]
