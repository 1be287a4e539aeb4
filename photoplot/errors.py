"""Exception hierarchy shared by the document model and both engines.

Every failure raised by a public operation derives from ``GerberError`` so
callers can catch one type.  The more specific classes mirror the kinds of
failure a photoplotter program can exhibit.
"""

from __future__ import annotations


class GerberError(Exception):
    """Base class for all document, geometry, and conversion failures."""

    pass


class ValidationError(GerberError, ValueError):
    """Raised for malformed or out-of-range format, aperture, or coordinate values."""

    pass


class UndefinedApertureError(GerberError):
    """Raised when a function references a missing or unselected aperture."""

    pass


class UnknownCodeError(GerberError):
    """Raised for unrecognized or deprecated codes in a strict document."""

    pass


class FunctionIndexError(GerberError, IndexError):
    """Raised when reading a function index outside the recorded sequence."""

    pass


class UnsupportedConversionError(GerberError):
    """Raised when a document holds content the converter cannot re-express."""

    pass


class ConfigError(GerberError):
    """Raised when configuration validation fails."""

    pass
