"""Format and unit conversion between documents."""

from photoplot.conversion.converter import convert

__all__ = ["convert"]
