"""Aperture footprints as extents relative to the aperture centre."""

from __future__ import annotations

import math

from photoplot.document.apertures import Aperture, ApertureShape

Extent = tuple[float, float, float, float]

POINT_EXTENT: Extent = (0.0, 0.0, 0.0, 0.0)


def polygon_extent(diameter: float, vertices: int, rotation_deg: float = 0.0) -> Extent:
    """Extent of a regular polygon whose first vertex sits at *rotation_deg*."""
    r = diameter / 2.0
    xs, ys = [], []
    for k in range(vertices):
        a = math.radians(rotation_deg + k * 360.0 / vertices)
        xs.append(r * math.cos(a))
        ys.append(r * math.sin(a))
    # Snap trig noise so axis-aligned vertices give exact extents.
    extent = (min(xs), min(ys), max(xs), max(ys))
    return tuple(0.0 if abs(v) < 1e-12 else v for v in extent)


def footprint(aperture: Aperture) -> Extent:
    """Return ``(x_min, y_min, x_max, y_max)`` of *aperture* around its centre.

    Holes never widen an aperture, so hole modifiers are ignored.  Macro
    apertures cannot be measured and yield ``POINT_EXTENT``; callers detect
    that case through ``aperture.geometry_resolved``.
    """
    if not aperture.geometry_resolved:
        return POINT_EXTENT

    values = aperture.numbers()
    if aperture.shape == ApertureShape.CIRCLE:
        r = values[0] / 2.0
        return -r, -r, r, r
    if aperture.shape in (ApertureShape.RECTANGLE, ApertureShape.OBROUND):
        hx, hy = values[0] / 2.0, values[1] / 2.0
        return -hx, -hy, hx, hy
    rotation = values[2] if len(values) > 2 else 0.0
    return polygon_extent(values[0], int(values[1]), rotation)
