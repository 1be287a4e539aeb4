"""Circular interpolation helpers.

Angles are radians measured counter-clockwise from +X.  Arc extents are
exact: besides the two endpoints, an arc reaches an axis extreme only at
0, 90, 180 or 270 degrees, and those points are added without
trigonometry.
"""

from __future__ import annotations

import logging
import math

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi
QUARTER = math.pi / 2.0
ANGLE_EPS = 1e-9

Point = tuple[float, float]
Extent = tuple[float, float, float, float]


def _angle(center: Point, p: Point) -> float:
    return math.atan2(p[1] - center[1], p[0] - center[0])


def sweep_angle(start: Point, end: Point, center: Point, clockwise: bool) -> float:
    """Angle swept from *start* to *end* in the commanded direction, in [0, 2pi)."""
    a0 = _angle(center, start)
    a1 = _angle(center, end)
    delta = (a0 - a1) if clockwise else (a1 - a0)
    sweep = delta % TWO_PI
    if sweep > TWO_PI - ANGLE_EPS:
        sweep = 0.0
    return sweep


def same_point(a: Point, b: Point) -> bool:
    return math.isclose(a[0], b[0], abs_tol=1e-12) and math.isclose(a[1], b[1], abs_tol=1e-12)


def single_quadrant_center(start: Point, end: Point, i: float, j: float, clockwise: bool) -> Point:
    """Pick the centre for a G74 arc whose offsets are unsigned.

    Among the four sign combinations of ``(I, J)``, keep those giving a
    sweep of at most 90 degrees in the commanded direction and return the
    one whose start and end radii agree best.
    """
    i, j = abs(i), abs(j)
    candidates = {
        (start[0] + si * i, start[1] + sj * j)
        for si in (1.0, -1.0)
        for sj in (1.0, -1.0)
    }

    def mismatch(c: Point) -> float:
        return abs(math.dist(start, c) - math.dist(end, c))

    valid = [
        c for c in candidates
        if sweep_angle(start, end, c, clockwise) <= QUARTER + ANGLE_EPS
    ]
    if not valid:
        logger.warning(
            "No single-quadrant centre spans <= 90 degrees from %s to %s; "
            "using the closest radius match", start, end,
        )
        valid = list(candidates)
    return min(valid, key=lambda c: (mismatch(c), c))


def arc_center(
    start: Point,
    end: Point,
    i: float,
    j: float,
    clockwise: bool,
    multi_quadrant: bool,
) -> Point:
    if multi_quadrant:
        return (start[0] + i, start[1] + j)
    return single_quadrant_center(start, end, i, j, clockwise)


def arc_extent(
    start: Point,
    end: Point,
    center: Point,
    clockwise: bool,
    multi_quadrant: bool,
) -> Extent:
    """Axis-aligned extent of the arc path (zero width).

    Under G75 an arc whose start and end coincide is a full circle; under
    G74 it has zero length.
    """
    xs = [start[0], end[0]]
    ys = [start[1], end[1]]

    if same_point(start, end):
        sweep = TWO_PI if multi_quadrant else 0.0
    else:
        sweep = sweep_angle(start, end, center, clockwise)

    if sweep > 0.0:
        r = math.dist(start, center)
        cx, cy = center
        lo = _angle(center, end if clockwise else start)
        extremes = (
            (0.0, (cx + r, cy)),
            (QUARTER, (cx, cy + r)),
            (math.pi, (cx - r, cy)),
            (3.0 * QUARTER, (cx, cy - r)),
        )
        for theta, (px, py) in extremes:
            if (theta - lo) % TWO_PI <= sweep + ANGLE_EPS:
                xs.append(px)
                ys.append(py)

    return min(xs), min(ys), max(xs), max(ys)
