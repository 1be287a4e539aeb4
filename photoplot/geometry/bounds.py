"""Bounding-box computation by replaying a function sequence.

Provides:
    - ``BoundingBox``: immutable result with ``width``/``height``
    - ``GeometryEngine``: stateless-per-run replay of a document

The extent of an aperture swept along a path is the Minkowski sum of the
path and the aperture, and the bounding box of a Minkowski sum is the sum
of the two bounding boxes.  Each draw therefore contributes
``path_extent + footprint`` and each flash ``point + footprint``, which is
exact for every standard aperture shape and both interpolation kinds.

Nothing is cached: each ``run()`` replays the whole sequence.

Usage:
    engine = GeometryEngine(fmt, apertures, functions, ignore_blank=True)
    box = engine.run()
    print(box.width, box.height)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from photoplot.document.apertures import Aperture, ApertureTable
from photoplot.document.format_spec import FormatValues
from photoplot.document.functions import Function, OpCode
from photoplot.errors import UndefinedApertureError
from photoplot.geometry import arcs
from photoplot.geometry.footprints import Extent, footprint
from photoplot.geometry.replay import MotionStep, Replayer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned box in document units.

    Attributes
    ----------
    min_x, min_y, max_x, max_y : float
        Box corners.  All zero when nothing was drawn.
    unresolved_apertures : frozenset[str]
        Macro apertures that were used but could only be measured at their
        centre points.  Empty means the box is exact.
    """

    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0
    unresolved_apertures: frozenset[str] = field(default_factory=frozenset)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def exact(self) -> bool:
        return not self.unresolved_apertures

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


class _Accumulator:
    """Running union of extents; empty until the first ``add``."""

    def __init__(self) -> None:
        self.extent: list[float] | None = None

    def add(self, extent: Extent, offset: Extent) -> None:
        x0, y0, x1, y1 = (extent[0] + offset[0], extent[1] + offset[1],
                          extent[2] + offset[2], extent[3] + offset[3])
        if self.extent is None:
            self.extent = [x0, y0, x1, y1]
            return
        e = self.extent
        e[0], e[1] = min(e[0], x0), min(e[1], y0)
        e[2], e[3] = max(e[2], x1), max(e[3], y1)


_NO_OFFSET: Extent = (0.0, 0.0, 0.0, 0.0)


class GeometryEngine:
    """Replay functions against a format and aperture table.

    Parameters
    ----------
    fmt : FormatValues
        Format the functions were recorded under.
    apertures : ApertureTable
        Aperture definitions, looked up at replay time.
    functions : Sequence[Function]
        Ordered function records.
    ignore_blank : bool
        Skip apertures marked ``blank`` entirely.
    """

    def __init__(
        self,
        fmt: FormatValues,
        apertures: ApertureTable,
        functions: Sequence[Function],
        *,
        ignore_blank: bool = False,
    ) -> None:
        self.fmt = fmt
        self.apertures = apertures
        self.functions = functions
        self.ignore_blank = ignore_blank

    def _aperture(self, step: MotionStep) -> Aperture:
        if step.aperture is None:
            raise UndefinedApertureError(
                f"Function {step.index}: {step.op.value} without a selected aperture"
            )
        aperture = self.apertures.get(step.aperture)
        if aperture is None:
            raise UndefinedApertureError(
                f"Function {step.index}: aperture {step.aperture} is not defined"
            )
        return aperture

    @staticmethod
    def path_extent(step: MotionStep) -> Extent:
        """Zero-width extent of the path travelled by a draw."""
        start = (float(step.start[0]), float(step.start[1]))
        end = (float(step.end[0]), float(step.end[1]))
        center_offset = step.center_offset

        if step.circular and center_offset is not None:
            i, j = float(center_offset[0]), float(center_offset[1])
            center = arcs.arc_center(start, end, i, j, step.clockwise, step.multi_quadrant)
            return arcs.arc_extent(start, end, center, step.clockwise, step.multi_quadrant)

        if step.circular:
            logger.warning(
                "Function %d: circular draw without I/J treated as a straight segment",
                step.index,
            )
        return (min(start[0], end[0]), min(start[1], end[1]),
                max(start[0], end[0]), max(start[1], end[1]))

    def run(self) -> BoundingBox:
        """Replay all functions and return the bounding box.

        Raises
        ------
        UndefinedApertureError
            If a draw or flash uses no aperture or an undefined one.
        ValidationError
            If a modal move cannot be resolved.
        """
        acc = _Accumulator()
        unresolved: set[str] = set()
        replayer = Replayer(self.fmt)

        for _record, step in replayer.run(self.functions):
            if step is None or step.op == OpCode.MOVE:
                continue

            if step.op == OpCode.DRAW and step.in_region:
                acc.add(self.path_extent(step), _NO_OFFSET)
                continue

            aperture = self._aperture(step)
            if aperture.blank and self.ignore_blank:
                continue
            if not aperture.geometry_resolved:
                if aperture.code not in unresolved:
                    logger.warning(
                        "Aperture %s uses macro %s; only its path is measured",
                        aperture.code, aperture.macro_name,
                    )
                unresolved.add(aperture.code)

            offset = footprint(aperture)
            if step.op == OpCode.FLASH:
                x, y = float(step.end[0]), float(step.end[1])
                acc.add((x, y, x, y), offset)
            else:
                acc.add(self.path_extent(step), offset)

        logger.debug(
            "Replayed %d functions, extent %s", len(self.functions), acc.extent,
        )
        if acc.extent is None:
            return BoundingBox(unresolved_apertures=frozenset(unresolved))
        return BoundingBox(*acc.extent, unresolved_apertures=frozenset(unresolved))
