"""Geometry engine: modal replay and bounding boxes."""

from photoplot.geometry.bounds import BoundingBox, GeometryEngine
from photoplot.geometry.replay import MotionStep, Replayer

__all__ = ["BoundingBox", "GeometryEngine", "MotionStep", "Replayer"]
