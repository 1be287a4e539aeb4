"""Shared fixtures for photoplot tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import pytest

from photoplot.gerber import GerberDocument


def make_document(
    *,
    integer: int = 2,
    decimal: int = 4,
    unit: str = "inch",
    zero: str = "L",
    coordinates: str = "A",
    **options: Any,
) -> GerberDocument:
    doc = GerberDocument(**options)
    doc.set_format(
        zero=zero,
        coordinates=coordinates,
        format={"integer": integer, "decimal": decimal},
        unit=unit,
    )
    return doc


@pytest.fixture()
def doc() -> GerberDocument:
    """Inch document, format 2.4, leading zeros suppressed, absolute."""
    return make_document()


@pytest.fixture()
def d10_doc(doc: GerberDocument) -> GerberDocument:
    """``doc`` with D10 = 2.0 circle already selected."""
    doc.define_aperture("D10", "C", "2")
    doc.function(aperture="D10")
    return doc


@pytest.fixture()
def mm_target() -> GerberDocument:
    """Empty millimetre document, format 3.4."""
    return make_document(integer=3, decimal=4, unit="mm")


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop handlers installed by ``setup_logging`` during a test."""
    yield
    from photoplot.utils import logging_config

    root = logging.getLogger("photoplot")
    for handler in logging_config._handlers:
        root.removeHandler(handler)
        handler.close()
    logging_config._handlers.clear()
    root.setLevel(logging.NOTSET)
    logging_config.pop_context()
