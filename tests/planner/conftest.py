# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Shared fixtures for planner tests — perimeters, settings, virtual clock."""

from __future__ import annotations

import pytest

from planner.config import Settings
from planner.scheduler import ManualClock
from planner.tactical.geo import Point, offset_point

# Dublin, CA
ORIGIN = Point(37.7161, -121.9138)


def _square(side_m: float, origin: Point = ORIGIN) -> list[Point]:
    """Counter-clockwise square with its south-west corner at *origin*."""
    sw = origin
    se = offset_point(sw, side_m, 90.0)
    ne = offset_point(se, side_m, 0.0)
    nw = offset_point(sw, side_m, 0.0)
    return [sw, se, ne, nw]


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def origin() -> Point:
    return ORIGIN


@pytest.fixture
def make_square():
    """Factory: make_square(side_m) -> 4-point square perimeter."""
    return _square


@pytest.fixture
def square() -> list[Point]:
    """100 m x 100 m square, ~10,000 m²."""
    return _square(100.0)


@pytest.fixture
def l_shape() -> list[Point]:
    """Concave L: 100 m square with the north-east 50 m quadrant cut out."""
    p0 = ORIGIN
    p1 = offset_point(p0, 100.0, 90.0)
    p2 = offset_point(p1, 50.0, 0.0)
    p3 = offset_point(offset_point(p0, 50.0, 90.0), 50.0, 0.0)
    p4 = offset_point(offset_point(p0, 50.0, 90.0), 100.0, 0.0)
    p5 = offset_point(p0, 100.0, 0.0)
    return [p0, p1, p2, p3, p4, p5]


@pytest.fixture
def bowtie(square) -> list[Point]:
    """Self-intersecting quad: the square with two vertices swapped."""
    sw, se, ne, nw = square
    return [sw, ne, se, nw]
