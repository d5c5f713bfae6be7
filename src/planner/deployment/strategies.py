# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Placement strategies — turn (strategy, index, count) into a candidate point.

Strategies:
  corners    vertex i mod V; later passes fan out on a widening ring
  midpoints  midpoint of edge (i, i+1); later passes step off the edge,
             alternating sides
  center     golden-angle spiral out from the centroid
  perimeter  point at arc-length fraction i/n along the boundary
  patrol     alternate NE / SW bounding-box corners, pushed outward by i
  entrances  vertex at stride V/n, nudged sideways by the parity of i

Candidates are pure functions of their inputs.  Spacing between units is
the conflict-avoidance placer's job, not this module's.
"""

from __future__ import annotations

import math

from planner.config import Settings, get_settings
from planner.deployment.models import PlacementStrategy
from planner.tactical import geo
from planner.tactical.geo import Perimeter, Point

GOLDEN_ANGLE_DEG = 137.5


def resolve_candidate(
    strategy: PlacementStrategy | str,
    perimeter: Perimeter,
    index: int,
    count: int,
    settings: Settings | None = None,
) -> Point:
    """Candidate position for unit *index* of *count* under *strategy*.

    Raises:
        ValueError: unknown strategy name, empty perimeter, or negative index.
    """
    strategy = PlacementStrategy(strategy)
    if not perimeter:
        raise ValueError("perimeter has no vertices")
    if index < 0:
        raise ValueError(f"index must be >= 0, got {index}")
    s = settings or get_settings()
    count = max(count, index + 1, 1)
    return _RESOLVERS[strategy](list(perimeter), index, count, s)


# ---------------------------------------------------------------------------
# Strategy implementations
# ---------------------------------------------------------------------------

def _corners(points: list[Point], i: int, n: int, s: Settings) -> Point:
    v = len(points)
    vertex = points[i % v]
    ring = i // v
    if ring == 0:
        return vertex
    bearing = (i / v) * 360.0
    return geo.offset_point(vertex, ring * s.corner_ring_step_m, bearing)


def _midpoints(points: list[Point], i: int, n: int, s: Settings) -> Point:
    v = len(points)
    a = points[i % v]
    b = points[(i + 1) % v]
    mid = geo.interpolate(a, b, 0.5)
    ring = i // v
    if ring == 0 or a == b:
        return mid
    # Odd passes step to the right of the edge, even passes to the left
    side = 90.0 if ring % 2 == 1 else -90.0
    distance = math.ceil(ring / 2) * s.midpoint_offset_step_m
    return geo.offset_point(mid, distance, geo.bearing_degrees(a, b) + side)


def _center(points: list[Point], i: int, n: int, s: Settings) -> Point:
    origin = geo.centroid(points)
    return geo.offset_point(origin, i * s.center_radius_step_m, (i * GOLDEN_ANGLE_DEG) % 360.0)


def _perimeter(points: list[Point], i: int, n: int, s: Settings) -> Point:
    v = len(points)
    edges = [geo.distance_meters(points[k], points[(k + 1) % v]) for k in range(v)]
    total = sum(edges)
    if total == 0:
        return points[0]
    target = total * (i / n)
    walked = 0.0
    for k, length in enumerate(edges):
        if length > 0 and walked + length > target:
            return geo.interpolate(points[k], points[(k + 1) % v], (target - walked) / length)
        walked += length
    return points[0]


def _patrol(points: list[Point], i: int, n: int, s: Settings) -> Point:
    ne, sw = geo.bounds_of(points)
    distance = i * s.patrol_offset_step_m
    if i % 2 == 0:
        return geo.offset_point(ne, distance, 45.0)
    return geo.offset_point(sw, distance, 225.0)


def _entrances(points: list[Point], i: int, n: int, s: Settings) -> Point:
    v = len(points)
    k = (i * v // n) % v
    vertex = points[k]
    nxt = points[(k + 1) % v]
    if vertex == nxt:
        return vertex
    side = 90.0 if i % 2 == 0 else -90.0
    return geo.offset_point(vertex, s.entrance_offset_m, geo.bearing_degrees(vertex, nxt) + side)


_RESOLVERS = {
    PlacementStrategy.CORNERS: _corners,
    PlacementStrategy.MIDPOINTS: _midpoints,
    PlacementStrategy.CENTER: _center,
    PlacementStrategy.PERIMETER: _perimeter,
    PlacementStrategy.PATROL: _patrol,
    PlacementStrategy.ENTRANCES: _entrances,
}
