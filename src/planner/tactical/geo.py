# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Geo math for perimeter polygons — areas, distances, bearings, hit tests.

Every other component builds on these helpers, so they are pure and never
raise for malformed-but-parseable input: a perimeter with fewer than three
vertices has zero area, an empty perimeter has its centroid at (0, 0).

Convention:
    - Points are (lat, lng) in decimal degrees
    - Distances are meters on a spherical Earth (mean radius)
    - Bearing 0 = North, clockwise in degrees

Perimeters are plain sequences of Points.  Their order matters: it defines
the edges and the vertex indices that placement strategies walk.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

EARTH_RADIUS_M = 6_371_008.8


@dataclass(frozen=True)
class Point:
    """A (lat, lng) pair in decimal degrees."""

    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


Perimeter = Sequence[Point]


# ---------------------------------------------------------------------------
# Distance and direction
# ---------------------------------------------------------------------------

def distance_meters(a: Point, b: Point) -> float:
    """Great-circle (haversine) distance between two points."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def bearing_degrees(a: Point, b: Point) -> float:
    """Initial great-circle bearing from *a* to *b*, in [0, 360)."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlng = math.radians(b.lng - a.lng)
    y = math.sin(dlng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlng)
    return math.degrees(math.atan2(y, x)) % 360.0


def offset_point(origin: Point, distance_m: float, bearing_deg: float) -> Point:
    """Destination reached by travelling *distance_m* from *origin* on a bearing."""
    if distance_m == 0:
        return origin
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    lat1 = math.radians(origin.lat)
    lng1 = math.radians(origin.lng)
    lat2 = math.asin(
        math.sin(lat1) * math.cos(delta)
        + math.cos(lat1) * math.sin(delta) * math.cos(theta)
    )
    lng2 = lng1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )
    # Normalise longitude to [-180, 180)
    lng_deg = (math.degrees(lng2) + 540.0) % 360.0 - 180.0
    return Point(math.degrees(lat2), lng_deg)


def interpolate(a: Point, b: Point, fraction: float) -> Point:
    """Linear interpolation in lat/lng space.  Fine at event scale."""
    return Point(
        a.lat + (b.lat - a.lat) * fraction,
        a.lng + (b.lng - a.lng) * fraction,
    )


# ---------------------------------------------------------------------------
# Polygon measures
# ---------------------------------------------------------------------------

def area(perimeter: Perimeter) -> float:
    """Spherical polygon area in square meters.

    Sums the signed areas of the polar triangles formed by each edge and the
    pole (the spherical shoelace).  The absolute value makes the result
    independent of winding direction; summing over edges makes it independent
    of which vertex comes first.
    """
    if len(perimeter) < 3:
        return 0.0
    total = 0.0
    prev = perimeter[-1]
    prev_tan = math.tan((math.pi / 2 - math.radians(prev.lat)) / 2)
    prev_lng = math.radians(prev.lng)
    for p in perimeter:
        tan_lat = math.tan((math.pi / 2 - math.radians(p.lat)) / 2)
        lng = math.radians(p.lng)
        total += _polar_triangle_area(tan_lat, lng, prev_tan, prev_lng)
        prev_tan, prev_lng = tan_lat, lng
    return abs(total * EARTH_RADIUS_M * EARTH_RADIUS_M)


def _polar_triangle_area(tan1: float, lng1: float, tan2: float, lng2: float) -> float:
    dlng = lng1 - lng2
    t = tan1 * tan2
    return 2 * math.atan2(t * math.sin(dlng), 1 + t * math.cos(dlng))


def perimeter_length(perimeter: Perimeter) -> float:
    """Length of the closed boundary in meters (closing edge included)."""
    n = len(perimeter)
    if n < 2:
        return 0.0
    return sum(distance_meters(perimeter[i], perimeter[(i + 1) % n]) for i in range(n))


def centroid(perimeter: Perimeter) -> Point:
    """Arithmetic mean of the vertices (not the geodesic centroid)."""
    if not perimeter:
        return Point(0.0, 0.0)
    n = len(perimeter)
    return Point(
        sum(p.lat for p in perimeter) / n,
        sum(p.lng for p in perimeter) / n,
    )


def bounds_of(perimeter: Perimeter) -> tuple[Point, Point]:
    """Return (northeast, southwest) corners of the bounding box."""
    if not perimeter:
        return Point(0.0, 0.0), Point(0.0, 0.0)
    lats = [p.lat for p in perimeter]
    lngs = [p.lng for p in perimeter]
    return Point(max(lats), max(lngs)), Point(min(lats), min(lngs))


# ---------------------------------------------------------------------------
# Hit testing and validity
# ---------------------------------------------------------------------------

def contains_point(point: Point, perimeter: Perimeter) -> bool:
    """Even-odd ray cast.  Correct for convex and simple concave polygons."""
    n = len(perimeter)
    if n < 3:
        return False
    inside = False
    j = n - 1
    for i in range(n):
        pi, pj = perimeter[i], perimeter[j]
        if (pi.lat > point.lat) != (pj.lat > point.lat):
            cross_lng = pi.lng + (point.lat - pi.lat) * (pj.lng - pi.lng) / (pj.lat - pi.lat)
            if point.lng < cross_lng:
                inside = not inside
        j = i
    return inside


def is_simple(perimeter: Perimeter) -> bool:
    """True when no two non-adjacent edges intersect."""
    n = len(perimeter)
    if n < 3:
        return False
    edges = [(perimeter[i], perimeter[(i + 1) % n]) for i in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            # Adjacent edges share a vertex
            if j == i + 1 or (i == 0 and j == n - 1):
                continue
            if _segments_intersect(*edges[i], *edges[j]):
                return False
    return True


def _orientation(a: Point, b: Point, c: Point) -> float:
    return (b.lng - a.lng) * (c.lat - a.lat) - (b.lat - a.lat) * (c.lng - a.lng)


def _on_segment(a: Point, b: Point, c: Point) -> bool:
    return (
        min(a.lng, b.lng) <= c.lng <= max(a.lng, b.lng)
        and min(a.lat, b.lat) <= c.lat <= max(a.lat, b.lat)
    )


def _segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    d1 = _orientation(q1, q2, p1)
    d2 = _orientation(q1, q2, p2)
    d3 = _orientation(p1, p2, q1)
    d4 = _orientation(p1, p2, q2)
    if ((d1 > 0 and d2 < 0) or (d1 < 0 and d2 > 0)) and (
        (d3 > 0 and d4 < 0) or (d3 < 0 and d4 > 0)
    ):
        return True
    # Collinear touching cases
    if d1 == 0 and _on_segment(q1, q2, p1):
        return True
    if d2 == 0 and _on_segment(q1, q2, p2):
        return True
    if d3 == 0 and _on_segment(p1, p2, q1):
        return True
    if d4 == 0 and _on_segment(p1, p2, q2):
        return True
    return False
