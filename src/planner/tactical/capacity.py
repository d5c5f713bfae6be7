# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Capacity estimator — crowd capacity and per-kind unit counts.

Sizing rules:
  - capacity: one person per ``area_per_person`` square meters
  - guards:   one per area quantum, with a floor
  - cameras:  scale with vertex count (every corner is a blind-spot risk)
  - barriers: linear in vertex count (barriers span edges)
  - sensors:  linear in vertex count
  - K9, medical: coarse area steps with a floor
  - drones:   step up once the area passes a threshold
  - radios:   one relay per few guards

Every count is non-decreasing in area and in vertex count, and the estimate
is a pure function of the perimeter and settings.
"""

from __future__ import annotations

import math

from planner.config import Settings, get_settings
from planner.deployment.models import DeploymentQuota, ResourceKind
from planner.tactical import geo
from planner.tactical.geo import Perimeter


def estimate_capacity(area_m2: float, settings: Settings | None = None) -> int:
    """Crowd capacity for an area.  Zero for a degenerate area."""
    s = settings or get_settings()
    if area_m2 <= 0:
        return 0
    return int(math.floor(area_m2 / s.area_per_person))


def quota_counts(
    area_m2: float, vertex_count: int, settings: Settings | None = None,
) -> dict[ResourceKind, int]:
    """Unit counts per kind for a given area and vertex count."""
    s = settings or get_settings()
    area_m2 = max(0.0, area_m2)
    vertex_count = max(0, vertex_count)

    guards = max(s.guard_min, math.ceil(area_m2 / s.guard_area_quantum))
    drones = s.drone_min if area_m2 <= s.drone_area_threshold else max(s.drone_min, s.drone_max)
    return {
        ResourceKind.GUARD: guards,
        ResourceKind.CAMERA: max(s.camera_min, math.ceil(vertex_count * s.camera_per_vertex)),
        ResourceKind.BARRIER: max(s.barrier_min, vertex_count * s.barrier_per_vertex),
        ResourceKind.SENSOR: max(s.sensor_min, vertex_count * s.sensor_per_vertex),
        ResourceKind.K9: max(s.k9_min, math.floor(area_m2 / s.k9_area_step)),
        ResourceKind.DRONE: drones,
        ResourceKind.MEDICAL: max(s.medical_min, math.floor(area_m2 / s.medical_area_step)),
        ResourceKind.RADIO: max(s.radio_min, math.ceil(guards / s.guards_per_radio)),
    }


def estimate_quota(perimeter: Perimeter, settings: Settings | None = None) -> DeploymentQuota:
    """Derive the full quota for a perimeter.

    Fewer than three vertices means no enclosed area: the result is an empty
    quota with zero capacity rather than an error, since callers run this
    speculatively while the perimeter is still being drawn.
    """
    s = settings or get_settings()
    if len(perimeter) < 3:
        return DeploymentQuota.empty()
    area_m2 = geo.area(perimeter)
    return DeploymentQuota(
        counts=quota_counts(area_m2, len(perimeter), s),
        capacity=estimate_capacity(area_m2, s),
        area_m2=area_m2,
        vertex_count=len(perimeter),
    )
