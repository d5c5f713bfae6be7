# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Conflict-avoidance placer — bounded golden-angle perturbation.

A candidate conflicts with an existing unit when they are closer than the
larger of the two units' minimum separations.  On conflict the candidate is
pushed ``step * attempt`` meters from the original at a bearing of
``attempt * 137.5`` degrees, so successive tries spiral outward instead of
bouncing between two spots.

After ``retry_cap`` perturbations the last one is accepted regardless and
the result is flagged ``exhausted``.  Dense quotas on small perimeters would
otherwise never finish placing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from planner.deployment.strategies import GOLDEN_ANGLE_DEG
from planner.tactical import geo
from planner.tactical.geo import Point


@dataclass(frozen=True)
class Obstacle:
    """An already-placed unit as seen by the placer."""

    position: Point
    min_separation_m: float


@dataclass(frozen=True)
class PlacementResult:
    point: Point
    attempts: int
    exhausted: bool


def find_conflict(
    candidate: Point, min_separation_m: float, obstacles: Iterable[Obstacle],
) -> Obstacle | None:
    """First obstacle that *candidate* sits too close to, or None."""
    for ob in obstacles:
        required = max(min_separation_m, ob.min_separation_m)
        if geo.distance_meters(candidate, ob.position) < required:
            return ob
    return None


def perturb(origin: Point, attempt: int, step_m: float) -> Point:
    """Perturbed candidate for retry number *attempt* (1-based)."""
    return geo.offset_point(origin, step_m * attempt, (attempt * GOLDEN_ANGLE_DEG) % 360.0)


def place(
    candidate: Point,
    min_separation_m: float,
    obstacles: Iterable[Obstacle],
    retry_cap: int = 10,
    step_m: float = 10.0,
) -> PlacementResult:
    """Resolve *candidate* against *obstacles*.

    Always terminates.  ``attempts`` counts perturbations tried; zero means
    the candidate was accepted as given.
    """
    obstacles = list(obstacles)
    if find_conflict(candidate, min_separation_m, obstacles) is None:
        return PlacementResult(candidate, 0, False)

    point = candidate
    for attempt in range(1, retry_cap + 1):
        point = perturb(candidate, attempt, step_m)
        if find_conflict(point, min_separation_m, obstacles) is None:
            return PlacementResult(point, attempt, False)
    return PlacementResult(point, retry_cap, True)
