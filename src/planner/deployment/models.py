# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Deployment data model — resource kinds, quotas, placed units.

Each ResourceKind carries a profile: the minimum distance other units must
keep from it and the strategy used when the orchestrator places it
automatically.  Everything here serializes to plain dicts for the export
layer.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from planner.tactical.geo import Point


class PlacementStrategy(str, enum.Enum):
    CORNERS = "corners"
    MIDPOINTS = "midpoints"
    CENTER = "center"
    PERIMETER = "perimeter"
    PATROL = "patrol"
    ENTRANCES = "entrances"


# Strategy label recorded for units placed by a map click
MANUAL_PLACEMENT = "manual"


class ResourceKind(str, enum.Enum):
    GUARD = "guard"
    CAMERA = "camera"
    SENSOR = "sensor"
    K9 = "k9"
    DRONE = "drone"
    MEDICAL = "medical"
    BARRIER = "barrier"
    RADIO = "radio"

    @property
    def profile(self) -> KindProfile:
        return KIND_PROFILES[self]

    @property
    def min_separation_m(self) -> float:
        return KIND_PROFILES[self].min_separation_m

    @property
    def default_strategy(self) -> PlacementStrategy:
        return KIND_PROFILES[self].strategy


@dataclass(frozen=True)
class KindProfile:
    min_separation_m: float
    strategy: PlacementStrategy
    label: str


KIND_PROFILES: dict[ResourceKind, KindProfile] = {
    ResourceKind.GUARD: KindProfile(20.0, PlacementStrategy.CORNERS, "Security Guard"),
    ResourceKind.CAMERA: KindProfile(25.0, PlacementStrategy.CENTER, "CCTV Camera"),
    ResourceKind.SENSOR: KindProfile(15.0, PlacementStrategy.PERIMETER, "Motion Sensor"),
    ResourceKind.K9: KindProfile(30.0, PlacementStrategy.MIDPOINTS, "K9 Unit"),
    ResourceKind.DRONE: KindProfile(50.0, PlacementStrategy.PATROL, "Aerial Drone"),
    ResourceKind.MEDICAL: KindProfile(40.0, PlacementStrategy.CENTER, "Medical Station"),
    ResourceKind.BARRIER: KindProfile(8.0, PlacementStrategy.ENTRANCES, "Crowd Barrier"),
    ResourceKind.RADIO: KindProfile(20.0, PlacementStrategy.PERIMETER, "Radio Relay"),
}

# Aerial and high-vantage kinds first.  Only affects draw order on the map.
DEPLOYMENT_ORDER: tuple[ResourceKind, ...] = (
    ResourceKind.DRONE,
    ResourceKind.CAMERA,
    ResourceKind.GUARD,
    ResourceKind.K9,
    ResourceKind.SENSOR,
    ResourceKind.BARRIER,
    ResourceKind.MEDICAL,
    ResourceKind.RADIO,
)


@dataclass(frozen=True)
class DeploymentQuota:
    """Required unit counts per kind for one perimeter.

    Built in one go by the capacity estimator and replaced wholesale when the
    perimeter changes, never patched in place.
    """

    counts: Mapping[ResourceKind, int]
    capacity: int = 0
    area_m2: float = 0.0
    vertex_count: int = 0

    def __post_init__(self) -> None:
        frozen = {kind: int(self.counts.get(kind, 0)) for kind in ResourceKind}
        object.__setattr__(self, "counts", MappingProxyType(frozen))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeploymentQuota):
            return NotImplemented
        return (
            dict(self.counts) == dict(other.counts)
            and self.capacity == other.capacity
            and self.area_m2 == other.area_m2
            and self.vertex_count == other.vertex_count
        )

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def empty(cls) -> DeploymentQuota:
        return cls(counts={})

    def count(self, kind: ResourceKind) -> int:
        return self.counts[kind]

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def to_dict(self) -> dict:
        return {
            "capacity": self.capacity,
            "area_m2": round(self.area_m2, 2),
            "vertex_count": self.vertex_count,
            "counts": {kind.value: n for kind, n in self.counts.items()},
        }


@dataclass
class PlacedUnit:
    """One resource unit on the map."""

    id: str
    kind: ResourceKind
    position: Point
    strategy_used: str
    sequence_index: int
    attempts: int = 0
    separation_satisfied: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "position": self.position.to_dict(),
            "strategy_used": self.strategy_used,
            "sequence_index": self.sequence_index,
            "attempts": self.attempts,
            "separation_satisfied": self.separation_satisfied,
        }


def min_separation_for(kind: ResourceKind, overrides: Mapping[str, float] | None = None) -> float:
    """Minimum separation for *kind*, honouring configured overrides."""
    if overrides and kind.value in overrides:
        return overrides[kind.value]
    return kind.min_separation_m
