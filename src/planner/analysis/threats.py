# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Synthetic threat findings anchored to the perimeter's bounding box.

These are canned planning prompts, not intelligence.  Each finding sits at
a fixed spot relative to the box (north edge, west edge, NE corner, SW
corner) pulled slightly inward so it lands on the protected area.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from planner.tactical import geo
from planner.tactical.geo import Perimeter, Point

# How far findings are pulled in from the box edge
_INSET_M = 11.0


class Severity(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ThreatFinding:
    id: str
    severity: Severity
    category: str
    title: str
    location: Point
    description: str
    recommended_actions: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "category": self.category,
            "title": self.title,
            "location": self.location.to_dict(),
            "description": self.description,
            "recommended_actions": list(self.recommended_actions),
        }


def synthesize_findings(perimeter: Perimeter) -> list[ThreatFinding]:
    """Fixed batch of four findings for *perimeter*.  Empty for < 3 vertices."""
    if len(perimeter) < 3:
        return []
    ne, sw = geo.bounds_of(perimeter)
    center = geo.centroid(perimeter)

    north = geo.offset_point(Point(ne.lat, center.lng), _INSET_M, 180.0)
    west = geo.offset_point(Point(center.lat, sw.lng), _INSET_M, 90.0)
    southwest = geo.offset_point(sw, _INSET_M * 2, 45.0)

    return [
        ThreatFinding(
            id="threat-vehicle",
            severity=Severity.HIGH,
            category="vehicle",
            title="Vehicle Ram Attack Vector",
            location=north,
            description="Unprotected road access on north perimeter",
            recommended_actions=(
                "Deploy concrete barriers",
                "Install bollards",
                "Position security checkpoint",
            ),
        ),
        ThreatFinding(
            id="threat-crowd",
            severity=Severity.MEDIUM,
            category="crowd",
            title="Crowd Bottleneck",
            location=west,
            description="Potential crushing hazard at main entrance",
            recommended_actions=(
                "Widen entrance area",
                "Add flow control barriers",
                "Station crowd control team",
            ),
        ),
        ThreatFinding(
            id="threat-elevation",
            severity=Severity.HIGH,
            category="sniper",
            title="Elevated Threat Position",
            location=ne,
            description="Adjacent building provides vantage point",
            recommended_actions=(
                "Deploy counter-sniper team",
                "Secure rooftop access",
                "Install screening",
            ),
        ),
        ThreatFinding(
            id="threat-infiltration",
            severity=Severity.MEDIUM,
            category="perimeter",
            title="Weak Perimeter Section",
            location=southwest,
            description="Inadequate lighting and surveillance coverage",
            recommended_actions=(
                "Install motion sensors",
                "Add lighting",
                "Increase patrol frequency",
            ),
        ),
    ]
