# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""DeploymentSession — the live set of placed units for the current plan."""

from __future__ import annotations

from collections import Counter
from typing import Iterator, Mapping

from planner.deployment.models import DeploymentQuota, PlacedUnit, ResourceKind, min_separation_for
from planner.deployment.placer import Obstacle


class DeploymentSession:
    """Ordered units for one perimeter.

    Only the orchestrator mutates a session; everyone else reads it.
    """

    def __init__(self) -> None:
        self._units: list[PlacedUnit] = []

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[PlacedUnit]:
        return iter(list(self._units))

    @property
    def units(self) -> list[PlacedUnit]:
        return list(self._units)

    def add(self, unit: PlacedUnit) -> None:
        self._units.append(unit)

    def remove(self, unit_id: str) -> PlacedUnit | None:
        for i, unit in enumerate(self._units):
            if unit.id == unit_id:
                return self._units.pop(i)
        return None

    def clear(self) -> int:
        n = len(self._units)
        self._units = []
        return n

    def get(self, unit_id: str) -> PlacedUnit | None:
        for unit in self._units:
            if unit.id == unit_id:
                return unit
        return None

    def counts_by_kind(self) -> dict[ResourceKind, int]:
        counts = Counter(u.kind for u in self._units)
        return {kind: counts.get(kind, 0) for kind in ResourceKind}

    def obstacles(self, overrides: Mapping[str, float] | None = None) -> list[Obstacle]:
        return [
            Obstacle(u.position, min_separation_for(u.kind, overrides))
            for u in self._units
        ]

    def ledger(self, quota: DeploymentQuota) -> list[dict]:
        """Per-kind deployment status against *quota*.

        Status is ``ready`` with nothing placed, ``standby`` while partially
        placed and ``deployed`` once the quota is met.
        """
        deployed = self.counts_by_kind()
        rows = []
        for kind in ResourceKind:
            required = quota.count(kind)
            placed = deployed[kind]
            if placed == 0:
                status = "ready"
            elif placed < required:
                status = "standby"
            else:
                status = "deployed"
            coverage = 100.0 if required == 0 else min(100.0, placed / required * 100)
            rows.append({
                "kind": kind.value,
                "required": required,
                "deployed": placed,
                "status": status,
                "coverage_percentage": round(coverage),
            })
        return rows

    def to_list(self) -> list[dict]:
        return [u.to_dict() for u in self._units]
