# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""SecurityPlanner — composition root and in-process command surface.

Wires one EventBus, one scheduler, the AnalysisPipeline and the
DeploymentOrchestrator together, and exposes the commands the UI layer
calls:

    start_analysis(perimeter)   cancel_analysis()
    start_auto_deployment()     clear_deployment()
    clear_perimeter()           place_unit(kind, point)

plus the perimeter editing calls the map surface drives (add_vertex,
move_vertex, remove_vertex, set_perimeter).  Any perimeter edit is a
redefinition: running analysis is cancelled, the pipeline returns to
idle, and the deployment session is emptied.

The two components never write to each other.  The orchestrator only
reads analysis status, perimeter and quota.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, Protocol

from loguru import logger

from planner.analysis.pipeline import AnalysisPipeline, AnalysisState, AnalysisStatus
from planner.analysis.threats import ThreatFinding
from planner.comms.event_bus import Event, EventBus, EventType
from planner.config import Settings, get_settings
from planner.deployment.models import DeploymentQuota, PlacedUnit, ResourceKind
from planner.deployment.orchestrator import DeploymentOrchestrator
from planner.export import PlanSnapshot
from planner.scheduler import AsyncioScheduler, Scheduler
from planner.tactical.capacity import estimate_quota
from planner.tactical.geo import Perimeter, Point


class MapSurface(Protocol):
    """What the map rendering layer must accept."""

    def on_unit_placed(self, unit: PlacedUnit) -> None: ...

    def on_unit_removed(self, unit_id: str) -> None: ...

    def on_session_cleared(self) -> None: ...


class SecurityPlanner:
    """One plan: a perimeter, its analysis, and its deployment."""

    def __init__(
        self,
        settings: Settings | None = None,
        scheduler: Scheduler | None = None,
        event_bus: EventBus | None = None,
        map_surface: MapSurface | None = None,
        map_ready: Awaitable | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.event_bus = event_bus or EventBus(queue_size=self.settings.event_queue_size)
        self.scheduler = scheduler or AsyncioScheduler()
        self.analysis = AnalysisPipeline(self.event_bus, self.scheduler, self.settings)
        self.orchestrator = DeploymentOrchestrator(
            self.event_bus, self.analysis, self.scheduler, self.settings,
            map_ready=map_ready,
        )
        self._perimeter: tuple[Point, ...] = ()
        self._estimate = DeploymentQuota.empty()
        self._map_surface = map_surface
        if map_surface is not None:
            self.event_bus.add_listener(self._forward_to_map)

    # -- read side ---------------------------------------------------------

    @property
    def perimeter(self) -> tuple[Point, ...]:
        return self._perimeter

    @property
    def estimate(self) -> DeploymentQuota:
        """Live quota for the perimeter as drawn so far."""
        return self._estimate

    @property
    def analysis_state(self) -> AnalysisState:
        return self.analysis.state

    @property
    def findings(self) -> list[ThreatFinding]:
        return self.analysis.findings

    @property
    def units(self) -> list[PlacedUnit]:
        return self.orchestrator.session.units

    @property
    def plan_status(self) -> str:
        status = self.analysis.status
        if status == AnalysisStatus.ANALYZING:
            return "analyzing"
        if status == AnalysisStatus.COMPLETE:
            return "deployed" if len(self.orchestrator.session) else "complete"
        return "draft"

    # -- perimeter editing -------------------------------------------------

    def set_perimeter(self, points: Iterable[Point]) -> None:
        self._redefine(tuple(points))

    def add_vertex(self, point: Point) -> None:
        self._redefine(self._perimeter + (point,))

    def move_vertex(self, index: int, point: Point) -> None:
        points = list(self._perimeter)
        points[index] = point
        self._redefine(tuple(points))

    def remove_vertex(self, index: int) -> None:
        points = list(self._perimeter)
        del points[index]
        self._redefine(tuple(points))

    def clear_perimeter(self) -> None:
        self._redefine(())

    # -- commands ----------------------------------------------------------

    def start_analysis(self, perimeter: Perimeter | None = None) -> asyncio.Task:
        """Analyse *perimeter* (or the current one).

        Raises:
            InvalidPerimeterError: the perimeter cannot be analysed.
        """
        if perimeter is not None:
            self._redefine(tuple(perimeter))
        else:
            self.orchestrator.clear()
        return self.analysis.start(self._perimeter)

    def cancel_analysis(self) -> bool:
        return self.analysis.cancel()

    def start_auto_deployment(self) -> asyncio.Task:
        """Raises DeploymentNotReadyError unless analysis is complete."""
        return self.orchestrator.start()

    def clear_deployment(self) -> int:
        return self.orchestrator.clear()

    def place_unit(self, kind: ResourceKind | str, point: Point) -> PlacedUnit:
        return self.orchestrator.place_manual(kind, point)

    def remove_unit(self, unit_id: str) -> bool:
        return self.orchestrator.remove(unit_id)

    # -- export ------------------------------------------------------------

    def snapshot(self) -> PlanSnapshot:
        quota = self.analysis.quota or self._estimate
        return PlanSnapshot.model_validate({
            "status": self.plan_status,
            "perimeter": [p.to_dict() for p in self._perimeter],
            "area_m2": round(quota.area_m2, 2),
            "capacity": quota.capacity,
            "quota": {kind.value: n for kind, n in quota.counts.items()},
            "ledger": self.orchestrator.session.ledger(quota),
            "units": self.orchestrator.session.to_list(),
            "findings": [f.to_dict() for f in self.analysis.findings],
        })

    # -- internals ---------------------------------------------------------

    def _redefine(self, points: tuple[Point, ...]) -> None:
        self.analysis.reset()
        if len(self.orchestrator.session) or self.orchestrator.running:
            self.orchestrator.clear()
        self._perimeter = points
        self._estimate = estimate_quota(points, self.settings)
        self.event_bus.publish(EventType.PERIMETER_CHANGED, {
            "vertex_count": len(points),
            "area_m2": round(self._estimate.area_m2, 2),
            "capacity": self._estimate.capacity,
        })
        logger.debug(f"Perimeter redefined: {len(points)} vertices")

    def _forward_to_map(self, event: Event) -> None:
        surface = self._map_surface
        if event.type == EventType.UNIT_PLACED:
            unit = self.orchestrator.session.get(event.data["unit"]["id"])
            if unit is not None:
                surface.on_unit_placed(unit)
        elif event.type == EventType.UNIT_REMOVED:
            surface.on_unit_removed(event.data["id"])
        elif event.type == EventType.SESSION_CLEARED:
            surface.on_session_cleared()
