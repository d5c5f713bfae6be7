# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""DeploymentOrchestrator — turns a quota into placed units, one at a time.

Protocol for an automatic run:
  1. Refuse unless analysis is complete (read-only check).
  2. Supersede any in-flight run and empty the session.
  3. Walk DEPLOYMENT_ORDER; for each kind place units 0..count-1:
     resolve a candidate with the kind's strategy, push it clear of every
     unit already in the session, append it, publish UNIT_PLACED.
  4. Pause ``unit_interval_s`` between units and ``kind_interval_s``
     between kinds so the map can show units arriving.
  5. Publish DEPLOYMENT_COMPLETED.

Before every emission the run checks that it is still the current
generation; a superseded run stops quietly.

Manual placement bypasses strategies and conflict avoidance entirely and
drops the unit exactly where the user clicked.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable

from loguru import logger

from planner.analysis.pipeline import AnalysisPipeline, AnalysisStatus
from planner.comms.event_bus import EventBus, EventType
from planner.config import Settings, get_settings
from planner.deployment import placer
from planner.deployment.models import (
    DEPLOYMENT_ORDER,
    MANUAL_PLACEMENT,
    DeploymentQuota,
    PlacedUnit,
    ResourceKind,
    min_separation_for,
)
from planner.deployment.session import DeploymentSession
from planner.deployment.strategies import resolve_candidate
from planner.errors import DeploymentNotReadyError, StaleOperationError
from planner.scheduler import AsyncioScheduler, Scheduler
from planner.tactical.geo import Point


class DeploymentOrchestrator:
    """Sole writer of the DeploymentSession."""

    def __init__(
        self,
        event_bus: EventBus,
        analysis: AnalysisPipeline,
        scheduler: Scheduler | None = None,
        settings: Settings | None = None,
        map_ready: Awaitable | None = None,
    ) -> None:
        self._event_bus = event_bus
        self._analysis = analysis
        self._scheduler = scheduler or AsyncioScheduler()
        self._settings = settings or get_settings()
        self._map_ready_source = map_ready
        self._map_ready: asyncio.Future | None = None
        self._session = DeploymentSession()
        self._generation = 0
        self._sequence = 0
        self._task: asyncio.Task | None = None

    @property
    def session(self) -> DeploymentSession:
        return self._session

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # -- commands ----------------------------------------------------------

    def start(self) -> asyncio.Task:
        """Start an automatic run for the analysed perimeter.

        Raises:
            DeploymentNotReadyError: analysis has not reached complete.
        """
        quota = self._analysis.quota
        if self._analysis.status != AnalysisStatus.COMPLETE or quota is None:
            logger.warning("Deployment requested before analysis completed")
            raise DeploymentNotReadyError()

        self.clear()
        if self._map_ready_source is not None and self._map_ready is None:
            self._map_ready = asyncio.ensure_future(self._map_ready_source)
        perimeter = self._analysis.perimeter
        logger.info(f"Deployment started: {quota.total} units across {len(perimeter)} vertices")
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, perimeter, quota)
        )
        return self._task

    def clear(self) -> int:
        """Supersede any in-flight run and discard every placed unit."""
        self._supersede()
        removed = self._session.clear()
        self._sequence = 0
        self._event_bus.publish(EventType.SESSION_CLEARED, {"removed": removed})
        if removed:
            logger.info(f"Deployment session cleared ({removed} units)")
        return removed

    def place_manual(self, kind: ResourceKind | str, point: Point) -> PlacedUnit:
        """Place one unit exactly at *point*.  No strategy, no spacing."""
        unit = self._emit(ResourceKind(kind), point, MANUAL_PLACEMENT, attempts=0, satisfied=True)
        logger.debug(f"Manual placement {unit.id} at ({point.lat:.6f}, {point.lng:.6f})")
        return unit

    def remove(self, unit_id: str) -> bool:
        unit = self._session.remove(unit_id)
        if unit is None:
            return False
        self._event_bus.publish(EventType.UNIT_REMOVED, {"id": unit_id})
        return True

    # -- automatic run -----------------------------------------------------

    async def _run(
        self, generation: int, perimeter: tuple[Point, ...], quota: DeploymentQuota,
    ) -> list[PlacedUnit]:
        placed: list[PlacedUnit] = []
        try:
            if self._map_ready is not None:
                # shielded so a superseded run cannot cancel the shared gate
                await asyncio.shield(self._map_ready)
            first_kind = True
            for kind in DEPLOYMENT_ORDER:
                count = quota.count(kind)
                if count == 0:
                    continue
                if not first_kind:
                    await self._scheduler.sleep(self._settings.kind_interval_s)
                first_kind = False
                for i in range(count):
                    if i > 0:
                        await self._scheduler.sleep(self._settings.unit_interval_s)
                    self._check_current(generation)
                    placed.append(self._place_auto(kind, perimeter, i, count))
            self._check_current(generation)
        except StaleOperationError:
            logger.debug(f"Deployment run {generation} superseded after {len(placed)} units")
            return []

        self._event_bus.publish(EventType.DEPLOYMENT_COMPLETED, {"count": len(placed)})
        logger.info(f"Deployment complete: {len(placed)} units placed")
        return placed

    def _place_auto(
        self, kind: ResourceKind, perimeter: tuple[Point, ...], index: int, count: int,
    ) -> PlacedUnit:
        s = self._settings
        strategy = kind.default_strategy
        candidate = resolve_candidate(strategy, perimeter, index, count, s)
        result = placer.place(
            candidate,
            min_separation_for(kind, s.min_separation_overrides),
            self._session.obstacles(s.min_separation_overrides),
            retry_cap=s.placement_retry_cap,
            step_m=s.perturbation_step_m,
        )
        unit = self._emit(
            kind, result.point, strategy.value,
            attempts=result.attempts, satisfied=not result.exhausted,
        )
        if result.exhausted:
            logger.warning(
                f"Placement exhausted for {unit.id} after {result.attempts} attempts; "
                f"accepting best-effort position"
            )
            self._event_bus.publish(EventType.PLACEMENT_EXHAUSTED, {
                "id": unit.id,
                "kind": kind.value,
                "attempts": result.attempts,
            })
        return unit

    def _emit(
        self, kind: ResourceKind, point: Point, strategy: str, attempts: int, satisfied: bool,
    ) -> PlacedUnit:
        seq = self._sequence
        self._sequence += 1
        unit = PlacedUnit(
            id=f"{kind.value}-{seq:04d}",
            kind=kind,
            position=point,
            strategy_used=strategy,
            sequence_index=seq,
            attempts=attempts,
            separation_satisfied=satisfied,
        )
        self._session.add(unit)
        self._event_bus.publish(EventType.UNIT_PLACED, {"unit": unit.to_dict()})
        return unit

    def _check_current(self, generation: int) -> None:
        if generation != self._generation:
            raise StaleOperationError(f"deployment run {generation} superseded")

    def _supersede(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
