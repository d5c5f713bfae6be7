# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""AnalysisPipeline — staged, cancellable perimeter analysis.

State graph::

    idle ──start──> analyzing ──all stages──> complete
     │                 │  │                      │
     │ bad perimeter   │  └──cancel/redefine──> idle <── redefine ──┘
     v                 v
    error <────────────┘ (unexpected failure)
     │
     └──redefine──> idle

While analyzing, the fixed STAGES run strictly in order.  Each stage
publishes its message and progress, then waits out its delay on the
scheduler.  When the last stage finishes the pipeline synthesizes threat
findings, computes the deployment quota, and enters complete, the only
state from which deployment may start.

Runs are tracked by a generation counter.  Starting, cancelling or
resetting bumps the counter and cancels the in-flight task; a run that
finds itself superseded stops without publishing anything further.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass

from loguru import logger

from planner.analysis.state_machine import State, StateMachine
from planner.analysis.threats import ThreatFinding, synthesize_findings
from planner.comms.event_bus import EventBus, EventType
from planner.config import Settings, get_settings
from planner.deployment.models import DeploymentQuota
from planner.errors import InvalidPerimeterError, StaleOperationError
from planner.scheduler import AsyncioScheduler, Scheduler
from planner.tactical import geo
from planner.tactical.capacity import estimate_quota
from planner.tactical.geo import Perimeter, Point


class AnalysisStatus(str, enum.Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class AnalysisStage:
    name: str
    message: str
    progress: int
    delay_s: float


STAGES: tuple[AnalysisStage, ...] = (
    AnalysisStage("imagery", "Scanning satellite imagery...", 10, 0.8),
    AnalysisStage("access_points", "Identifying access points...", 20, 1.0),
    AnalysisStage("crowd_flow", "Analyzing crowd flow patterns...", 35, 1.2),
    AnalysisStage("structural", "Detecting structural vulnerabilities...", 50, 1.0),
    AnalysisStage("guard_positions", "Calculating optimal guard positions...", 65, 1.5),
    AnalysisStage("line_of_sight", "Assessing line-of-sight coverage...", 80, 1.0),
    AnalysisStage("threat_matrix", "Generating threat matrix...", 95, 0.8),
    AnalysisStage("finalizing", "Finalizing security plan...", 100, 0.5),
)


@dataclass(frozen=True)
class AnalysisState:
    """Read-only snapshot of where the pipeline is."""

    status: AnalysisStatus
    stage: str | None = None
    progress: int = 0
    message: str = ""
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "stage": self.stage,
            "progress": self.progress,
            "message": self.message,
            "error": self.error,
        }


def _build_fsm() -> StateMachine:
    sm = StateMachine(AnalysisStatus.IDLE.value)
    for status in AnalysisStatus:
        sm.add_state(State(status.value))
    idle, analyzing, complete, error = (s.value for s in AnalysisStatus)
    sm.add_transition(idle, analyzing)
    sm.add_transition(idle, error)
    sm.add_transition(analyzing, complete)
    sm.add_transition(analyzing, error)
    sm.add_transition(analyzing, idle)
    sm.add_transition(complete, idle)
    sm.add_transition(error, idle)
    return sm


class AnalysisPipeline:
    """Owns AnalysisState, threat findings, and the post-analysis quota."""

    def __init__(
        self,
        event_bus: EventBus,
        scheduler: Scheduler | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._event_bus = event_bus
        self._scheduler = scheduler or AsyncioScheduler()
        self._settings = settings or get_settings()
        self._fsm = _build_fsm()
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._clear_results()

    # -- read side ---------------------------------------------------------

    @property
    def status(self) -> AnalysisStatus:
        return AnalysisStatus(self._fsm.current_state)

    @property
    def state(self) -> AnalysisState:
        return AnalysisState(
            status=self.status,
            stage=self._stage,
            progress=self._progress,
            message=self._message,
            error=self._error,
        )

    @property
    def history(self) -> list[tuple[float, str, str]]:
        return self._fsm.history

    @property
    def findings(self) -> list[ThreatFinding]:
        return list(self._findings)

    @property
    def quota(self) -> DeploymentQuota | None:
        """Quota for the analysed perimeter.  None until complete."""
        return self._quota

    @property
    def perimeter(self) -> tuple[Point, ...]:
        return self._perimeter

    # -- commands ----------------------------------------------------------

    def start(self, perimeter: Perimeter) -> asyncio.Task:
        """Begin analysing *perimeter*.  Must be called from a running loop.

        A new perimeter is a redefinition, so any earlier run is superseded
        and a completed or failed pipeline first drops back to idle.

        Raises:
            InvalidPerimeterError: fewer than 3 vertices or self-intersecting.
                The pipeline is left in the error state.
        """
        self.reset()
        points = tuple(perimeter)
        self._perimeter = points
        if len(points) < 3:
            raise self._fail(InvalidPerimeterError())
        if not geo.is_simple(points):
            raise self._fail(InvalidPerimeterError("cannot analyze — perimeter crosses itself"))

        self._fsm.transition(AnalysisStatus.ANALYZING.value)
        self._event_bus.publish(EventType.ANALYSIS_STARTED, {"vertex_count": len(points)})
        logger.info(f"Analysis started ({len(points)} vertices)")
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, points)
        )
        return self._task

    def cancel(self) -> bool:
        """Abort an in-flight analysis and return to idle.

        Returns True if something was cancelled.
        """
        if self.status != AnalysisStatus.ANALYZING:
            return False
        self._supersede()
        self._fsm.transition(AnalysisStatus.IDLE.value, {"reason": "cancelled"})
        self._clear_results()
        self._event_bus.publish(EventType.ANALYSIS_CANCELLED, {})
        logger.info("Analysis cancelled")
        return True

    def reset(self) -> None:
        """Perimeter cleared or redefined: back to idle with no results."""
        if self.status == AnalysisStatus.ANALYZING:
            self.cancel()
            return
        self._supersede()
        if self.status != AnalysisStatus.IDLE:
            self._fsm.transition(AnalysisStatus.IDLE.value, {"reason": "reset"})
        self._clear_results()

    # -- internals ---------------------------------------------------------

    async def _run(self, generation: int, points: tuple[Point, ...]) -> list[ThreatFinding]:
        scale = self._settings.analysis_delay_scale
        try:
            for stage in STAGES:
                self._check_current(generation)
                self._stage = stage.name
                self._progress = stage.progress
                self._message = stage.message
                self._event_bus.publish(EventType.ANALYSIS_STAGE_CHANGED, {
                    "stage": stage.name,
                    "progress": stage.progress,
                    "message": stage.message,
                })
                await self._scheduler.sleep(stage.delay_s * scale)

            self._check_current(generation)
            findings = synthesize_findings(points)
            quota = estimate_quota(points, self._settings)
        except StaleOperationError:
            logger.debug(f"Analysis run {generation} superseded")
            return []
        except Exception as e:
            logger.exception(f"Analysis run {generation} crashed")
            if generation == self._generation:
                self._fail(e)
            return []

        self._findings = findings
        self._quota = quota
        self._fsm.transition(AnalysisStatus.COMPLETE.value)
        self._event_bus.publish(EventType.QUOTA_COMPUTED, {"quota": quota.to_dict()})
        self._event_bus.publish(EventType.ANALYSIS_COMPLETED, {
            "findings": [f.to_dict() for f in findings],
        })
        logger.info(
            f"Analysis complete: {len(findings)} findings, "
            f"{quota.total} units required, capacity {quota.capacity}"
        )
        return list(findings)

    def _check_current(self, generation: int) -> None:
        if generation != self._generation:
            raise StaleOperationError(f"analysis run {generation} superseded")

    def _supersede(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    def _fail(self, err: Exception) -> Exception:
        self._fsm.transition(AnalysisStatus.ERROR.value, {"error": str(err)})
        self._error = str(err)
        self._findings = []
        self._quota = None
        self._event_bus.publish(EventType.ANALYSIS_FAILED, {"error": str(err)})
        logger.warning(f"Analysis failed: {err}")
        return err

    def _clear_results(self) -> None:
        self._stage: str | None = None
        self._progress = 0
        self._message = ""
        self._error: str | None = None
        self._findings: list[ThreatFinding] = []
        self._quota: DeploymentQuota | None = None
        self._perimeter: tuple[Point, ...] = ()
