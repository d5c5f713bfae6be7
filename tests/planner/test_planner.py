# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""End-to-end tests for SecurityPlanner: draw, analyse, deploy, export."""

from __future__ import annotations

import asyncio
import itertools
import json
from unittest.mock import MagicMock

import pytest

from planner import SecurityPlanner
from planner.analysis.pipeline import AnalysisStatus
from planner.comms.event_bus import EventBus, EventType
from planner.config import Settings
from planner.deployment.models import ResourceKind
from planner.errors import DeploymentNotReadyError, InvalidPerimeterError
from planner.tactical import geo

pytestmark = pytest.mark.integration


def _run(coro):
    """Run an async coroutine synchronously."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _planner(settings, clock, **kwargs) -> SecurityPlanner:
    return SecurityPlanner(
        settings=settings, scheduler=clock, event_bus=EventBus(queue_size=1000), **kwargs
    )


async def _analyse_and_deploy(planner, clock, perimeter):
    planner.start_analysis(perimeter)
    await clock.run_until_idle()
    planner.start_auto_deployment()
    await clock.run_until_idle()


class TestEndToEnd:

    def test_square_full_plan(self, settings, clock, square):
        async def scenario():
            planner = _planner(settings, clock)
            await _analyse_and_deploy(planner, clock, square)
            return planner

        planner = _run(scenario())
        quota = planner.analysis.quota
        assert planner.analysis_state.status == AnalysisStatus.COMPLETE
        assert quota.capacity == pytest.approx(5000, abs=5)
        assert quota.count(ResourceKind.GUARD) >= settings.guard_min
        assert len(planner.units) == quota.total
        assert len(planner.findings) == 4
        assert planner.plan_status == "deployed"

    def test_same_kind_spacing_on_large_site(self, settings, clock, make_square):
        async def scenario():
            planner = _planner(settings, clock)
            await _analyse_and_deploy(planner, clock, make_square(400.0))
            return planner.units

        units = _run(scenario())
        for kind in ResourceKind:
            same = [u for u in units if u.kind == kind and u.separation_satisfied]
            for a, b in itertools.combinations(same, 2):
                d = geo.distance_meters(a.position, b.position)
                assert d >= kind.min_separation_m - 0.01, (a.id, b.id, d)

    def test_two_points_fail_analysis(self, settings, clock, square):
        async def scenario():
            planner = _planner(settings, clock)
            with pytest.raises(InvalidPerimeterError):
                planner.start_analysis(square[:2])
            return planner

        planner = _run(scenario())
        assert planner.analysis_state.status == AnalysisStatus.ERROR
        assert planner.findings == []

    def test_deploy_before_complete_is_refused(self, settings, clock, square):
        async def scenario():
            planner = _planner(settings, clock)
            planner.set_perimeter(square)
            with pytest.raises(DeploymentNotReadyError):
                planner.start_auto_deployment()
            planner.start_analysis()
            await clock.advance(2.0)
            with pytest.raises(DeploymentNotReadyError):
                planner.start_auto_deployment()
            return planner

        planner = _run(scenario())
        assert planner.units == []

    def test_clear_and_rerun_is_reproducible(self, settings, clock, square):
        async def scenario():
            planner = _planner(settings, clock)
            await _analyse_and_deploy(planner, clock, square)
            first = [(u.id, u.position) for u in planner.units]
            assert planner.clear_deployment() == len(first)
            assert planner.units == []
            planner.start_auto_deployment()
            await clock.run_until_idle()
            second = [(u.id, u.position) for u in planner.units]
            return first, second

        first, second = _run(scenario())
        assert first == second


class TestRedefinition:

    def test_clear_perimeter_mid_analysis(self, settings, clock, square):
        async def scenario():
            planner = _planner(settings, clock)
            planner.start_analysis(square)
            await clock.advance(3.0)
            planner.clear_perimeter()
            await clock.run_until_idle()
            return planner

        planner = _run(scenario())
        assert planner.analysis_state.status == AnalysisStatus.IDLE
        assert planner.findings == []
        assert planner.perimeter == ()
        assert planner.plan_status == "draft"

    def test_vertex_edit_discards_deployment(self, settings, clock, square, origin):
        async def scenario():
            planner = _planner(settings, clock)
            await _analyse_and_deploy(planner, clock, square)
            planner.move_vertex(0, geo.offset_point(origin, 10.0, 225.0))
            return planner

        planner = _run(scenario())
        assert planner.units == []
        assert planner.analysis_state.status == AnalysisStatus.IDLE
        assert planner.analysis.quota is None

    def test_live_estimate_tracks_drawing(self, settings, clock, square):
        async def scenario():
            planner = _planner(settings, clock)
            q = planner.event_bus.subscribe()
            for p in square[:2]:
                planner.add_vertex(p)
            assert planner.estimate.total == 0
            for p in square[2:]:
                planner.add_vertex(p)
            events = []
            while not q.empty():
                events.append(q.get_nowait())
            planner.remove_vertex(3)
            return planner, events

        planner, events = _run(scenario())
        changed = [e for e in events if e.type == EventType.PERIMETER_CHANGED]
        assert [e.data["vertex_count"] for e in changed] == [1, 2, 3, 4]
        assert changed[-1].data["capacity"] == pytest.approx(5000, abs=5)
        assert len(planner.perimeter) == 3
        assert planner.estimate.area_m2 == pytest.approx(5000, rel=0.01)


class TestManualAndMapSurface:

    def test_map_surface_sees_each_unit(self, settings, clock, square):
        surface = MagicMock()

        async def scenario():
            planner = _planner(settings, clock, map_surface=surface)
            await _analyse_and_deploy(planner, clock, square)
            return planner

        planner = _run(scenario())
        assert surface.on_unit_placed.call_count == len(planner.units)
        placed = [c.args[0] for c in surface.on_unit_placed.call_args_list]
        assert placed == planner.units

    def test_manual_place_and_remove(self, settings, clock, square):
        surface = MagicMock()

        async def scenario():
            planner = _planner(settings, clock, map_surface=surface)
            planner.set_perimeter(square)
            unit = planner.place_unit("camera", square[0])
            assert planner.remove_unit(unit.id)
            assert not planner.remove_unit(unit.id)
            return unit

        unit = _run(scenario())
        assert unit.position == square[0]
        assert unit.strategy_used == "manual"
        surface.on_unit_removed.assert_called_once_with(unit.id)


class TestSnapshot:

    def test_draft_snapshot(self, settings, clock, square):
        async def scenario():
            planner = _planner(settings, clock)
            planner.set_perimeter(square)
            return planner.snapshot()

        snap = _run(scenario())
        assert snap.status == "draft"
        assert len(snap.perimeter) == 4
        assert snap.units == []
        assert snap.quota["guard"] == settings.guard_min
        assert all(row.status == "ready" for row in snap.ledger)

    def test_deployed_snapshot_serializes(self, settings, clock, square):
        async def scenario():
            planner = _planner(settings, clock)
            await _analyse_and_deploy(planner, clock, square)
            return planner.snapshot()

        snap = _run(scenario())
        assert snap.status == "deployed"
        assert len(snap.findings) == 4
        assert all(row.status == "deployed" for row in snap.ledger if row.required)
        data = json.loads(snap.model_dump_json())
        assert data["units"][0]["kind"] == "drone"
        assert data["generated_at"]


class TestEventDelivery:

    def test_slow_subscriber_gets_whole_large_plan(self, settings, clock, make_square):
        async def scenario():
            planner = SecurityPlanner(settings=settings, scheduler=clock)
            q = planner.event_bus.subscribe()
            await _analyse_and_deploy(planner, clock, make_square(400.0))
            events = []
            while not q.empty():
                events.append(q.get_nowait())
            return planner, events

        planner, events = _run(scenario())
        placed = [e for e in events if e.type == EventType.UNIT_PLACED]
        assert len(events) > 100
        assert len(placed) == planner.analysis.quota.total
        assert events[-1].type == EventType.DEPLOYMENT_COMPLETED

    def test_queue_size_follows_settings(self, clock):
        small = Settings(_env_file=None, event_queue_size=2)
        planner = SecurityPlanner(settings=small, scheduler=clock)
        q = planner.event_bus.subscribe()
        for _ in range(5):
            planner.event_bus.publish(EventType.PERIMETER_CHANGED)
        assert q.qsize() == 2
