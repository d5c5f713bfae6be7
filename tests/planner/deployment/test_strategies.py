# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for placement strategies — geometry contracts and determinism."""

from __future__ import annotations

import pytest

from planner.deployment.models import PlacementStrategy
from planner.deployment.strategies import resolve_candidate
from planner.tactical import geo

pytestmark = pytest.mark.unit


class TestDeterminism:

    @pytest.mark.parametrize("strategy", list(PlacementStrategy))
    @pytest.mark.parametrize("index", [0, 3, 7, 12])
    def test_same_inputs_same_point(self, square, settings, strategy, index):
        a = resolve_candidate(strategy, square, index, 13, settings)
        b = resolve_candidate(strategy, square, index, 13, settings)
        assert a == b

    def test_accepts_strategy_name(self, square, settings):
        assert resolve_candidate("corners", square, 1, 4, settings) == square[1]

    def test_unknown_strategy(self, square, settings):
        with pytest.raises(ValueError):
            resolve_candidate("random", square, 0, 1, settings)

    def test_empty_perimeter(self, settings):
        with pytest.raises(ValueError):
            resolve_candidate(PlacementStrategy.CENTER, [], 0, 1, settings)

    def test_negative_index(self, square, settings):
        with pytest.raises(ValueError):
            resolve_candidate(PlacementStrategy.CORNERS, square, -1, 1, settings)


class TestCorners:

    @pytest.mark.parametrize("i", range(4))
    def test_first_pass_sits_on_vertices(self, square, settings, i):
        assert resolve_candidate(PlacementStrategy.CORNERS, square, i, 8, settings) == square[i]

    def test_second_pass_fans_outward(self, square, settings):
        p = resolve_candidate(PlacementStrategy.CORNERS, square, 4, 8, settings)
        assert geo.distance_meters(p, square[0]) == pytest.approx(settings.corner_ring_step_m, abs=0.01)

    def test_third_pass_fans_further(self, square, settings):
        p = resolve_candidate(PlacementStrategy.CORNERS, square, 9, 12, settings)
        assert geo.distance_meters(p, square[1]) == pytest.approx(
            2 * settings.corner_ring_step_m, abs=0.01)


class TestMidpoints:

    def test_first_pass_is_edge_midpoint(self, square, settings):
        p = resolve_candidate(PlacementStrategy.MIDPOINTS, square, 0, 4, settings)
        assert p == geo.interpolate(square[0], square[1], 0.5)

    def test_repeat_passes_alternate_sides(self, square, settings):
        mid = geo.interpolate(square[0], square[1], 0.5)
        right = resolve_candidate(PlacementStrategy.MIDPOINTS, square, 4, 12, settings)
        left = resolve_candidate(PlacementStrategy.MIDPOINTS, square, 8, 12, settings)
        step = settings.midpoint_offset_step_m
        assert geo.distance_meters(mid, right) == pytest.approx(step, abs=0.01)
        assert geo.distance_meters(mid, left) == pytest.approx(step, abs=0.01)
        assert geo.distance_meters(left, right) == pytest.approx(2 * step, abs=0.05)


class TestCenter:

    def test_first_unit_at_centroid(self, square, settings):
        p = resolve_candidate(PlacementStrategy.CENTER, square, 0, 3, settings)
        assert p == geo.centroid(square)

    @pytest.mark.parametrize("i", [1, 2, 5])
    def test_spirals_outward(self, square, settings, i):
        p = resolve_candidate(PlacementStrategy.CENTER, square, i, 6, settings)
        expected = i * settings.center_radius_step_m
        assert geo.distance_meters(geo.centroid(square), p) == pytest.approx(expected, abs=0.01)

    def test_successive_units_do_not_collide(self, square, settings):
        pts = [resolve_candidate(PlacementStrategy.CENTER, square, i, 6, settings) for i in range(6)]
        assert len(set(pts)) == 6


class TestPerimeterDistributed:

    def test_first_unit_on_first_vertex(self, square, settings):
        assert resolve_candidate(PlacementStrategy.PERIMETER, square, 0, 4, settings) == square[0]

    @pytest.mark.parametrize("i", [1, 2, 3])
    def test_quarters_land_near_vertices(self, square, settings, i):
        p = resolve_candidate(PlacementStrategy.PERIMETER, square, i, 4, settings)
        assert geo.distance_meters(p, square[i]) < 1.0

    def test_eighths_land_near_edge_midpoints(self, square, settings):
        p = resolve_candidate(PlacementStrategy.PERIMETER, square, 1, 8, settings)
        mid = geo.interpolate(square[0], square[1], 0.5)
        assert geo.distance_meters(p, mid) < 1.0

    def test_even_spacing(self, square, settings):
        pts = [resolve_candidate(PlacementStrategy.PERIMETER, square, i, 8, settings) for i in range(8)]
        gaps = [geo.distance_meters(pts[i], pts[i + 1]) for i in range(7)]
        for gap in gaps:
            assert gap == pytest.approx(50.0, abs=1.0)


class TestPatrol:

    def test_first_unit_at_northeast(self, square, settings):
        ne, _ = geo.bounds_of(square)
        assert resolve_candidate(PlacementStrategy.PATROL, square, 0, 2, settings) == ne

    def test_alternates_to_southwest_outside_box(self, square, settings):
        _, sw = geo.bounds_of(square)
        p = resolve_candidate(PlacementStrategy.PATROL, square, 1, 2, settings)
        assert p.lat < sw.lat
        assert p.lng < sw.lng
        assert geo.distance_meters(p, sw) == pytest.approx(settings.patrol_offset_step_m, abs=0.01)

    def test_later_units_pushed_further(self, square, settings):
        ne, _ = geo.bounds_of(square)
        p2 = resolve_candidate(PlacementStrategy.PATROL, square, 2, 4, settings)
        assert geo.distance_meters(p2, ne) == pytest.approx(2 * settings.patrol_offset_step_m, abs=0.01)


class TestEntrances:

    @pytest.mark.parametrize("i", range(4))
    def test_stride_maps_to_vertices(self, square, settings, i):
        p = resolve_candidate(PlacementStrategy.ENTRANCES, square, i, 4, settings)
        assert geo.distance_meters(p, square[i]) == pytest.approx(settings.entrance_offset_m, abs=0.01)

    def test_stride_skips_vertices_when_fewer_units(self, square, settings):
        p = resolve_candidate(PlacementStrategy.ENTRANCES, square, 1, 2, settings)
        assert geo.distance_meters(p, square[2]) == pytest.approx(settings.entrance_offset_m, abs=0.01)

    def test_parity_flips_side(self, square, settings):
        even = resolve_candidate(PlacementStrategy.ENTRANCES, square, 0, 8, settings)
        odd = resolve_candidate(PlacementStrategy.ENTRANCES, square, 1, 8, settings)
        # Both at vertex 0 (stride 0.5), on opposite sides of edge 0
        assert geo.distance_meters(even, odd) == pytest.approx(
            2 * settings.entrance_offset_m, abs=0.05)
