# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for synthetic threat findings."""

from __future__ import annotations

import pytest

from planner.analysis.threats import Severity, synthesize_findings
from planner.tactical import geo

pytestmark = pytest.mark.unit


class TestSynthesizeFindings:

    def test_fixed_batch(self, square):
        findings = synthesize_findings(square)
        assert len(findings) == 4
        assert len({f.id for f in findings}) == 4

    def test_degenerate_perimeter(self, square):
        assert synthesize_findings(square[:2]) == []

    def test_deterministic(self, square):
        assert synthesize_findings(square) == synthesize_findings(square)

    def test_anchored_to_bounding_box(self, square):
        ne, sw = geo.bounds_of(square)
        by_id = {f.id: f for f in synthesize_findings(square)}
        assert by_id["threat-elevation"].location == ne
        north = by_id["threat-vehicle"].location
        assert geo.centroid(square).lat < north.lat < ne.lat
        west = by_id["threat-crowd"].location
        assert sw.lng < west.lng < geo.centroid(square).lng
        southwest = by_id["threat-infiltration"].location
        assert geo.contains_point(southwest, square)

    def test_severity_and_actions(self, square):
        for f in synthesize_findings(square):
            assert f.severity in (Severity.HIGH, Severity.MEDIUM, Severity.LOW)
            assert len(f.recommended_actions) == 3

    def test_to_dict(self, square):
        d = synthesize_findings(square)[0].to_dict()
        assert d["severity"] == "high"
        assert isinstance(d["recommended_actions"], list)
        assert set(d["location"]) == {"lat", "lng"}
