# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Staged perimeter analysis that gates deployment."""

from planner.analysis.pipeline import (
    STAGES,
    AnalysisPipeline,
    AnalysisStage,
    AnalysisState,
    AnalysisStatus,
)
from planner.analysis.threats import Severity, ThreatFinding, synthesize_findings

__all__ = [
    "STAGES",
    "AnalysisPipeline",
    "AnalysisStage",
    "AnalysisState",
    "AnalysisStatus",
    "Severity",
    "ThreatFinding",
    "synthesize_findings",
]
