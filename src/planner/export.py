# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Plan snapshot models handed to report and export generators.

Plain pydantic models with no live references back into the planner, so
``model_dump()`` / ``model_dump_json()`` give stable structures for JSON,
CSV or PDF rendering.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

PlanStatus = Literal["draft", "analyzing", "complete", "deployed"]


class PointModel(BaseModel):
    lat: float
    lng: float


class PlacedUnitModel(BaseModel):
    id: str
    kind: str
    position: PointModel
    strategy_used: str
    sequence_index: int
    attempts: int = 0
    separation_satisfied: bool = True


class ThreatFindingModel(BaseModel):
    id: str
    severity: Literal["high", "medium", "low"]
    category: str
    title: str
    location: PointModel
    description: str
    recommended_actions: list[str] = Field(default_factory=list)


class LedgerRow(BaseModel):
    """Required vs deployed count for one resource kind."""
    kind: str
    required: int
    deployed: int
    status: Literal["ready", "standby", "deployed"]
    coverage_percentage: int


class PlanSnapshot(BaseModel):
    """Everything an export needs about the current plan."""
    status: PlanStatus
    perimeter: list[PointModel] = Field(default_factory=list)
    area_m2: float = 0.0
    capacity: int = 0
    quota: dict[str, int] = Field(default_factory=dict)
    ledger: list[LedgerRow] = Field(default_factory=list)
    units: list[PlacedUnitModel] = Field(default_factory=list)
    findings: list[ThreatFindingModel] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
