# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Planner settings.

All sizing thresholds are demo-calibrated heuristics, not security doctrine,
so every one of them is configurable.  Values load from the environment
(prefix ``PLANNER_``) or an optional ``.env`` file.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PLANNER_",
        env_file=".env",
        extra="ignore",
    )

    # Capacity
    area_per_person: float = Field(default=2.0, gt=0)

    # Quota thresholds
    guard_area_quantum: float = Field(default=5000.0, gt=0)
    guard_min: int = Field(default=8, ge=0)
    camera_per_vertex: float = Field(default=1.5, ge=0)
    camera_min: int = Field(default=6, ge=0)
    barrier_per_vertex: int = Field(default=3, ge=0)
    barrier_min: int = Field(default=12, ge=0)
    sensor_per_vertex: int = Field(default=2, ge=0)
    sensor_min: int = Field(default=6, ge=0)
    k9_area_step: float = Field(default=10000.0, gt=0)
    k9_min: int = Field(default=2, ge=1)
    drone_area_threshold: float = Field(default=20000.0, gt=0)
    drone_min: int = Field(default=1, ge=1)
    drone_max: int = Field(default=2, ge=1)
    medical_area_step: float = Field(default=15000.0, gt=0)
    medical_min: int = Field(default=2, ge=1)
    guards_per_radio: int = Field(default=4, ge=1)
    radio_min: int = Field(default=2, ge=1)

    # Placement
    placement_retry_cap: int = Field(default=10, ge=0)
    perturbation_step_m: float = Field(default=10.0, gt=0)
    corner_ring_step_m: float = Field(default=45.0, ge=0)
    midpoint_offset_step_m: float = Field(default=30.0, ge=0)
    center_radius_step_m: float = Field(default=20.0, ge=0)
    patrol_offset_step_m: float = Field(default=30.0, ge=0)
    entrance_offset_m: float = Field(default=15.0, ge=0)
    min_separation_overrides: dict[str, float] = Field(default_factory=dict)

    # Timing (seconds)
    kind_interval_s: float = Field(default=1.0, ge=0)
    unit_interval_s: float = Field(default=0.2, ge=0)
    analysis_delay_scale: float = Field(default=1.0, ge=0)

    # Per-subscriber event queue; a full queue drops events for that subscriber
    event_queue_size: int = Field(default=1000, ge=1)

    @field_validator("min_separation_overrides")
    @classmethod
    def _non_negative_separations(cls, v: dict[str, float]) -> dict[str, float]:
        for kind, meters in v.items():
            if meters < 0:
                raise ValueError(f"min separation for {kind!r} must be >= 0")
        return {k.lower(): float(m) for k, m in v.items()}


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
