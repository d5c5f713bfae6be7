# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Spatial deployment planning engine for event-security perimeters."""

from planner.config import Settings, get_settings
from planner.errors import (
    DeploymentNotReadyError,
    InvalidPerimeterError,
    InvalidTransitionError,
    PlannerError,
)
from planner.planner import SecurityPlanner

__all__ = [
    "Settings",
    "get_settings",
    "PlannerError",
    "InvalidPerimeterError",
    "DeploymentNotReadyError",
    "InvalidTransitionError",
    "SecurityPlanner",
]
