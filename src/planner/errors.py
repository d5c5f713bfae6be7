# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Planner error taxonomy.

Only state-machine misuse reaches callers.  Geometry and capacity helpers
degrade to zero instead of raising, and placement exhaustion is reported as
a flagged result rather than an exception.
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for all planner errors."""


class InvalidPerimeterError(PlannerError):
    """Perimeter has fewer than 3 vertices or crosses itself."""

    def __init__(self, message: str = "cannot analyze — perimeter incomplete") -> None:
        super().__init__(message)


class DeploymentNotReadyError(PlannerError):
    """Auto-deployment requested before analysis reached Complete."""

    def __init__(self, message: str = "cannot deploy — analysis not complete") -> None:
        super().__init__(message)


class InvalidTransitionError(PlannerError):
    """A state change that the analysis state graph does not allow."""


class StaleOperationError(PlannerError):
    """A superseded run noticed it was cancelled.  Never leaves the run loop."""
