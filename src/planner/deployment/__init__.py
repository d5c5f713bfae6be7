# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Resource placement: strategies, conflict avoidance, orchestration."""

from planner.deployment.models import (
    DeploymentQuota,
    KindProfile,
    PlacedUnit,
    PlacementStrategy,
    ResourceKind,
    DEPLOYMENT_ORDER,
)
from planner.deployment.session import DeploymentSession

__all__ = [
    "DeploymentQuota",
    "KindProfile",
    "PlacedUnit",
    "PlacementStrategy",
    "ResourceKind",
    "DEPLOYMENT_ORDER",
    "DeploymentSession",
]
