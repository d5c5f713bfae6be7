# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Planner notifications."""

from planner.comms.event_bus import Event, EventBus, EventType

__all__ = ["Event", "EventBus", "EventType"]
