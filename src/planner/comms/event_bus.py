# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""EventBus — typed pub/sub for planner state changes.

Two ways to listen:
  - subscribe() returns a bounded queue.Queue fed with Event objects;
    a full queue drops the event for that subscriber only
  - add_listener(fn) calls fn(event) synchronously on publish, which is
    how the map surface sees units appear one at a time

Messages are tagged with EventType rather than free-form strings.
"""

from __future__ import annotations

import enum
import queue
import threading
from dataclasses import dataclass, field
from typing import Callable

from loguru import logger


class EventType(enum.Enum):
    PERIMETER_CHANGED = "perimeter_changed"
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_STAGE_CHANGED = "analysis_stage_changed"
    ANALYSIS_COMPLETED = "analysis_completed"
    ANALYSIS_FAILED = "analysis_failed"
    ANALYSIS_CANCELLED = "analysis_cancelled"
    QUOTA_COMPUTED = "quota_computed"
    UNIT_PLACED = "unit_placed"
    UNIT_REMOVED = "unit_removed"
    PLACEMENT_EXHAUSTED = "placement_exhausted"
    SESSION_CLEARED = "session_cleared"
    DEPLOYMENT_COMPLETED = "deployment_completed"


@dataclass(frozen=True)
class Event:
    type: EventType
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"type": self.type.value, "data": self.data}


Listener = Callable[[Event], None]


class EventBus:
    """Thread-safe pub/sub for planner events."""

    def __init__(self, queue_size: int = 100) -> None:
        self._lock = threading.Lock()
        self._queue_size = queue_size
        self._subscribers: list[queue.Queue] = []
        self._listeners: list[Listener] = []

    def subscribe(self) -> queue.Queue:
        q: queue.Queue = queue.Queue(maxsize=self._queue_size)
        with self._lock:
            self._subscribers.append(q)
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            try:
                self._subscribers.remove(q)
            except ValueError:
                pass

    def add_listener(self, fn: Listener) -> None:
        with self._lock:
            self._listeners.append(fn)

    def remove_listener(self, fn: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(fn)
            except ValueError:
                pass

    def publish(self, event_type: EventType, data: dict | None = None) -> Event:
        event = Event(event_type, data or {})
        with self._lock:
            subscribers = list(self._subscribers)
            listeners = list(self._listeners)
        for q in subscribers:
            try:
                q.put_nowait(event)
            except queue.Full:
                logger.debug(f"Subscriber queue full, dropped {event_type.value}")
        for fn in listeners:
            try:
                fn(event)
            except Exception:
                logger.exception(f"Listener error on {event_type.value}")
        return event
