# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Command-driven finite state machine with an explicit transition table.

Unlike a tick-driven behaviour FSM, nothing here fires on its own: the owner
calls transition() and the machine either moves along a declared edge or
raises InvalidTransitionError.  That keeps illegal jumps such as
Idle -> Complete impossible rather than merely unlikely.

    sm = StateMachine("idle")
    sm.add_state(State("idle"))
    sm.add_state(State("busy", on_enter=lambda ctx: print("busy")))
    sm.add_transition("idle", "busy")
    sm.transition("busy")
"""

from __future__ import annotations

import time as _time
from typing import Callable

from planner.errors import InvalidTransitionError


class State:
    """A named state with optional enter/exit callbacks.

    Args:
        name: Unique state identifier.
        on_enter: Called with the transition ctx dict when entering.
        on_exit: Called with the transition ctx dict when leaving.
    """

    def __init__(
        self,
        name: str,
        on_enter: Callable[[dict], None] | None = None,
        on_exit: Callable[[dict], None] | None = None,
    ) -> None:
        self.name = name
        self._on_enter_cb = on_enter
        self._on_exit_cb = on_exit

    def on_enter(self, ctx: dict) -> None:
        if self._on_enter_cb is not None:
            self._on_enter_cb(ctx)

    def on_exit(self, ctx: dict) -> None:
        if self._on_exit_cb is not None:
            self._on_exit_cb(ctx)


class StateMachine:
    """FSM whose only moves are the edges added with add_transition()."""

    def __init__(self, initial_state: str, history_limit: int = 20) -> None:
        self._current_name = initial_state
        self._states: dict[str, State] = {}
        self._edges: set[tuple[str, str]] = set()
        self._history_limit = history_limit
        self._history: list[tuple[float, str, str]] = []

    def add_state(self, state: State) -> None:
        """Register a state object."""
        self._states[state.name] = state

    def add_transition(self, from_state: str, to_state: str) -> None:
        for name in (from_state, to_state):
            if name not in self._states:
                raise ValueError(f"State '{name}' not found")
        self._edges.add((from_state, to_state))

    @property
    def current_state(self) -> str:
        return self._current_name

    @property
    def state_names(self) -> list[str]:
        return list(self._states.keys())

    @property
    def history(self) -> list[tuple[float, str, str]]:
        """Copy of transition history: [(timestamp, from_state, to_state), ...]."""
        return list(self._history)

    def can_transition(self, to_state: str) -> bool:
        return (self._current_name, to_state) in self._edges

    def transition(self, to_state: str, ctx: dict | None = None) -> None:
        """Move to *to_state*, calling on_exit then on_enter.

        Raises:
            InvalidTransitionError: no edge from the current state.
        """
        if not self.can_transition(to_state):
            raise InvalidTransitionError(
                f"Cannot go from '{self._current_name}' to '{to_state}'"
            )
        ctx = ctx if ctx is not None else {}
        old_name = self._current_name
        self._states[old_name].on_exit(ctx)
        self._current_name = to_state
        self._record_history(old_name, to_state)
        self._states[to_state].on_enter(ctx)

    def _record_history(self, from_state: str, to_state: str) -> None:
        """Record a transition in history, respecting the limit."""
        self._history.append((_time.time(), from_state, to_state))
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit:]
