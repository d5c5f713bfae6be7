# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Timer abstraction for staged analysis and staggered deployment.

Long-running steps await ``scheduler.sleep()`` between stages or units.
Production uses AsyncioScheduler; tests swap in ManualClock and move
virtual time forward explicitly with ``advance()``.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Protocol


class Scheduler(Protocol):
    def now(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class AsyncioScheduler:
    """Real time on the running event loop."""

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))


class ManualClock:
    """Virtual clock.  Sleepers wake only when advance() passes their deadline."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._seq = itertools.count()
        self._sleepers: list[tuple[float, int, asyncio.Future]] = []
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of sleepers still waiting."""
        return sum(1 for _, _, fut in self._sleepers if not fut.done())

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        fut = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (self._now + seconds, next(self._seq), fut))
        await fut

    async def advance(self, seconds: float) -> None:
        """Move time forward, waking every sleeper whose deadline passes."""
        target = self._now + seconds
        await _settle()
        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, fut = heapq.heappop(self._sleepers)
            self._now = max(self._now, deadline)
            if not fut.done():
                fut.set_result(None)
                await _settle()
        self._now = target
        await _settle()

    async def run_until_idle(self, max_steps: int = 100_000) -> None:
        """Advance through every pending deadline until nothing is asleep."""
        await _settle()
        for _ in range(max_steps):
            while self._sleepers and self._sleepers[0][2].done():
                heapq.heappop(self._sleepers)
            if not self._sleepers:
                return
            await self.advance(self._sleepers[0][0] - self._now)
        raise RuntimeError("ManualClock did not go idle")


async def _settle(rounds: int = 10) -> None:
    """Yield to the loop so woken tasks run up to their next await."""
    for _ in range(rounds):
        await asyncio.sleep(0)
