# tests/fakes.py

from __future__ import annotations

import asyncio

from tickpool.core.deferred import Deferred


async def yield_to_loop(times: int = 10) -> None:
    """Let every ready callback/task run; nothing here ever sleeps for real."""
    for _ in range(times):
        await asyncio.sleep(0)


class GatedJob:
    """
    Task factory for scheduler tests.

    - Records "<name>:start" / "<name>:end" into a shared event log
    - Finishes only when its gate (a Deferred) is settled
    - Counts how many times the pool invoked it
    """

    def __init__(self, name: str, events: list[str] | None = None) -> None:
        self.name = name
        self.events = events if events is not None else []
        self.gate: Deferred = Deferred()
        self.calls = 0

    @property
    def started(self) -> bool:
        return f"{self.name}:start" in self.events

    @property
    def finished(self) -> bool:
        return f"{self.name}:end" in self.events

    async def _body(self) -> str:
        self.events.append(f"{self.name}:start")
        await self.gate
        self.events.append(f"{self.name}:end")
        return self.name

    def __call__(self):
        self.calls += 1
        return self._body()


def gated_jobs(count: int, events: list[str] | None = None) -> list[GatedJob]:
    events = events if events is not None else []
    return [GatedJob(f"job{i}", events) for i in range(count)]
