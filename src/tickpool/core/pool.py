# src/tickpool/core/pool.py

from __future__ import annotations

"""
Task pool.

A bounded-concurrency runner for asyncio work:
- callers enqueue task factories (before or after the pool is started),
- every tick admits as many waiting factories as the concurrency limit allows (FIFO),
- then suspends until any running task settles or the tick timeout elapses,
- the run loop ends as soon as nothing is waiting and nothing is running.

The concurrency limit and tick timeout can be changed at any time; both apply
from the next tick on. Running tasks are never pre-empted or cancelled.
"""

import asyncio
import functools
import logging
import math
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Generic, Iterable, TypeVar

from .ports import TaskFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class PoolStats:
    concurrency: int
    waiting: int
    running: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class TaskPool(Generic[T]):
    """
    Run at most `concurrency` tasks at once.

    `tick_timeout` (seconds, None = unbounded) caps how long one tick waits for a
    settlement. It does not cancel anything; it only lets the loop look around
    (pick up a new concurrency limit, refresh stats) sooner.

    The scheduler does not inspect task outcomes: a failing task frees its slot
    exactly like a succeeding one. Keep your own handle if you need the result.
    """

    def __init__(self, concurrency: int = 1, tick_timeout: float | None = None) -> None:
        self._concurrency = concurrency
        self._tick_timeout = tick_timeout

        self._waiting: deque[TaskFactory[T]] = deque()
        self._running: dict[int, asyncio.Future[T]] = {}

        self._has_started = False
        self._next_key = 0
        self._current_tick: asyncio.Task[None] | None = None
        self._current_run: asyncio.Task[None] | None = None

        # Set by the mutators; only waited on while nothing is running.
        self._wakeup = asyncio.Event()
        self._stalled = False

    @classmethod
    def from_settings(cls, settings: Any) -> TaskPool[Any]:
        return cls(
            concurrency=int(getattr(settings, "concurrency", 1)),
            tick_timeout=getattr(settings, "tick_timeout", None),
        )

    # ---- Accessors ----

    @property
    def has_started(self) -> bool:
        """True once start() was called (directly or via add())."""
        return self._has_started

    @property
    def has_tick_timeout(self) -> bool:
        t = self._tick_timeout
        return t is not None and 0 < t < math.inf

    @property
    def is_running(self) -> bool:
        return self._current_run is not None

    @property
    def is_empty(self) -> bool:
        return not self._waiting and not self._running

    @property
    def is_done(self) -> bool:
        return not self.is_running and self.is_empty

    @property
    def stats(self) -> PoolStats:
        return PoolStats(
            concurrency=self._concurrency,
            waiting=len(self._waiting),
            running=len(self._running),
        )

    # ---- Mutators (effective from the next tick) ----

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @concurrency.setter
    def concurrency(self, value: int) -> None:
        self._concurrency = value
        self._wakeup.set()

    @property
    def tick_timeout(self) -> float | None:
        return self._tick_timeout

    @tick_timeout.setter
    def tick_timeout(self, value: float | None) -> None:
        self._tick_timeout = value
        self._wakeup.set()

    # ---- Public API ----

    def add(self, factories: TaskFactory[T] | Iterable[TaskFactory[T]]) -> None:
        """
        Enqueue one factory or an ordered batch of them.

        Once the pool has been started, new work is picked up automatically;
        there is no need to call start() again.
        """
        if callable(factories):
            self._waiting.append(factories)
        else:
            self._waiting.extend(factories)

        if self._has_started:
            self.start()

    def start(self) -> asyncio.Task[None]:
        """
        Start the run loop, or return the one already in flight.

        The returned task completes when nothing is waiting and nothing is running.
        Must be called from inside a running event loop. Cancelling the returned
        task stops the loop; use join() to wait without that risk.
        """
        if self._current_run is not None:
            return self._current_run

        self._has_started = True
        run = asyncio.ensure_future(self._run())
        self._current_run = run
        # Covers a loop cancelled before its first step (its finally never runs).
        run.add_done_callback(self._release_run)
        return run

    async def join(self) -> None:
        """Wait for the active run loop (if any) to finish."""
        run = self._current_run
        if run is not None:
            await asyncio.shield(run)

    async def wait_for_tick(self) -> None:
        """
        Wait for the tick currently in flight; return at once if there is none.

        The run loop is resumed before callers of this method, so by the time it
        returns the next tick has already admitted whatever it could.
        """
        tick = self._current_tick
        if tick is None or tick.done():
            return
        await asyncio.shield(tick)

    # ---- Loop internals ----

    def _release_run(self, run: asyncio.Task[None]) -> None:
        if self._current_run is run:
            self._current_run = None

    async def _run(self) -> None:
        logger.debug("Run loop started: %s", self.stats)
        try:
            while self._waiting or self._running:
                self._current_tick = self._tick()
                await self._current_tick
        except Exception:
            logger.exception("Run loop failed: %s", self.stats)
            raise
        finally:
            self._current_tick = None
            if self._current_run is asyncio.current_task():
                self._current_run = None
        logger.debug("Run loop finished.")

    def _tick(self) -> asyncio.Task[None]:
        """Admit what fits, then return the suspension half of the tick as a task."""
        self._wakeup.clear()
        self._admit()
        timeout = self._tick_timeout if self.has_tick_timeout else None
        return asyncio.ensure_future(self._suspend(set(self._running.values()), timeout))

    def _admit(self) -> None:
        # Pops max(concurrency - running, 0) factories. A factory that raises (or returns
        # something that is not awaitable) fails the run loop; it is not retried.
        while self._waiting and len(self._running) < self._concurrency:
            factory = self._waiting.popleft()
            self._next_key += 1
            key = self._next_key

            fut = asyncio.ensure_future(factory())
            self._running[key] = fut
            fut.add_done_callback(functools.partial(self._on_settled, key))
            logger.debug(
                "Task #%s admitted (running=%d waiting=%d)",
                key,
                len(self._running),
                len(self._waiting),
            )

        self._check_stall()

    def _check_stall(self) -> None:
        if self._running or not self._waiting:
            self._stalled = False
            return
        if not self._stalled:
            self._stalled = True
            logger.warning(
                "Pool stalled: %d task(s) waiting, none running, concurrency=%s admits nothing.",
                len(self._waiting),
                self._concurrency,
            )

    def _on_settled(self, key: int, fut: asyncio.Future[T]) -> None:
        self._running.pop(key, None)

        if fut.cancelled():
            logger.debug("Task #%s cancelled", key)
            return

        # Retrieve the exception so asyncio does not report it as unhandled;
        # the caller owns error handling.
        exc = fut.exception()
        if exc is not None:
            logger.debug("Task #%s failed", key, exc_info=exc)
        else:
            logger.debug("Task #%s settled", key)

    async def _suspend(self, pending: set[asyncio.Future[T]], timeout: float | None) -> None:
        if not pending:
            if not self._stalled:
                return
            # Nothing can settle. Only a mutator call (or the timeout) moves us on.
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout)
            except TimeoutError:
                logger.debug("Tick timed out after %.3fs with nothing running", timeout)
            return

        done, _ = await asyncio.wait(pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        if not done:
            logger.debug("Tick timed out after %.3fs (running=%d)", timeout, len(self._running))

    def __len__(self) -> int:
        return len(self._waiting) + len(self._running)

    def __repr__(self) -> str:
        s = self.stats
        return (
            f"{type(self).__name__}(concurrency={s.concurrency}, waiting={s.waiting}, "
            f"running={s.running}, started={self._has_started}, active={self.is_running})"
        )
