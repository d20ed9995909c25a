# src/tickpool/core/deferred.py

from __future__ import annotations

"""
Deferred: an asyncio Future that is settled from the outside.

Handy whenever the moment a piece of work "finishes" must be controlled explicitly,
e.g. in tests that step a TaskPool tick by tick:

    d = Deferred()
    pool.add(lambda: d)
    ...
    d.resolve("value")
"""

import asyncio
from typing import Any, Callable, Optional

Resolve = Callable[[Any], bool]
Reject = Callable[[Optional[BaseException]], bool]


class DeferredRejected(Exception):
    """Raised by a Deferred that was rejected without an explicit exception."""


class Deferred(asyncio.Future):
    def __init__(
            self,
            runner: Callable[[Resolve, Reject], None] | None = None,
            *,
            loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(loop=loop or asyncio.get_running_loop())
        if runner is not None:
            runner(self.resolve, self.reject)

    def resolve(self, value: Any = None) -> bool:
        """Settle successfully. Returns False if already settled (first call wins)."""
        if self.done():
            return False
        self.set_result(value)
        return True

    def reject(self, exc: BaseException | None = None) -> bool:
        """Settle with an error. Returns False if already settled (first call wins)."""
        if self.done():
            return False
        self.set_exception(exc if exc is not None else DeferredRejected())
        return True
