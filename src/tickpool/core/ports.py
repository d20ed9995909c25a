# src/tickpool/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The pool only depends on the shape of a task factory, never on a concrete class.
Any zero-argument callable returning an awaitable qualifies:
- an `async def` function,
- a lambda returning a Future/Deferred,
- a functools.partial over a coroutine function.
"""

from typing import Awaitable, Protocol, TypeVar

T_co = TypeVar("T_co", covariant=True)


class TaskFactory(Protocol[T_co]):
    """Starts one unit of work when called and returns something that settles exactly once."""
    def __call__(self) -> Awaitable[T_co]: ...
