"""
tickpool: a bounded-concurrency task pool for asyncio.

Components:
- core/pool.py: TaskPool (waiting queue, running set, tick loop) and PoolStats
- core/ports.py: TaskFactory protocol
- core/deferred.py: Deferred, an externally settled future
- config.py: Settings loaded from TICKPOOL_* environment variables
- logging_setup.py: process-wide logging configuration
- cli/main.py: demo runner
"""

from .core.deferred import Deferred, DeferredRejected
from .core.pool import PoolStats, TaskPool
from .core.ports import TaskFactory

__all__ = [
    "Deferred",
    "DeferredRejected",
    "PoolStats",
    "TaskFactory",
    "TaskPool",
]
