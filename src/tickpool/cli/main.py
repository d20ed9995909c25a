# src/tickpool/cli/main.py

"""
CLI entrypoint.

Runs a batch of simulated jobs through a TaskPool so its behavior can be watched:
- settings come from the environment (TICKPOOL_*), command-line flags override them,
- each job sleeps for a random delay and fails with the configured probability,
- pool stats are logged every --stats-interval seconds until the pool is done.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import random
import sys
import time
from dataclasses import dataclass, replace

from ..config import Settings, get_settings
from ..core.pool import TaskPool
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


class DemoJobError(RuntimeError):
    pass


@dataclass(slots=True)
class DemoSummary:
    jobs: int = 0
    succeeded: int = 0
    failed: int = 0
    peak_running: int = 0
    elapsed: float = 0.0

    def render(self) -> str:
        return (
            f"{self.jobs} job(s): {self.succeeded} succeeded, {self.failed} failed, "
            f"peak running {self.peak_running}, {self.elapsed:.2f}s"
        )


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tickpool-demo",
        description="Run simulated jobs through a bounded-concurrency task pool.",
    )
    p.add_argument("--jobs", type=int, default=settings.demo_jobs, help="number of jobs to enqueue")
    p.add_argument("--concurrency", type=int, default=settings.concurrency, help="max jobs running at once")
    p.add_argument(
        "--tick-timeout",
        type=float,
        default=settings.tick_timeout,
        help="max seconds a tick waits for a job to finish (0 = unbounded)",
    )
    p.add_argument("--min-delay", type=float, default=settings.demo_min_delay)
    p.add_argument("--max-delay", type=float, default=settings.demo_max_delay)
    p.add_argument("--fail-rate", type=float, default=settings.demo_fail_rate, help="probability a job fails")
    p.add_argument("--stats-interval", type=float, default=settings.stats_interval)
    p.add_argument("--log-level", default=settings.log_level)
    p.add_argument("--log-dir", default=settings.log_dir)
    p.add_argument("--seed", type=int, default=None, help="seed for reproducible delays/failures")
    return p


def settings_from_args(settings: Settings, args: argparse.Namespace) -> Settings:
    tick_timeout = args.tick_timeout
    if tick_timeout is not None and tick_timeout <= 0:
        tick_timeout = None

    return replace(
        settings,
        demo_jobs=max(0, args.jobs),
        concurrency=args.concurrency,
        tick_timeout=tick_timeout,
        demo_min_delay=max(0.0, args.min_delay),
        demo_max_delay=max(args.min_delay, args.max_delay),
        demo_fail_rate=min(1.0, max(0.0, args.fail_rate)),
        stats_interval=max(0.01, args.stats_interval),
        log_level=str(args.log_level),
        log_dir=args.log_dir,
    )


async def _report_stats(pool: TaskPool, interval: float) -> None:
    while True:
        logger.info("stats %s", pool.stats.as_dict())
        await asyncio.sleep(interval)


async def run_demo(settings: Settings, *, rng: random.Random | None = None) -> DemoSummary:
    rng = rng or random.Random()
    pool: TaskPool[None] = TaskPool.from_settings(settings)
    summary = DemoSummary(jobs=settings.demo_jobs)

    def make_job(idx: int):
        delay = rng.uniform(settings.demo_min_delay, settings.demo_max_delay)
        fail = rng.random() < settings.demo_fail_rate

        async def job() -> None:
            summary.peak_running = max(summary.peak_running, pool.stats.running)
            logger.debug("job %d started (delay=%.3fs fail=%s)", idx, delay, fail)
            await asyncio.sleep(delay)
            if fail:
                summary.failed += 1
                raise DemoJobError(f"job {idx} failed")
            summary.succeeded += 1

        return job

    pool.add([make_job(i) for i in range(settings.demo_jobs)])

    started = time.monotonic()
    reporter = asyncio.create_task(_report_stats(pool, settings.stats_interval))
    try:
        await pool.start()
    finally:
        reporter.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await reporter

    summary.elapsed = time.monotonic() - started
    logger.info("Done: %s", summary.render())
    return summary


def main(argv: list[str] | None = None) -> int:
    parser = build_parser(get_settings())
    args = parser.parse_args(argv)
    if args.concurrency < 1:
        # TaskPool accepts it, but would never admit a job.
        parser.error("--concurrency must be at least 1")
    settings = settings_from_args(get_settings(), args)

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info(
        "Starting %s (jobs=%d concurrency=%d tick_timeout=%s)...",
        settings.app_name,
        settings.demo_jobs,
        settings.concurrency,
        settings.tick_timeout,
    )

    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        summary = asyncio.run(run_demo(settings, rng=rng))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        return 130

    print(summary.render())
    return 0


if __name__ == "__main__":
    sys.exit(main())
