"""Cron-driven trigger for the scheduled task."""

from __future__ import annotations

import logging
import sys
from typing import Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False

JOB_ID = "channel-ping"


class TaskScheduler:
    """Fires `job` on a crontab schedule inside the running event loop.

    At most one instance of the job runs at a time; ticks that land while
    it is still running are dropped by APScheduler and coalesced.
    """

    def __init__(self, cron_schedule: str, job: Callable[[], Awaitable[object]]):
        self._trigger = CronTrigger.from_crontab(cron_schedule)
        self._cron_schedule = cron_schedule
        self._job = job
        self._scheduler = AsyncIOScheduler()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self, run_immediately: bool = False) -> None:
        """Start scheduling. Must be called from inside the event loop."""
        self._scheduler.add_job(
            self._job,
            self._trigger,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        if run_immediately:
            # No trigger: runs once, right away.
            self._scheduler.add_job(self._job, id=f"{JOB_ID}-initial")

        self._scheduler.start()
        logger.info(f"Scheduling task with cron pattern: {self._cron_schedule}")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped.")

    def get_jobs(self):
        return self._scheduler.get_jobs()
