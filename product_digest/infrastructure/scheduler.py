"""Scheduler management"""

from typing import Any, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger


class SchedulerManager:
    """Owns the process-wide AsyncIOScheduler"""

    def __init__(self, timezone: str = "UTC"):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.timezone = timezone

    def create_scheduler(self) -> AsyncIOScheduler:
        if self.scheduler is not None and self.scheduler.running:
            logger.warning("[scheduler] A scheduler is already running, shutting it down...")
            try:
                self.scheduler.shutdown(wait=False)
            except Exception as e:  # noqa: BLE001
                logger.warning(f"[scheduler] Error while shutting down the old scheduler: {e}")

        self.scheduler = AsyncIOScheduler(timezone=self.timezone)
        logger.info("[scheduler] Scheduler created")
        return self.scheduler

    def add_job(self, func: Callable, trigger: Any, job_id: str, **kwargs: Any) -> None:
        if self.scheduler is None:
            raise RuntimeError("Scheduler not initialised, call create_scheduler() first")

        self.scheduler.add_job(
            func,
            trigger=trigger,
            id=job_id,
            replace_existing=True,
            **kwargs,
        )
        logger.info(f"[scheduler] Job added: {job_id}")

    def add_interval_job(
        self,
        func: Callable,
        seconds: float,
        job_id: str,
        **kwargs: Any,
    ) -> None:
        """
        Run ``func`` every ``seconds``. A tick that is still running when the
        next one is due causes the next one to be skipped.
        """
        self.add_job(
            func,
            trigger=IntervalTrigger(seconds=seconds, timezone=self.timezone),
            job_id=job_id,
            max_instances=1,
            coalesce=True,
            **kwargs,
        )
        logger.info(f"[scheduler] {job_id} checks every {seconds:g}s ({self.timezone})")

    def start(self) -> None:
        if self.scheduler is None:
            raise RuntimeError("Scheduler not initialised, call create_scheduler() first")

        self.scheduler.start()
        logger.info("[scheduler] Scheduler started")

        all_jobs = self.scheduler.get_jobs()
        logger.info(f"[scheduler] {len(all_jobs)} job(s) registered:")
        for job in all_jobs:
            next_run = getattr(job, "next_run_time", None)
            if next_run:
                logger.info(f"[scheduler]   - {job.id}: next run at {next_run}")
            else:
                logger.info(f"[scheduler]   - {job.id}: added (next run pending)")

    def shutdown(self, wait: bool = True) -> None:
        if self.scheduler is not None:
            try:
                if self.scheduler.running:
                    self.scheduler.shutdown(wait=wait)
                    logger.info("[scheduler] Scheduler stopped")
                else:
                    logger.info("[scheduler] Scheduler was not running")
            except Exception as e:  # noqa: BLE001
                logger.error(f"[scheduler] Error while stopping the scheduler: {e}")
            finally:
                self.scheduler = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running
