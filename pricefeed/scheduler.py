"""Scheduled cleanup of expired receipts."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """Runs the receipt expiry job on a cron schedule.

    Uses APScheduler for cron-based scheduling.
    """

    def __init__(self, config) -> None:
        """Initialize scheduler with a PriceFeedConfig.

        Args:
            config: PriceFeedConfig instance.

        Raises:
            ImportError: If apscheduler is not installed.
        """
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler
            from apscheduler.triggers.cron import CronTrigger
        except ImportError:
            raise ImportError(
                "apscheduler is required: pip install 'pricefeed[scheduler]'"
            )

        self._config = config
        self._scheduler = AsyncIOScheduler()
        self._CronTrigger = CronTrigger
        self._running = False

    def setup_jobs(self) -> None:
        """Register scheduled jobs based on config."""
        schedule = self._config.receipts.cleanup_schedule
        trigger = self._parse_cron(schedule)
        self._scheduler.add_job(
            self._job_cleanup_receipts,
            trigger=trigger,
            id="cleanup_receipts",
            name="Expired receipt cleanup",
            replace_existing=True,
        )
        logger.info("Registered receipt cleanup job: %s", schedule)

    def start(self) -> None:
        """Start the scheduler."""
        self.setup_jobs()
        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._running

    def get_jobs(self) -> list[dict]:
        """Return info about scheduled jobs."""
        jobs = []
        for job in self._scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": str(next_run) if next_run else None,
            })
        return jobs

    def _parse_cron(self, expr: str):
        """Parse a cron expression into a CronTrigger."""
        parts = expr.split()
        if len(parts) == 5:
            return self._CronTrigger(
                minute=parts[0],
                hour=parts[1],
                day=parts[2],
                month=parts[3],
                day_of_week=parts[4],
            )
        raise ValueError(f"Invalid cron expression: {expr}")

    async def _job_cleanup_receipts(self) -> None:
        """Delete receipts whose retention period has passed."""
        logger.info("Running expired receipt cleanup...")

        try:
            from .db import ReceiptDB

            db = ReceiptDB(self._config.database.path)
            try:
                keys = db.cleanup_expired()
                if keys:
                    logger.info("Deleted %d expired receipts", len(keys))
            finally:
                db.close()
        except Exception:
            logger.exception("Expired receipt cleanup failed")
