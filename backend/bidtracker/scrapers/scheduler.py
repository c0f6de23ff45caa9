"""APScheduler-based refresh scheduler.

Runs ItemRefresher.refresh_all() at a fixed interval so current bids stay
fresh without the user pressing refresh.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from bidtracker.services.refresh_service import ItemRefresher

logger = structlog.get_logger(__name__)

REFRESH_JOB_ID = "refresh_items"


class RefreshScheduler:
    """Manages the periodic item refresh job.

    Only one refresh job runs at a time; a run that is still going when the
    next one is due makes APScheduler skip that tick. A manual refresh
    through the API can still overlap a scheduled one.
    """

    def __init__(self, refresher: ItemRefresher):
        """Initialize refresh scheduler.

        Args:
            refresher: Refresher invoked on every tick
        """
        self.refresher = refresher
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.logger = logger.bind(service="refresh_scheduler")

    def start(self) -> None:
        """Start the scheduler. Jobs are added with add_refresh_job()."""
        if not self.scheduler.running:
            self.scheduler.start()
            self.logger.info("scheduler_started")
        else:
            self.logger.warning("scheduler_already_running")

    def stop(self) -> None:
        """Stop the scheduler without waiting for a running refresh."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("scheduler_stopped")
        else:
            self.logger.warning("scheduler_not_running")

    def add_refresh_job(self, interval_minutes: int = 15) -> Job:
        """Schedule the refresh job, replacing any existing one.

        Args:
            interval_minutes: How often to refresh

        Returns:
            APScheduler Job instance
        """
        # Pending jobs are not replaced by id before start(), so drop it explicitly
        if self.scheduler.get_job(REFRESH_JOB_ID):
            self.scheduler.remove_job(REFRESH_JOB_ID)

        trigger = IntervalTrigger(
            minutes=interval_minutes,
            start_date=datetime.now(timezone.utc),
            timezone="UTC",
        )

        job = self.scheduler.add_job(
            func=self._run_refresh_wrapper,
            trigger=trigger,
            id=REFRESH_JOB_ID,
            name="Refresh tracked items",
            replace_existing=True,
            max_instances=1,
        )

        self.logger.info(
            "refresh_job_added",
            interval_minutes=interval_minutes,
            next_run=job.next_run_time.isoformat() if getattr(job, "next_run_time", None) else None,
        )
        return job

    async def _run_refresh_wrapper(self) -> None:
        """Run one refresh, logging failures so the scheduler keeps going."""
        try:
            await self.refresher.refresh_all()
        except Exception as e:
            self.logger.error("refresh_job_failed", error=str(e), exc_info=True)

    def get_job_status(self) -> Optional[dict]:
        """Return next-run information for the refresh job, if scheduled."""
        job = self.scheduler.get_job(REFRESH_JOB_ID)
        if not job:
            return None
        return {
            "job_id": job.id,
            "next_run": job.next_run_time.isoformat() if getattr(job, "next_run_time", None) else None,
            "trigger": str(job.trigger),
        }

    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self.scheduler.running
