"""Background scheduling of feed refreshes."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from linkqueue.ingestion.refresh import RefreshService
from linkqueue.ingestion.rss import FeedFetchError

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "feed-refresh"
MIN_REFRESH_SECONDS = 60


def _run_refresh_job(refresher: RefreshService) -> None:
    try:
        batch = refresher.refresh()
    except FeedFetchError:
        logger.warning(
            "Refresh of %s failed; keeping the previous batch",
            refresher.feed_url,
            extra={"event": "scheduler.refresh_failed", "url": refresher.feed_url},
        )
        return
    logger.info(
        "fetched %d articles",
        len(batch.articles),
        extra={"event": "scheduler.refresh_done", "count": len(batch.articles)},
    )


def register_refresh_job(
    scheduler: BackgroundScheduler,
    refresher: RefreshService,
    interval_seconds: int,
) -> None:
    """Schedule ``refresher`` to run now and then every ``interval_seconds``.

    Intervals shorter than a minute are raised to one minute.
    """
    interval_seconds = max(interval_seconds, MIN_REFRESH_SECONDS)
    scheduler.add_job(
        _run_refresh_job,
        "interval",
        seconds=interval_seconds,
        args=[refresher],
        id=REFRESH_JOB_ID,
        replace_existing=True,
        next_run_time=datetime.now(timezone.utc),
        max_instances=1,
        coalesce=True,
    )
    logger.info(
        "Scheduled refresh of %s every %ss",
        refresher.feed_url,
        interval_seconds,
        extra={
            "event": "scheduler.refresh_scheduled",
            "url": refresher.feed_url,
            "interval_seconds": interval_seconds,
        },
    )


def run_scheduler(refresher: RefreshService, interval_seconds: int) -> BackgroundScheduler:
    """Start the APScheduler-based refresh loop."""
    scheduler = BackgroundScheduler()
    register_refresh_job(scheduler, refresher, interval_seconds)
    scheduler.start()
    logger.info(
        "Scheduler started with %d jobs",
        len(scheduler.get_jobs()),
        extra={"event": "scheduler.started", "job_count": len(scheduler.get_jobs())},
    )
    return scheduler


__all__ = ["REFRESH_JOB_ID", "register_refresh_job", "run_scheduler"]
