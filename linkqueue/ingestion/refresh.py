"""One refresh cycle: fetch the feed, assemble articles, publish the batch."""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable

from linkqueue.ingestion.rss import ArticleAssembler, FeedFetchError, FeedSource
from linkqueue.state.snapshot import Batch, BatchHolder
from linkqueue.telemetry import metrics

logger = logging.getLogger(__name__)


class RefreshService:
    """Fetch ``feed_url`` and replace the published batch on success.

    A failed fetch leaves the previously published batch in place.
    """

    def __init__(
        self,
        feed_url: str,
        source: FeedSource,
        assembler: ArticleAssembler,
        holder: BatchHolder,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._feed_url = feed_url
        self._source = source
        self._assembler = assembler
        self._holder = holder
        self._clock = clock

    @property
    def feed_url(self) -> str:
        return self._feed_url

    def refresh(self) -> Batch:
        start_time = time.perf_counter()
        status = "error"
        article_count = 0
        try:
            feed = self._source.fetch(self._feed_url)
            articles = tuple(self._assembler.assemble(feed))
            batch = Batch(feed_url=self._feed_url, fetched_at=self._clock(), articles=articles)
            self._holder.publish(batch)
            article_count = len(articles)
            status = "success" if article_count else "empty"
        except FeedFetchError:
            logger.exception(
                "Failed to refresh feed %s",
                self._feed_url,
                extra={"event": "feed.refresh_error", "url": self._feed_url},
            )
            raise
        finally:
            metrics.record_refresh(
                self._feed_url,
                article_count,
                time.perf_counter() - start_time,
                status,
            )

        logger.info(
            "parsed %d articles from %s",
            article_count,
            self._feed_url,
            extra={"event": "feed.refreshed", "url": self._feed_url, "count": article_count},
        )
        return batch


__all__ = ["RefreshService"]
