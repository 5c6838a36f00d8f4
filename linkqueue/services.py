"""Construction of the long-lived collaborators shared by jobs and routes."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from linkqueue.config.settings import AppSettings
from linkqueue.db.session import create_engine_from_url, create_session_factory, init_db
from linkqueue.db.store import LinkStore
from linkqueue.ingestion.refresh import RefreshService
from linkqueue.ingestion.rss import ArticleAssembler, FeedSource, title_contains
from linkqueue.ingestion.types import Article
from linkqueue.posting.buffer import BufferClient, UpdateOptions
from linkqueue.state.reconciler import reconcile
from linkqueue.state.snapshot import Batch, BatchHolder

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: AppSettings
    store: LinkStore
    holder: BatchHolder
    refresher: RefreshService
    buffer: Optional[BufferClient] = None
    _profile_ids: Optional[List[str]] = field(default=None, repr=False)
    _profile_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def articles(self, batch: Optional[Batch]) -> List[Article]:
        """Reconcile ``batch`` against stored decisions."""
        if batch is None:
            return []
        return reconcile(batch.articles, self.store)

    def commit_link(self, update: UpdateOptions, article_url: Optional[str] = None) -> bool:
        """Post ``update`` to Buffer when configured, then record it as queued.

        Returns whether the update was posted.
        """
        posted = False
        if self.buffer is not None:
            self.buffer.create_update(self._buffer_profile_ids(), update)
            posted = True
        else:
            logger.info(
                "Buffer is not configured; recording %s without posting",
                update.link_url,
                extra={"event": "buffer.disabled", "url": update.link_url},
            )
        self.store.mark_link_queued(update.link_url, article_url)
        return posted

    def _buffer_profile_ids(self) -> List[str]:
        with self._profile_lock:
            if self._profile_ids is None:
                self._profile_ids = self.buffer.profile_ids(self.settings.buffer.services)
            return self._profile_ids


def build_services(settings: AppSettings) -> Services:
    engine = create_engine_from_url(settings.database_url)
    init_db(engine)
    store = LinkStore(create_session_factory(engine))

    holder = BatchHolder()
    refresher = RefreshService(
        feed_url=settings.feed.url,
        source=FeedSource(user_agent=settings.user_agent),
        assembler=ArticleAssembler(title_contains(settings.feed.title_filter)),
        holder=holder,
    )
    buffer = None
    if settings.buffer.enabled:
        buffer = BufferClient(settings.buffer, timeout=settings.request_timeout)

    return Services(
        settings=settings,
        store=store,
        holder=holder,
        refresher=refresher,
        buffer=buffer,
    )


__all__ = ["Services", "build_services"]
