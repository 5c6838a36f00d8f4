"""Merge freshly fetched articles with persisted dismissal and queue events."""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Protocol

from linkqueue.db.store import StoreError
from linkqueue.ingestion.types import Article, Link
from linkqueue.telemetry import metrics

logger = logging.getLogger(__name__)

# Undated articles sort ahead of everything else.
_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


class StateStore(Protocol):
    def find_article_state(self, url: str) -> Optional[Any]:
        ...

    def find_link_state(self, url: str) -> Optional[Any]:
        ...


class ReconciliationError(RuntimeError):
    """Raised when a state lookup fails for a reason other than a missing row."""


def _sort_key(article: Article) -> datetime:
    if article.date is None:
        return _EARLIEST
    if article.date.tzinfo is None:
        return article.date.replace(tzinfo=timezone.utc)
    return article.date


def _annotate_links(article: Article, store: StateStore) -> Article:
    links: List[Link] = []
    for link in article.links:
        try:
            state = store.find_link_state(link.url)
        except StoreError as exc:
            raise ReconciliationError(
                f"error while looking up link {link.url} from {article.url}: {exc}"
            ) from exc
        if state is not None:
            link = replace(link, queued=True, queued_at=state.queued_at)
        links.append(link)
    return replace(article, links=tuple(links))


def reconcile(articles: Iterable[Article], store: StateStore) -> List[Article]:
    """Drop dismissed articles, flag queued links and order by date.

    Input articles are left untouched; annotated copies are returned, oldest
    first. Articles sharing a date keep their input order.
    """

    start_time = time.perf_counter()
    retained: List[Article] = []
    seen = 0
    status = "error"
    try:
        for article in articles:
            seen += 1
            try:
                state = store.find_article_state(article.url)
            except StoreError as exc:
                raise ReconciliationError(
                    f"error while looking up article from {article.url}: {exc}"
                ) from exc
            if state is not None and state.dismissed_at is not None:
                logger.debug("%s is dismissed", article.title)
                continue
            retained.append(_annotate_links(article, store))

        retained.sort(key=_sort_key)
        status = "success"
    finally:
        metrics.record_reconcile(
            input_count=seen,
            output_count=len(retained) if status == "success" else 0,
            duration_seconds=time.perf_counter() - start_time,
            status=status,
        )
    return retained


__all__ = ["ReconciliationError", "StateStore", "reconcile"]
