"""SQLAlchemy-backed store for article dismissals and link queue events."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Type, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from linkqueue.db.models import ArticleState, LinkState
from linkqueue.db.session import session_scope

logger = logging.getLogger(__name__)

StateRecord = TypeVar("StateRecord", ArticleState, LinkState)


class StoreError(RuntimeError):
    """Raised when the state database cannot be queried or written."""


class LinkStore:
    """Append-only access to the ``articles`` and ``links`` tables.

    Lookups return ``None`` when no row matches; every other database failure
    is raised as :class:`StoreError`. When several events exist for one URL the
    earliest inserted row wins.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def find_article_state(self, url: str) -> Optional[ArticleState]:
        return self._first(ArticleState, url)

    def find_link_state(self, url: str) -> Optional[LinkState]:
        return self._first(LinkState, url)

    def mark_article_dismissed(self, url: str) -> None:
        logger.info(
            "Dismissing article %s",
            url,
            extra={"event": "store.article_dismissed", "url": url},
        )
        self._insert(ArticleState(url=url, dismissed_at=self._clock()))

    def mark_link_queued(self, url: str, article_url: Optional[str] = None) -> None:
        logger.info(
            "Queueing link %s",
            url,
            extra={"event": "store.link_queued", "url": url, "article_url": article_url},
        )
        self._insert(LinkState(url=url, article_url=article_url, queued_at=self._clock()))

    def _first(self, model: Type[StateRecord], url: str) -> Optional[StateRecord]:
        try:
            with session_scope(self._session_factory) as session:
                return (
                    session.query(model)
                    .filter(model.url == url)
                    .order_by(model.id.asc())
                    .first()
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to look up {model.__tablename__} row for {url}: {exc}") from exc

    def _insert(self, record: Union[ArticleState, LinkState]) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.add(record)
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to record {record.__tablename__} row for {record.url}: {exc}") from exc


__all__ = ["LinkStore", "StoreError"]
