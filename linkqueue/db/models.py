"""SQLAlchemy models for persisted triage decisions."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, Integer, String

from .base import Base


class ArticleState(Base):
    """A dismissal event for an article.

    Rows are only ever inserted, so one URL may own several records.
    """

    __tablename__ = "articles"
    __table_args__ = (Index("ix_articles_url", "url"),)

    id = Column(Integer, primary_key=True)
    url = Column(String(2048), nullable=False)
    dismissed_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ArticleState id={self.id} url={self.url!r}>"


class LinkState(Base):
    """A queue event recorded when a link is committed for posting."""

    __tablename__ = "links"
    __table_args__ = (Index("ix_links_url", "url"),)

    id = Column(Integer, primary_key=True)
    url = Column(String(2048), nullable=False)
    article_url = Column(String(2048), nullable=True)
    queued_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<LinkState id={self.id} url={self.url!r}>"


__all__ = ["ArticleState", "LinkState"]
