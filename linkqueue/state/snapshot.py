"""Publication of the most recently fetched article batch."""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from linkqueue.ingestion.types import Article


@dataclass(frozen=True)
class Batch:
    """All articles produced by one successful refresh cycle."""

    feed_url: str
    fetched_at: datetime
    articles: Tuple[Article, ...] = field(default_factory=tuple)


class BatchHolder:
    """Hold the latest :class:`Batch` and swap it atomically.

    Readers always observe either the previous batch or the new one in full.
    A batch is never modified after it has been published.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: Optional[Batch] = None

    def publish(self, batch: Batch) -> Optional[Batch]:
        """Make ``batch`` current and return the batch it replaced."""
        with self._lock:
            previous, self._current = self._current, batch
        return previous

    def current(self) -> Optional[Batch]:
        with self._lock:
            return self._current


__all__ = ["Batch", "BatchHolder"]
