"""Prometheus metrics for refresh and reconciliation cycles."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)


@dataclass
class RefreshEvent:
    feed: str
    article_count: int
    duration_seconds: float
    status: str


@dataclass
class ReconcileEvent:
    input_count: int
    output_count: int
    duration_seconds: float
    status: str


class MetricsCollector:
    """Centralised metrics registry for the refresh pipeline."""

    def __init__(self) -> None:
        self._exporter_started = False

        self._refresh_cycles = Counter(
            "linkqueue_refresh_cycles_total",
            "Feed refresh cycles executed",
            labelnames=("feed", "status"),
        )
        self._refresh_articles = Counter(
            "linkqueue_refresh_articles_total",
            "Articles assembled by refresh cycles",
            labelnames=("feed",),
        )
        self._refresh_duration = Histogram(
            "linkqueue_refresh_duration_seconds",
            "Duration of feed refresh cycles in seconds",
            labelnames=("feed", "status"),
            buckets=(0.5, 1, 2, 5, 10, 30, 60, 120),
        )
        self._links = Counter(
            "linkqueue_links_total",
            "Links discovered in article bodies",
            labelnames=("result",),
        )
        self._reconcile_runs = Counter(
            "linkqueue_reconcile_runs_total",
            "State reconciliation runs",
            labelnames=("status",),
        )
        self._reconcile_duration = Histogram(
            "linkqueue_reconcile_duration_seconds",
            "Duration of state reconciliation in seconds",
            labelnames=("status",),
            buckets=(0.01, 0.05, 0.1, 0.5, 1, 2, 5),
        )

        self.last_refresh: Optional[RefreshEvent] = None
        self.last_reconcile: Optional[ReconcileEvent] = None
        self.links_extracted = 0
        self.links_kept = 0

    def enable_exporter(self, port: int) -> bool:
        """Start the Prometheus HTTP exporter once."""

        if self._exporter_started:
            return True
        start_http_server(port)
        self._exporter_started = True
        logger.info("Prometheus metrics exporter started", extra={"event": "metrics.started", "port": port})
        return True

    def record_refresh(self, feed: str, article_count: int, duration_seconds: float, status: str) -> None:
        self.last_refresh = RefreshEvent(feed, article_count, duration_seconds, status)
        self._refresh_cycles.labels(feed=feed, status=status).inc()
        self._refresh_duration.labels(feed=feed, status=status).observe(duration_seconds)
        if article_count:
            self._refresh_articles.labels(feed=feed).inc(article_count)

    def record_links(self, *, extracted: int, kept: int) -> None:
        self.links_extracted += extracted
        self.links_kept += kept
        if kept:
            self._links.labels(result="kept").inc(kept)
        if extracted > kept:
            self._links.labels(result="self_link").inc(extracted - kept)

    def record_reconcile(self, *, input_count: int, output_count: int, duration_seconds: float, status: str) -> None:
        self.last_reconcile = ReconcileEvent(input_count, output_count, duration_seconds, status)
        self._reconcile_runs.labels(status=status).inc()
        self._reconcile_duration.labels(status=status).observe(duration_seconds)

    def reset(self) -> None:
        """Reset cached inspection state (primarily for tests)."""

        self.last_refresh = None
        self.last_reconcile = None
        self.links_extracted = 0
        self.links_kept = 0


metrics = MetricsCollector()


def configure_metrics_from_env() -> None:
    """Start metrics exporter when ``LINKQUEUE_METRICS_PORT`` is defined."""

    port_value = os.getenv("LINKQUEUE_METRICS_PORT")
    if not port_value:
        return
    try:
        port = int(port_value)
    except ValueError:
        logger.warning(
            "Invalid LINKQUEUE_METRICS_PORT value; expected integer",
            extra={"event": "metrics.invalid_port", "value": port_value},
        )
        return
    metrics.enable_exporter(port)


__all__ = ["configure_metrics_from_env", "metrics", "MetricsCollector"]
