"""ASGI entrypoint: ``uvicorn linkqueue.web.main:app``."""
from __future__ import annotations

from linkqueue.config.settings import load_settings
from linkqueue.services import build_services
from linkqueue.telemetry import configure_logging, configure_metrics_from_env
from .app import create_app, scheduler_lifespan

configure_logging()
configure_metrics_from_env()
_services = build_services(load_settings())

app = create_app(_services, lifespan=scheduler_lifespan(_services))

__all__ = ["app"]
