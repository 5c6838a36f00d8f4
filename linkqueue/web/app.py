"""Factory for the link triage web application."""
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Optional

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from linkqueue import __version__
from linkqueue.scheduler.runner import run_scheduler
from linkqueue.services import Services
from .routes import links


TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def scheduler_lifespan(services: Services) -> Callable[[FastAPI], Any]:
    """Run the refresh scheduler for as long as the application is serving."""

    @asynccontextmanager
    async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
        scheduler = run_scheduler(services.refresher, services.settings.feed.refresh_seconds)
        try:
            yield
        finally:
            scheduler.shutdown(wait=False)

    return _lifespan


def create_app(services: Services, lifespan: Optional[Callable[[FastAPI], Any]] = None) -> FastAPI:
    """Create a configured FastAPI application instance."""

    app = FastAPI(title="linkqueue", version=__version__, lifespan=lifespan)
    app.state.services = services
    app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    app.include_router(links.router)

    return app


__all__ = ["create_app", "scheduler_lifespan"]
