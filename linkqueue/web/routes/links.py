"""Views for reviewing, queueing and dismissing discovered links."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from linkqueue.db.store import StoreError
from linkqueue.ingestion.rss import FeedFetchError
from linkqueue.posting.buffer import BufferError, UpdateOptions
from linkqueue.services import Services
from linkqueue.state.reconciler import ReconciliationError
from linkqueue.web.dependencies import get_services, get_templates

logger = logging.getLogger(__name__)

router = APIRouter()


def _server_error(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.get("/", response_class=HTMLResponse)
def index(
    request: Request,
    services: Services = Depends(get_services),
):
    batch = services.holder.current()
    try:
        articles = services.articles(batch)
    except ReconciliationError:
        logger.exception("Failed to reconcile articles", extra={"event": "web.reconcile_error"})
        raise _server_error("Unable to load articles")

    context = {
        "articles": articles,
        "fetched_at": batch.fetched_at if batch else None,
    }
    return get_templates(request).TemplateResponse(request, "index.html", context)


@router.get("/refresh")
def refresh(services: Services = Depends(get_services)):
    try:
        services.refresher.refresh()
    except FeedFetchError:
        raise _server_error("Unable to refresh feed")
    return RedirectResponse(url="/", status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/enqueue", response_class=HTMLResponse)
def enqueue(
    request: Request,
    url: Optional[str] = None,
    article_url: Optional[str] = None,
):
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="url not provided")
    context = {"url": url, "article_url": article_url or ""}
    return get_templates(request).TemplateResponse(request, "enqueue.html", context)


@router.post("/commit", response_class=PlainTextResponse)
def commit(
    content: str = Form(""),
    url: str = Form(...),
    link_title: str = Form(""),
    link_descr: str = Form(""),
    article_url: Optional[str] = Form(None),
    services: Services = Depends(get_services),
):
    update = UpdateOptions(
        content=content,
        link_url=url,
        link_title=link_title,
        link_description=link_descr,
    )
    try:
        posted = services.commit_link(update, article_url=article_url or None)
    except (BufferError, StoreError):
        logger.exception("Failed to commit link %s", url, extra={"event": "web.commit_error", "url": url})
        raise _server_error("Unable to queue link")
    if posted:
        return "pushed post to buffer"
    return "queued link"


@router.post("/dismiss")
def dismiss(
    url: str = Form(...),
    services: Services = Depends(get_services),
):
    try:
        services.store.mark_article_dismissed(url)
    except StoreError:
        logger.exception("Failed to dismiss %s", url, extra={"event": "web.dismiss_error", "url": url})
        raise _server_error("Unable to dismiss article")
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


__all__ = ["router"]
