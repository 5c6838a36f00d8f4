"""Shared FastAPI dependencies."""
from __future__ import annotations

from fastapi import Request
from fastapi.templating import Jinja2Templates

from linkqueue.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


__all__ = ["get_services", "get_templates"]
