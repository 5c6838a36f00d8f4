"""Application settings management for linkqueue."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "settings.yaml"
ENV_SETTINGS_PATH = "LINKQUEUE_SETTINGS"
ENV_PORT = "PORT"


@dataclass
class FeedSettings:
    """The feed whose items are mined for links."""

    url: str = "http://feeds.feedburner.com/marginalrevolution?fmt=xml"
    title_filter: str = "link"
    refresh_seconds: int = 1800


@dataclass
class BufferSettings:
    """Credentials and profile selection for posting to Buffer."""

    access_token: str = ""
    services: List[str] = field(default_factory=lambda: ["facebook"])
    api_url: str = "https://api.bufferapp.com/1"

    @property
    def enabled(self) -> bool:
        return bool(self.access_token)


@dataclass
class WebSettings:
    host: str = "127.0.0.1"
    port: int = 19870


@dataclass
class AppSettings:
    """Top-level application settings loaded from YAML."""

    database_url: str = "sqlite:///linkqueue.db"
    request_timeout: int = 10
    user_agent: str = "linkqueue/0.1"
    feed: FeedSettings = field(default_factory=FeedSettings)
    buffer: BufferSettings = field(default_factory=BufferSettings)
    web: WebSettings = field(default_factory=WebSettings)


class SettingsError(RuntimeError):
    """Raised when there is an issue loading settings."""


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise SettingsError(f"Settings file not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise SettingsError("Settings file must define a mapping at the root level")
    return data


def _int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"'{name}' must be an integer, got {value!r}") from exc


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    entry = data.get(name) or {}
    if not isinstance(entry, dict):
        raise SettingsError(f"'{name}' must be a mapping of configuration values")
    return entry


def _parse_feed(entry: Dict[str, Any]) -> FeedSettings:
    defaults = FeedSettings()
    url = str(entry.get("url", defaults.url)).strip()
    if not url:
        raise SettingsError("'feed.url' must not be empty")
    return FeedSettings(
        url=url,
        title_filter=str(entry.get("title_filter", defaults.title_filter)),
        refresh_seconds=_int(entry.get("refresh_seconds", defaults.refresh_seconds), "feed.refresh_seconds"),
    )


def _parse_buffer(entry: Dict[str, Any]) -> BufferSettings:
    defaults = BufferSettings()
    services = entry.get("services", defaults.services)
    if isinstance(services, str):
        services = [services]
    if not isinstance(services, list):
        raise SettingsError("'buffer.services' must be a list of service names")
    return BufferSettings(
        access_token=str(entry.get("access_token") or ""),
        services=[str(service) for service in services],
        api_url=str(entry.get("api_url", defaults.api_url)).rstrip("/"),
    )


def _parse_web(entry: Dict[str, Any]) -> WebSettings:
    defaults = WebSettings()
    port = entry.get("port", defaults.port)
    env_port = os.environ.get(ENV_PORT)
    if env_port:
        # Accept both "8080" and ":8080".
        port = env_port.lstrip(":")
    return WebSettings(host=str(entry.get("host", defaults.host)), port=_int(port, "web.port"))


def load_settings(path: Optional[Path] = None) -> AppSettings:
    """Load application settings from YAML into ``AppSettings``.

    ``path`` defaults to the value of the ``LINKQUEUE_SETTINGS`` environment
    variable and falls back to ``config/settings.yaml`` relative to the
    project root.
    """

    if path is None:
        env_path = os.environ.get(ENV_SETTINGS_PATH)
        if env_path:
            path = Path(env_path)
        else:
            path = DEFAULT_SETTINGS_PATH

    data = _load_yaml(path)

    return AppSettings(
        database_url=str(data.get("database_url", "sqlite:///linkqueue.db")),
        request_timeout=_int(data.get("request_timeout", 10), "request_timeout"),
        user_agent=str(data.get("user_agent", "linkqueue/0.1")),
        feed=_parse_feed(_section(data, "feed")),
        buffer=_parse_buffer(_section(data, "buffer")),
        web=_parse_web(_section(data, "web")),
    )


__all__ = [
    "AppSettings",
    "BufferSettings",
    "FeedSettings",
    "SettingsError",
    "WebSettings",
    "load_settings",
]
