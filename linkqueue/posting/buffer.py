"""Minimal client for the Buffer publishing API."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

from linkqueue.config.settings import BufferSettings

logger = logging.getLogger(__name__)


class BufferError(RuntimeError):
    """Raised when the Buffer API cannot be reached or rejects a request."""


@dataclass(frozen=True)
class BufferProfile:
    id: str
    service: str


@dataclass(frozen=True)
class UpdateOptions:
    """Content of a link post."""

    content: str
    link_url: str
    link_title: str = ""
    link_description: str = ""


class BufferClient:
    """Talk to ``api.bufferapp.com`` with an access token."""

    def __init__(
        self,
        settings: BufferSettings,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._session = session or requests.Session()

    def profiles(self) -> List[BufferProfile]:
        payload = self._request("GET", "/profiles.json")
        if not isinstance(payload, list):
            raise BufferError("unexpected profiles payload from Buffer")
        return [
            BufferProfile(id=str(item.get("id", "")), service=str(item.get("service", "")))
            for item in payload
            if isinstance(item, dict)
        ]

    def profile_ids(self, services: Iterable[str]) -> List[str]:
        """Return the IDs of profiles belonging to one of ``services``."""
        wanted = {service.lower() for service in services}
        selected: List[str] = []
        for profile in self.profiles():
            if profile.service.lower() in wanted:
                logger.info("using %s...", profile.service)
                selected.append(profile.id)
        return selected

    def create_update(self, profile_ids: Sequence[str], update: UpdateOptions) -> Dict[str, Any]:
        if not profile_ids:
            raise BufferError("no Buffer profiles selected for posting")
        data: List[tuple] = [("profile_ids[]", profile_id) for profile_id in profile_ids]
        data.extend(
            [
                ("text", update.content),
                ("media[link]", update.link_url),
                ("media[title]", update.link_title),
                ("media[description]", update.link_description),
            ]
        )
        payload = self._request("POST", "/updates/create.json", data=data)
        if isinstance(payload, dict) and payload.get("success") is False:
            raise BufferError(f"Buffer rejected update: {payload.get('message', 'unknown error')}")
        logger.info(
            "Created Buffer update for %s",
            update.link_url,
            extra={"event": "buffer.update_created", "url": update.link_url, "profiles": list(profile_ids)},
        )
        return payload

    def _request(self, method: str, path: str, data: Optional[List[tuple]] = None) -> Any:
        url = f"{self._settings.api_url}{path}"
        try:
            response = self._session.request(
                method,
                url,
                params={"access_token": self._settings.access_token},
                data=data,
                timeout=self._timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise BufferError(f"Buffer request to {path} failed: {exc}") from exc
        except ValueError as exc:
            raise BufferError(f"Buffer returned invalid JSON for {path}") from exc


__all__ = ["BufferClient", "BufferError", "BufferProfile", "UpdateOptions"]
