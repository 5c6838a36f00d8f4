from __future__ import annotations

import pytest
import requests

from linkqueue.config.settings import BufferSettings
from linkqueue.posting.buffer import BufferClient, BufferError, UpdateOptions


class FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, *responses: FakeResponse) -> None:
        self.responses = list(responses)
        self.requests: list[dict] = []

    def request(self, method, url, params=None, data=None, timeout=None):
        self.requests.append({"method": method, "url": url, "params": params, "data": data, "timeout": timeout})
        return self.responses.pop(0)


def _client(session: FakeSession) -> BufferClient:
    settings = BufferSettings(access_token="token", api_url="https://buffer.test/1")
    return BufferClient(settings, timeout=4, session=session)


def test_profile_ids_filters_by_service() -> None:
    session = FakeSession(
        FakeResponse(
            [
                {"id": "p1", "service": "facebook"},
                {"id": "p2", "service": "twitter"},
                {"id": "p3", "service": "Facebook"},
            ]
        )
    )

    assert _client(session).profile_ids(["facebook"]) == ["p1", "p3"]
    request = session.requests[0]
    assert request["method"] == "GET"
    assert request["url"] == "https://buffer.test/1/profiles.json"
    assert request["params"] == {"access_token": "token"}
    assert request["timeout"] == 4


def test_create_update_posts_link_fields() -> None:
    session = FakeSession(FakeResponse({"success": True}))
    update = UpdateOptions(
        content="Worth reading",
        link_url="http://other.com/y",
        link_title="Other",
        link_description="A story",
    )

    _client(session).create_update(["p1", "p3"], update)

    request = session.requests[0]
    assert request["url"] == "https://buffer.test/1/updates/create.json"
    assert request["data"] == [
        ("profile_ids[]", "p1"),
        ("profile_ids[]", "p3"),
        ("text", "Worth reading"),
        ("media[link]", "http://other.com/y"),
        ("media[title]", "Other"),
        ("media[description]", "A story"),
    ]


def test_rejected_update_raises() -> None:
    session = FakeSession(FakeResponse({"success": False, "message": "quota"}))

    with pytest.raises(BufferError, match="quota"):
        _client(session).create_update(["p1"], UpdateOptions(content="", link_url="http://o.com/"))


def test_http_failure_raises() -> None:
    session = FakeSession(FakeResponse({}, status_code=401))

    with pytest.raises(BufferError):
        _client(session).profiles()


def test_update_requires_profiles() -> None:
    with pytest.raises(BufferError):
        _client(FakeSession()).create_update([], UpdateOptions(content="", link_url="http://o.com/"))
