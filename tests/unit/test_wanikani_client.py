"""Unit tests for the WaniKani HTTP client using a fake session."""

from __future__ import annotations

from typing import Any

import pytest
import requests

from vocab_analyzer.provider.records import ProviderError
from vocab_analyzer.provider.wanikani import WaniKaniClient

API = "https://api.example.test/v2"


class FakeResponse:
    def __init__(self, payload: Any, status: int = 200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        return self.payload


class FakeSession:
    """Returns canned responses keyed by URL and records each request."""

    def __init__(self, responses: dict[str, FakeResponse]):
        self.headers: dict[str, str] = {}
        self.responses = responses
        self.calls: list[tuple[str, dict[str, str] | None]] = []

    def get(self, url: str, params=None, timeout=None) -> FakeResponse:
        self.calls.append((url, params))
        if url not in self.responses:
            raise requests.ConnectionError(f"no route to {url}")
        return self.responses[url]


def _kanji(subject_id: int, glyph: str, reading: str) -> dict[str, Any]:
    return {
        "id": subject_id,
        "object": "kanji",
        "data": {
            "level": 1,
            "characters": glyph,
            "readings": [{"reading": reading, "primary": True, "accepted_answer": True}],
        },
    }


def test_client_sends_auth_headers_and_reads_level() -> None:
    session = FakeSession({f"{API}/user": FakeResponse({"data": {"level": 7}})})

    client = WaniKaniClient("secret", api_url=API, session=session)

    assert client.current_level() == 7
    assert session.headers["Authorization"] == "Bearer secret"
    assert session.headers["Wanikani-Revision"] == "20170710"


def test_kanji_follows_pagination() -> None:
    next_url = f"{API}/subjects?page_after_id=2"
    session = FakeSession(
        {
            f"{API}/subjects": FakeResponse(
                {"data": [_kanji(1, "一", "いち")], "pages": {"next_url": next_url}}
            ),
            next_url: FakeResponse({"data": [_kanji(2, "二", "に")], "pages": {"next_url": None}}),
        }
    )
    client = WaniKaniClient("secret", api_url=API, session=session)

    kanji = client.kanji(3)

    assert [item.characters for item in kanji] == ["一", "二"]
    assert session.calls[0] == (f"{API}/subjects", {"types": "kanji", "levels": "1,2,3"})
    assert session.calls[1] == (next_url, None)


def test_vocabulary_joins_assignments_with_subjects() -> None:
    vocab = {
        "id": 100,
        "object": "vocabulary",
        "data": {
            "level": 1,
            "characters": "一つ",
            "readings": [{"reading": "ひとつ", "primary": True, "accepted_answer": True}],
            "component_subject_ids": [1],
        },
    }
    assignment = {
        "data": {
            "subject_id": 100,
            "subject_type": "vocabulary",
            "unlocked_at": "2024-01-01T00:00:00Z",
            "started_at": "2024-01-02T00:00:00Z",
        }
    }

    class RoutingSession(FakeSession):
        def get(self, url: str, params=None, timeout=None) -> FakeResponse:
            self.calls.append((url, params))
            if url.endswith("/assignments"):
                return FakeResponse({"data": [assignment], "pages": {"next_url": None}})
            return FakeResponse({"data": [vocab], "pages": {"next_url": None}})

    session = RoutingSession({})
    client = WaniKaniClient("secret", api_url=API, session=session)

    items = client.vocabulary("started")

    assert [item.characters for item in items] == ["一つ"]
    assert items[0].started_at is not None
    assert session.calls[0][1]["started"] == "true"
    assert session.calls[1] == (f"{API}/subjects", {"ids": "100"})


def test_http_errors_surface_as_provider_error() -> None:
    session = FakeSession({f"{API}/user": FakeResponse({}, status=401)})
    client = WaniKaniClient("secret", api_url=API, session=session)

    with pytest.raises(ProviderError, match="request failed"):
        client.current_level()


def test_connection_errors_surface_as_provider_error() -> None:
    client = WaniKaniClient("secret", api_url=API, session=FakeSession({}))

    with pytest.raises(ProviderError):
        client.kanji(1)


def test_client_requires_token() -> None:
    with pytest.raises(ValueError):
        WaniKaniClient("", session=FakeSession({}))
