"""HTTP client for the WaniKani API v2."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Sequence

import requests

from vocab_analyzer.models import Kanji, VocabularyItem
from vocab_analyzer.provider.records import (
    ProviderError,
    check_study_state,
    join_vocabulary,
    parse_kanji,
    select_assignments,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.wanikani.com/v2"
API_REVISION = "20170710"
SUBJECT_ID_CHUNK = 500


def _chunks(values: Sequence[int], size: int) -> Iterator[Sequence[int]]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


class WaniKaniClient:
    """Read-only client for the user, subject and assignment endpoints.

    Every request failure, non-2xx status or undecodable body surfaces as
    :class:`ProviderError`; nothing is retried.
    """

    def __init__(
        self,
        api_token: str,
        api_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ):
        if not api_token:
            raise ValueError("A WaniKani API token is required.")
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_token}",
                "Wanikani-Revision": API_REVISION,
            }
        )

    def _get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        logger.debug(f"GET {url} {params or ''}")
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise ProviderError(f"WaniKani request failed for {url}: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(f"WaniKani returned invalid JSON for {url}: {exc}") from exc
        if not isinstance(data, dict):
            raise ProviderError(f"WaniKani returned an unexpected payload for {url}.")
        return data

    def _collection(self, path: str, params: dict[str, str]) -> list[dict[str, Any]]:
        """Fetch every page of a collection endpoint."""

        items: list[dict[str, Any]] = []
        url: str | None = f"{self.api_url}/{path}"
        page_params: dict[str, str] | None = params
        while url:
            payload = self._get(url, page_params)
            items.extend(payload.get("data") or [])
            url = (payload.get("pages") or {}).get("next_url")
            # next_url already carries the query string
            page_params = None
        return items

    def current_level(self) -> int:
        payload = self._get(f"{self.api_url}/user")
        try:
            return int(payload["data"]["level"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(f"WaniKani user payload has no level: {exc}") from exc

    def kanji(self, max_level: int) -> list[Kanji]:
        if max_level < 1:
            return []
        levels = ",".join(str(level) for level in range(1, max_level + 1))
        subjects = self._collection("subjects", {"types": "kanji", "levels": levels})
        logger.info(f"Fetched {len(subjects)} kanji for levels 1-{max_level}")
        return [parse_kanji(subject) for subject in subjects]

    def vocabulary(self, study_state: str) -> list[VocabularyItem]:
        check_study_state(study_state)
        assignments = self._collection(
            "assignments",
            {
                "subject_types": "vocabulary",
                "unlocked": "true",
                "hidden": "false",
                "started": "true" if study_state == "started" else "false",
            },
        )
        selected = select_assignments(assignments, study_state)
        subject_ids = sorted({int(data["subject_id"]) for data in selected})

        subjects_by_id: dict[int, dict[str, Any]] = {}
        for chunk in _chunks(subject_ids, SUBJECT_ID_CHUNK):
            ids = ",".join(str(subject_id) for subject_id in chunk)
            for subject in self._collection("subjects", {"ids": ids}):
                subjects_by_id[int(subject["id"])] = subject

        logger.info(f"Fetched {len(selected)} {study_state} vocabulary assignments")
        return join_vocabulary(selected, subjects_by_id)
