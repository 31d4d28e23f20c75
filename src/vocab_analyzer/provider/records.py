"""Conversion of WaniKani-shaped subject and assignment records to models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Protocol

from vocab_analyzer.models import Kanji, Reading, VocabularyItem

STUDY_STATES = ("not_started", "started")


class ProviderError(RuntimeError):
    """Raised when subject or assignment data cannot be fetched or parsed."""


class SubjectProvider(Protocol):
    """Source of kanji and vocabulary records for one run."""

    def current_level(self) -> int: ...

    def kanji(self, max_level: int) -> list[Kanji]: ...

    def vocabulary(self, study_state: str) -> list[VocabularyItem]: ...


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Args:
        value: Timestamp such as ``2024-05-01T12:00:00.000000Z`` or ``None``.

    Returns:
        Aware datetime, or ``None`` for empty input.

    Raises:
        ProviderError: If the value is not a valid timestamp.
    """

    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ProviderError(f"Invalid timestamp '{value}'.") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_readings(raw: Iterable[Mapping[str, Any]]) -> tuple[Reading, ...]:
    return tuple(
        Reading(
            reading=str(item["reading"]),
            primary=bool(item.get("primary", False)),
            accepted=bool(item.get("accepted_answer", False)),
        )
        for item in raw
    )


def _subject_data(record: Mapping[str, Any], expected_object: str) -> Mapping[str, Any]:
    if record.get("object") != expected_object:
        raise ProviderError(
            f"Expected a {expected_object} subject, got '{record.get('object')}' "
            f"(id {record.get('id')})."
        )
    data = record.get("data")
    if not isinstance(data, Mapping):
        raise ProviderError(f"Subject {record.get('id')} has no data payload.")
    return data


def parse_kanji(record: Mapping[str, Any]) -> Kanji:
    """Convert one kanji subject record.

    Args:
        record: Subject object with ``id``, ``object`` and ``data`` keys.

    Returns:
        Parsed kanji.

    Raises:
        ProviderError: If required fields are missing.
    """

    data = _subject_data(record, "kanji")
    try:
        return Kanji(
            subject_id=int(record["id"]),
            characters=str(data["characters"]),
            level=int(data["level"]),
            readings=_parse_readings(data["readings"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderError(f"Malformed kanji subject {record.get('id')}: {exc}") from exc


def parse_vocabulary(
    record: Mapping[str, Any], started_at: datetime | None = None
) -> VocabularyItem:
    """Convert one vocabulary subject record.

    Args:
        record: Subject object with ``id``, ``object`` and ``data`` keys.
        started_at: Study start time taken from the learner's assignment.

    Returns:
        Parsed vocabulary item.

    Raises:
        ProviderError: If required fields are missing.
    """

    data = _subject_data(record, "vocabulary")
    try:
        return VocabularyItem(
            subject_id=int(record["id"]),
            characters=str(data["characters"]),
            level=int(data["level"]),
            readings=_parse_readings(data["readings"]),
            component_subject_ids=tuple(int(item) for item in data["component_subject_ids"]),
            started_at=started_at,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderError(f"Malformed vocabulary subject {record.get('id')}: {exc}") from exc


def check_study_state(study_state: str) -> None:
    """Reject study-state filters other than ``not_started`` and ``started``."""

    if study_state not in STUDY_STATES:
        raise ValueError(
            f"Unknown study state '{study_state}'; expected one of {', '.join(STUDY_STATES)}."
        )


def select_assignments(
    assignments: Iterable[Mapping[str, Any]], study_state: str
) -> list[Mapping[str, Any]]:
    """Filter unlocked vocabulary assignments by study state.

    Args:
        assignments: Assignment objects with a ``data`` payload.
        study_state: ``not_started`` or ``started``.

    Returns:
        Assignment payloads (the ``data`` objects) matching the filter.
    """

    check_study_state(study_state)
    want_started = study_state == "started"
    selected: list[Mapping[str, Any]] = []
    for assignment in assignments:
        data = assignment.get("data") or {}
        if data.get("subject_type") != "vocabulary" or not data.get("unlocked_at"):
            continue
        if data.get("hidden"):
            continue
        if bool(data.get("started_at")) == want_started:
            selected.append(data)
    return selected


def join_vocabulary(
    assignments: Iterable[Mapping[str, Any]],
    subjects_by_id: Mapping[int, Mapping[str, Any]],
) -> list[VocabularyItem]:
    """Pair assignment payloads with their vocabulary subjects.

    Args:
        assignments: Assignment ``data`` payloads already filtered by state.
        subjects_by_id: Vocabulary subject records keyed by id.

    Returns:
        Vocabulary items in assignment order.

    Raises:
        ProviderError: If an assignment references an unknown subject.
    """

    items: list[VocabularyItem] = []
    for data in assignments:
        try:
            subject_id = int(data["subject_id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(f"Malformed assignment payload: {exc}") from exc
        subject = subjects_by_id.get(subject_id)
        if subject is None:
            raise ProviderError(f"Assignment references unknown subject {subject_id}.")
        items.append(parse_vocabulary(subject, started_at=parse_timestamp(data.get("started_at"))))
    return items
