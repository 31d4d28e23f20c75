"""Offline provider reading a JSON snapshot of WaniKani subjects."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
import json
from pathlib import Path
from typing import Any

from vocab_analyzer.models import Kanji, VocabularyItem
from vocab_analyzer.provider.records import (
    ProviderError,
    join_vocabulary,
    parse_kanji,
    select_assignments,
)


@dataclass(frozen=True)
class SnapshotProvider:
    """Provider backed by a JSON file with the API's record shapes.

    The file holds ``user_level`` (int), ``subjects`` (kanji and vocabulary
    subject objects) and ``assignments`` (assignment objects).
    """

    path: Path

    @cached_property
    def payload(self) -> dict[str, Any]:
        """Load and cache the snapshot payload.

        Raises:
            ProviderError: If the file is missing or not a JSON object.
        """

        if not self.path.exists():
            raise ProviderError(f"Snapshot file not found: {self.path}")
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise ProviderError(f"Unable to read snapshot {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ProviderError(f"Snapshot {self.path} does not hold a JSON object.")
        return data

    @cached_property
    def subjects_by_id(self) -> dict[int, dict[str, Any]]:
        """Index snapshot subjects by id.

        Raises:
            ProviderError: If a subject has no integer id.
        """

        indexed: dict[int, dict[str, Any]] = {}
        for subject in self.payload.get("subjects", []):
            try:
                indexed[int(subject["id"])] = subject
            except (KeyError, TypeError, ValueError) as exc:
                raise ProviderError(
                    f"Snapshot {self.path} has a subject without a valid id."
                ) from exc
        return indexed

    def current_level(self) -> int:
        try:
            return int(self.payload["user_level"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(f"Snapshot {self.path} has no valid user_level.") from exc

    def kanji(self, max_level: int) -> list[Kanji]:
        kanji: list[Kanji] = []
        for subject_id, subject in self.subjects_by_id.items():
            if subject.get("object") != "kanji":
                continue
            try:
                level = int(subject["data"]["level"])
            except (KeyError, TypeError, ValueError) as exc:
                raise ProviderError(f"Snapshot kanji {subject_id} has no valid level.") from exc
            if 1 <= level <= max_level:
                kanji.append(parse_kanji(subject))
        return kanji

    def vocabulary(self, study_state: str) -> list[VocabularyItem]:
        assignments = select_assignments(self.payload.get("assignments", []), study_state)
        return join_vocabulary(assignments, self.subjects_by_id)
