"""Repository exposing indexed views over fetched kanji subjects."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Sequence

from vocab_analyzer.models import Kanji, VocabularyItem


@dataclass(frozen=True)
class KanjiReadings:
    """Accepted readings of one kanji split into primary and secondary sets."""

    subject_id: int
    characters: str
    primary: tuple[str, ...]
    secondary: tuple[str, ...]


@dataclass(frozen=True)
class KanjiRepository:
    """Read-only index of the kanji fetched for one run.

    Instances are built once per run from provider records and never
    persisted. Lookups for vocabulary are keyed by the component subject ids
    the vocabulary declares, mirroring how the provider links them.
    """

    kanji: tuple[Kanji, ...]

    @classmethod
    def from_records(cls, records: Sequence[Kanji]) -> KanjiRepository:
        """Build a repository from provider records."""

        return cls(tuple(records))

    @cached_property
    def by_id(self) -> dict[int, Kanji]:
        """Build and cache a subject-id indexed map."""

        return {item.subject_id: item for item in self.kanji}

    def missing_ids(self, subject_ids: Sequence[int]) -> list[int]:
        """Return component ids not present in the fetched kanji set.

        Args:
            subject_ids: Component ids declared by a vocabulary item.

        Returns:
            Missing ids in their declared order.
        """

        return [subject_id for subject_id in subject_ids if subject_id not in self.by_id]

    def readings_for(self, vocabulary: VocabularyItem) -> dict[str, KanjiReadings]:
        """Build glyph -> reading sets for the kanji a vocabulary item references.

        Ids missing from the repository are skipped; the matcher then fails on
        the corresponding glyph, which keeps the failure local to this word.

        Args:
            vocabulary: Vocabulary item whose components should be resolved.

        Returns:
            Dictionary keyed by kanji glyph.
        """

        readings: dict[str, KanjiReadings] = {}
        for subject_id in vocabulary.component_subject_ids:
            kanji = self.by_id.get(subject_id)
            if kanji is None:
                continue
            readings[kanji.characters] = KanjiReadings(
                subject_id=kanji.subject_id,
                characters=kanji.characters,
                primary=kanji.primary_readings,
                secondary=kanji.secondary_readings,
            )
        return readings
