"""Data models shared by the reading attribution pipeline.

Provider records are converted into these immutable types once, at the
provider boundary, so matching and classification never touch raw API JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Reading:
    """One kana reading registered against a kanji or vocabulary subject."""

    reading: str
    primary: bool
    accepted: bool


@dataclass(frozen=True)
class Kanji:
    """Kanji subject with its readings in provider order.

    Only accepted readings take part in matching. Among those, ``primary``
    splits them into the expected reading set and the secondary reading set.
    """

    subject_id: int
    characters: str
    level: int
    readings: tuple[Reading, ...]

    @property
    def primary_readings(self) -> tuple[str, ...]:
        """Return accepted primary readings in declared order."""

        return tuple(item.reading for item in self.readings if item.accepted and item.primary)

    @property
    def secondary_readings(self) -> tuple[str, ...]:
        """Return accepted non-primary readings in declared order."""

        return tuple(
            item.reading for item in self.readings if item.accepted and not item.primary
        )


@dataclass(frozen=True)
class VocabularyItem:
    """Vocabulary subject plus the learner's study-start time when known."""

    subject_id: int
    characters: str
    level: int
    readings: tuple[Reading, ...]
    component_subject_ids: tuple[int, ...]
    started_at: datetime | None = None

    @property
    def target_reading(self) -> str | None:
        """Return the first accepted primary reading, or ``None`` when absent."""

        for item in self.readings:
            if item.primary and item.accepted:
                return item.reading
        return None


class TokenKind(Enum):
    """Closed set of script classes the matcher understands."""

    IDEOGRAPHIC = "kanji"
    HIRAGANA = "hiragana"
    KATAKANA = "katakana"
    OTHER = "other"


@dataclass(frozen=True)
class Token:
    """Contiguous run of one script class; ideographic tokens hold one glyph."""

    kind: TokenKind
    value: str


@dataclass(frozen=True)
class MatchStep:
    """Reading attributed to one kanji glyph of a word."""

    subject_id: int
    characters: str
    reading: str
    primary: bool


class ReadingState(Enum):
    """Downstream label for a classified vocabulary item."""

    EASY = "easy"
    NEW = "new_secondary"
    KNOWN = "known_secondary"


@dataclass(frozen=True)
class ClassificationResult:
    """Classification of one vocabulary item.

    ``is_easy`` and ``is_new_secondary_reading`` are never both true. When both
    are false the item only uses secondary readings the learner already met.
    """

    subject_id: int
    is_easy: bool
    is_new_secondary_reading: bool
    steps: tuple[MatchStep, ...] | None = None
    knowledge_persistent: bool = True

    @property
    def state(self) -> ReadingState:
        """Return the single state implied by the two flags."""

        if self.is_easy:
            return ReadingState.EASY
        if self.is_new_secondary_reading:
            return ReadingState.NEW
        return ReadingState.KNOWN


@dataclass(frozen=True)
class UnattributedItem:
    """Report item for vocabulary whose reading could not be attributed."""

    subject_id: int
    characters: str
    reading: str
    notes: str


@dataclass(frozen=True)
class NewSecondaryReading:
    """Report item for a secondary kanji reading not yet known to the learner."""

    subject_id: int
    characters: str
    kanji_subject_id: int
    kanji: str
    reading: str


@dataclass(frozen=True)
class ClassificationReport:
    """Per-run diagnostics captured alongside the classification mapping."""

    unattributed: tuple[UnattributedItem, ...] = field(default_factory=tuple)
    new_secondary: tuple[NewSecondaryReading, ...] = field(default_factory=tuple)
    cache_additions: int = 0
    knowledge_persistent: bool = True
