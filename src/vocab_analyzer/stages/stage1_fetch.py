"""Stage 1: Fetch kanji and vocabulary records from the provider."""

from __future__ import annotations

import logging

from vocab_analyzer.models import VocabularyItem
from vocab_analyzer.provider.records import SubjectProvider
from vocab_analyzer.readings.repository import KanjiRepository

logger = logging.getLogger(__name__)


def fetch_kanji_repository(provider: SubjectProvider) -> KanjiRepository:
    """Fetch every kanji up to the learner's current level.

    Args:
        provider: Subject provider.

    Returns:
        Repository indexing the fetched kanji.

    Raises:
        ProviderError: If the provider cannot be reached or returns bad data.
    """

    level = provider.current_level()
    kanji = provider.kanji(level)
    logger.info(f"Loaded {len(kanji)} kanji up to level {level}")
    return KanjiRepository.from_records(kanji)


def fetch_vocabulary(provider: SubjectProvider, study_state: str) -> list[VocabularyItem]:
    """Fetch vocabulary in one study state (``not_started`` or ``started``).

    Raises:
        ProviderError: If the provider cannot be reached or returns bad data.
    """

    items = provider.vocabulary(study_state)
    logger.info(f"Loaded {len(items)} {study_state} vocabulary items")
    return items
