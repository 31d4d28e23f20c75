"""Stage 2: Absorb secondary readings from started vocabulary into the cache."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from vocab_analyzer.knowledge.cache import KnowledgeCache
from vocab_analyzer.models import Token, VocabularyItem
from vocab_analyzer.readings.matcher import attribute_reading
from vocab_analyzer.readings.repository import KanjiRepository
from vocab_analyzer.script.tokenizer import tokenize


def absorb_started_vocabulary(
    cache: KnowledgeCache,
    started: Sequence[VocabularyItem],
    kanji_repo: KanjiRepository,
    now: datetime | None = None,
    tokenizer: Callable[[str], Sequence[Token]] = tokenize,
) -> int:
    """Record the secondary readings used by vocabulary started since the watermark.

    Args:
        cache: Knowledge cache to update in place.
        started: Started vocabulary with study-start timestamps.
        kanji_repo: Kanji fetched for this run.
        now: New watermark when at least one item is eligible.
        tokenizer: Tokenizer used for attribution.

    Returns:
        Number of secondary readings added to the cache.
    """

    return cache.update(
        started,
        lambda item: attribute_reading(item, kanji_repo, tokenizer=tokenizer),
        now=now,
    )
