"""Stage 3: Classify pending vocabulary as easy, new or known secondary reading."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from vocab_analyzer.knowledge.cache import KnowledgeCache
from vocab_analyzer.models import (
    ClassificationReport,
    ClassificationResult,
    MatchStep,
    NewSecondaryReading,
    Token,
    UnattributedItem,
    VocabularyItem,
)
from vocab_analyzer.readings.matcher import attribute_reading
from vocab_analyzer.readings.repository import KanjiRepository
from vocab_analyzer.script.tokenizer import tokenize

logger = logging.getLogger(__name__)

# Repeats the previous kanji, often voiced (人々 is ひとびと); no subject
# carries it, so such words never decompose.
ITERATION_MARK = "\u3005"


def classify(
    item: VocabularyItem,
    steps: tuple[MatchStep, ...] | None,
    cache: KnowledgeCache,
) -> ClassificationResult:
    """Label one vocabulary item from its attribution and the knowledge cache.

    An item without an attribution is never easy and always counts as using a
    new reading. An item whose kanji all use primary readings is easy. Otherwise
    the item is new when any secondary reading it uses is unknown to the cache.

    Args:
        item: Vocabulary item being classified.
        steps: Attribution from the reading matcher, or ``None``.
        cache: Knowledge cache of secondary readings already met.

    Returns:
        Classification result for ``item``.
    """

    if steps is None:
        is_easy = False
        is_new = True
    elif all(step.primary for step in steps):
        is_easy = True
        is_new = False
    else:
        is_easy = False
        is_new = any(
            not cache.knows(step.subject_id, step.reading) for step in steps if not step.primary
        )

    return ClassificationResult(
        subject_id=item.subject_id,
        is_easy=is_easy,
        is_new_secondary_reading=is_new,
        steps=steps,
        knowledge_persistent=cache.persistent,
    )


def _unattributed_note(item: VocabularyItem, kanji_repo: KanjiRepository) -> str:
    if item.target_reading is None:
        return "no_target_reading"
    missing = kanji_repo.missing_ids(item.component_subject_ids)
    if missing:
        return "missing_kanji:" + ",".join(str(subject_id) for subject_id in missing)
    if ITERATION_MARK in item.characters:
        return "iteration_mark"
    return "no_decomposition"


def classify_vocabulary(
    items: Sequence[VocabularyItem],
    kanji_repo: KanjiRepository,
    cache: KnowledgeCache,
    tokenizer: Callable[[str], Sequence[Token]] = tokenize,
) -> tuple[dict[int, ClassificationResult], ClassificationReport]:
    """Attribute and classify every pending vocabulary item.

    Args:
        items: Vocabulary items to classify.
        kanji_repo: Kanji fetched for this run.
        cache: Knowledge cache after the update pass.
        tokenizer: Tokenizer used for attribution.

    Returns:
        Tuple of ``(results by subject id, report)``.
    """

    results: dict[int, ClassificationResult] = {}
    unattributed: list[UnattributedItem] = []
    new_secondary: list[NewSecondaryReading] = []

    for item in items:
        steps = attribute_reading(item, kanji_repo, tokenizer=tokenizer)
        result = classify(item, steps, cache)
        results[item.subject_id] = result

        if steps is None:
            note = _unattributed_note(item, kanji_repo)
            logger.debug(f"Unattributed vocabulary {item.subject_id} ({item.characters}): {note}")
            unattributed.append(
                UnattributedItem(
                    subject_id=item.subject_id,
                    characters=item.characters,
                    reading=item.target_reading or "",
                    notes=note,
                )
            )
            continue

        for step in steps:
            if not step.primary and not cache.knows(step.subject_id, step.reading):
                new_secondary.append(
                    NewSecondaryReading(
                        subject_id=item.subject_id,
                        characters=item.characters,
                        kanji_subject_id=step.subject_id,
                        kanji=step.characters,
                        reading=step.reading,
                    )
                )

    report = ClassificationReport(
        unattributed=tuple(unattributed),
        new_secondary=tuple(new_secondary),
        knowledge_persistent=cache.persistent,
    )
    return results, report
