"""Top-level orchestration for the staged vocabulary analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable

from vocab_analyzer.knowledge.cache import CACHE_KEY, KnowledgeCache
from vocab_analyzer.knowledge.store import CacheStore
from vocab_analyzer.models import ClassificationReport, ClassificationResult, VocabularyItem
from vocab_analyzer.provider.records import SubjectProvider
from vocab_analyzer.stages.stage1_fetch import fetch_kanji_repository, fetch_vocabulary
from vocab_analyzer.stages.stage2_absorb import absorb_started_vocabulary
from vocab_analyzer.stages.stage3_classify import classify_vocabulary


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PipelineResult:
    """Result bundle returned by :func:`run_pipeline`.

    Attributes:
        results: Classification keyed by vocabulary subject id.
        report: Diagnostics for the run.
        vocabulary: Pending vocabulary items in provider order.
    """

    results: dict[int, ClassificationResult]
    report: ClassificationReport
    vocabulary: tuple[VocabularyItem, ...]


def run_pipeline(
    provider: SubjectProvider,
    store: CacheStore | None,
    cache_key: str = CACHE_KEY,
    clock: Callable[[], datetime] = _utcnow,
) -> PipelineResult:
    """Execute fetch, cache update and classification in order.

    Kanji must be loaded before any matching, and the cache must be loaded
    before the update pass reads its watermark, so every external call is made
    one after another. The new watermark is the time captured before started
    vocabulary is fetched.

    Args:
        provider: Source of kanji and vocabulary records.
        store: Key-value store for the knowledge cache, or ``None``.
        cache_key: Record key of the knowledge cache inside ``store``.
        clock: Returns the current aware UTC time.

    Returns:
        ``PipelineResult`` with classifications and diagnostics.

    Raises:
        ProviderError: If any provider fetch fails.
    """

    kanji_repo = fetch_kanji_repository(provider)
    cache = KnowledgeCache.load(store, key=cache_key)

    run_started = clock()
    started = fetch_vocabulary(provider, "started")
    additions = absorb_started_vocabulary(cache, started, kanji_repo, now=run_started)

    pending = fetch_vocabulary(provider, "not_started")
    results, report = classify_vocabulary(pending, kanji_repo, cache)

    return PipelineResult(
        results=results,
        report=replace(report, cache_additions=additions),
        vocabulary=tuple(pending),
    )
