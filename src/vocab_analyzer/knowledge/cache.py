"""Persistent record of the secondary kanji readings a learner has met."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Callable, Iterable

from vocab_analyzer.knowledge.store import CacheStore, CacheStoreError
from vocab_analyzer.models import MatchStep, VocabularyItem
from vocab_analyzer.validation import validate_cache_payload

logger = logging.getLogger(__name__)

CACHE_KEY = "vocab_analyzer.knowledge"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MatchFn = Callable[[VocabularyItem], tuple[MatchStep, ...] | None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class KnowledgeCache:
    """Kanji id -> secondary readings already seen, plus a watermark.

    The watermark is the time up to which study-start events have been
    absorbed. Reading sets only ever grow. A cache without a store is
    memory-only: it still answers lookups but nothing it learns outlives the
    run.
    """

    mapping: dict[int, set[str]] = field(default_factory=dict)
    watermark: datetime = EPOCH
    store: CacheStore | None = None
    key: str = CACHE_KEY

    @property
    def persistent(self) -> bool:
        """Return whether updates are written back to a store."""

        return self.store is not None

    @classmethod
    def load(cls, store: CacheStore | None, key: str = CACHE_KEY) -> KnowledgeCache:
        """Load the cache record from ``store``.

        A missing record yields an empty cache bound to ``store``. A store that
        cannot be read, or a malformed record, yields an empty memory-only
        cache instead of failing the run.

        Args:
            store: Key-value store, or ``None`` for a memory-only cache.
            key: Record key inside the store.

        Returns:
            Loaded cache.
        """

        if store is None:
            return cls(key=key)

        try:
            payload = store.get(key)
            if payload is None:
                logger.info("No knowledge cache record found; starting empty")
                return cls(store=store, key=key)
            validate_cache_payload(payload)
        except (CacheStoreError, ValueError) as exc:
            logger.warning(f"Knowledge cache unavailable, continuing in memory only: {exc}")
            return cls(key=key)

        mapping = {
            int(kanji_id): set(readings) for kanji_id, readings in payload["mapping"].items()
        }
        watermark = datetime.fromisoformat(payload["watermark"])
        if watermark.tzinfo is None:
            watermark = watermark.replace(tzinfo=timezone.utc)
        logger.debug(f"Loaded knowledge cache with {len(mapping)} kanji, watermark {watermark}")
        return cls(mapping=mapping, watermark=watermark, store=store, key=key)

    def knows(self, subject_id: int, reading: str) -> bool:
        """Return whether ``reading`` is recorded as known for kanji ``subject_id``."""

        return reading in self.mapping.get(subject_id, ())

    def readings_for(self, subject_id: int) -> frozenset[str]:
        """Return the known secondary readings of one kanji."""

        return frozenset(self.mapping.get(subject_id, ()))

    def add(self, subject_id: int, reading: str) -> bool:
        """Record one secondary reading; return ``True`` when it was new."""

        readings = self.mapping.setdefault(subject_id, set())
        if reading in readings:
            return False
        readings.add(reading)
        return True

    def eligible(self, items: Iterable[VocabularyItem]) -> list[VocabularyItem]:
        """Return items whose study started strictly after the watermark."""

        return [
            item
            for item in items
            if item.started_at is not None and item.started_at > self.watermark
        ]

    def update(
        self,
        items: Iterable[VocabularyItem],
        match_fn: MatchFn,
        now: datetime | None = None,
    ) -> int:
        """Absorb secondary readings from newly started vocabulary.

        Only items started after the current watermark are matched. When at
        least one item was eligible the watermark moves to ``now`` and the
        cache is saved, even if nothing was added. With no eligible items the
        cache, watermark and store are left untouched.

        Args:
            items: Started vocabulary items with ``started_at`` set.
            match_fn: Returns the attribution of one item, or ``None``.
            now: New watermark; defaults to the current UTC time.

        Returns:
            Number of readings added.
        """

        eligible = self.eligible(items)
        if not eligible:
            logger.info("No newly started vocabulary since last update")
            return 0

        added = 0
        for item in eligible:
            steps = match_fn(item)
            if steps is None:
                logger.debug(
                    f"Skipping unattributable vocabulary {item.subject_id} ({item.characters})"
                )
                continue
            for step in steps:
                if not step.primary and self.add(step.subject_id, step.reading):
                    added += 1

        self.watermark = now if now is not None else _utcnow()
        logger.info(
            f"Absorbed {len(eligible)} started vocabulary items, {added} new secondary readings"
        )
        self.save()
        return added

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the store record shape with sorted unique readings."""

        return {
            "watermark": self.watermark.isoformat(),
            "mapping": {
                str(kanji_id): sorted(readings)
                for kanji_id, readings in sorted(self.mapping.items())
                if readings
            },
        }

    def save(self) -> None:
        """Persist the cache, falling back to memory-only when the store fails."""

        if self.store is None:
            return
        try:
            self.store.put(self.key, self.to_payload())
        except CacheStoreError as exc:
            logger.warning(f"Unable to persist knowledge cache, continuing in memory only: {exc}")
            self.store = None
