"""Unit tests for the knowledge cache update pass and persistence."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from vocab_analyzer.knowledge.cache import CACHE_KEY, EPOCH, KnowledgeCache
from vocab_analyzer.knowledge.store import CacheStoreError, JsonFileStore, MemoryStore
from vocab_analyzer.models import MatchStep, VocabularyItem

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class CountingStore(MemoryStore):
    """Memory store that counts writes."""

    def __init__(self, records: dict[str, dict[str, Any]] | None = None):
        super().__init__(records or {})
        self.puts = 0

    def put(self, key: str, value: dict[str, Any]) -> None:
        super().put(key, value)
        self.puts += 1


def _vocab(subject_id: int, started_at: datetime | None) -> VocabularyItem:
    return VocabularyItem(
        subject_id=subject_id,
        characters="語",
        level=1,
        readings=(),
        component_subject_ids=(),
        started_at=started_at,
    )


def _matches(table: dict[int, tuple[MatchStep, ...] | None]):
    return lambda item: table.get(item.subject_id)


class FailingStore:
    """Store that fails on every call."""

    def get(self, key: str) -> dict[str, Any] | None:
        raise CacheStoreError("disk unavailable")

    def put(self, key: str, value: dict[str, Any]) -> None:
        raise CacheStoreError("disk unavailable")


def test_update_without_eligible_items_leaves_cache_and_store_untouched() -> None:
    store = CountingStore()
    cache = KnowledgeCache.load(store)

    added = cache.update([_vocab(1, None)], _matches({}), now=T0)

    assert added == 0
    assert cache.watermark == EPOCH
    assert store.puts == 0


def test_update_records_secondary_readings_and_advances_watermark() -> None:
    store = CountingStore()
    cache = KnowledgeCache.load(store)
    steps = {
        1: (MatchStep(10, "食", "た", False), MatchStep(11, "物", "もの", False)),
        2: (MatchStep(12, "地", "ち", True),),
        3: None,
    }

    added = cache.update(
        [_vocab(1, T0), _vocab(2, T0), _vocab(3, T0)], _matches(steps), now=T0 + timedelta(days=1)
    )

    assert added == 2
    assert cache.knows(10, "た")
    assert cache.knows(11, "もの")
    assert not cache.knows(12, "ち")
    assert cache.watermark == T0 + timedelta(days=1)
    assert store.puts == 1
    assert store.records[CACHE_KEY]["mapping"] == {"10": ["た"], "11": ["もの"]}


def test_update_with_eligible_items_but_no_additions_still_advances_watermark() -> None:
    store = CountingStore()
    cache = KnowledgeCache.load(store)

    added = cache.update([_vocab(1, T0)], _matches({1: None}), now=T0 + timedelta(hours=1))

    assert added == 0
    assert cache.watermark == T0 + timedelta(hours=1)
    assert store.puts == 1


def test_update_is_idempotent_when_nothing_new_started() -> None:
    store = CountingStore()
    cache = KnowledgeCache.load(store)
    items = [_vocab(1, T0)]
    steps = _matches({1: (MatchStep(10, "食", "た", False),)})

    cache.update(items, steps, now=T0 + timedelta(days=1))
    mapping_before = {key: set(value) for key, value in cache.mapping.items()}
    watermark_before = cache.watermark

    cache.update(items, steps, now=T0 + timedelta(days=2))

    assert cache.mapping == mapping_before
    assert cache.watermark == watermark_before
    assert store.puts == 1


def test_update_only_grows_known_readings() -> None:
    cache = KnowledgeCache()
    cache.update(
        [_vocab(1, T0)], _matches({1: (MatchStep(10, "食", "た", False),)}), now=T0
    )
    later = T0 + timedelta(days=1)
    cache.update(
        [_vocab(2, later)], _matches({2: (MatchStep(10, "食", "く", False),)}), now=later
    )

    assert cache.readings_for(10) == frozenset({"た", "く"})
    assert cache.add(10, "た") is False


def test_eligibility_is_strictly_after_watermark() -> None:
    cache = KnowledgeCache(watermark=T0)

    eligible = cache.eligible([_vocab(1, T0), _vocab(2, T0 + timedelta(seconds=1))])

    assert [item.subject_id for item in eligible] == [2]


def test_load_round_trips_through_json_file_store(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "cache.json")
    cache = KnowledgeCache.load(store)
    cache.update(
        [_vocab(1, T0)],
        _matches({1: (MatchStep(10, "食", "た", False), MatchStep(10, "食", "く", False))}),
        now=T0,
    )

    reloaded = KnowledgeCache.load(JsonFileStore(tmp_path / "cache.json"))

    assert reloaded.persistent
    assert reloaded.watermark == T0
    assert reloaded.mapping == {10: {"た", "く"}}


def test_load_degrades_to_memory_only_when_store_fails() -> None:
    cache = KnowledgeCache.load(FailingStore())

    assert not cache.persistent
    assert cache.mapping == {}
    assert cache.watermark == EPOCH


def test_load_degrades_to_memory_only_on_malformed_record() -> None:
    store = MemoryStore({CACHE_KEY: {"watermark": "yesterday", "mapping": {"10": "た"}}})

    cache = KnowledgeCache.load(store)

    assert not cache.persistent


def test_load_degrades_on_unreadable_json_file(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")

    cache = KnowledgeCache.load(JsonFileStore(path))

    assert not cache.persistent


def test_failed_save_switches_to_memory_only_without_raising() -> None:
    cache = KnowledgeCache(store=FailingStore())

    added = cache.update(
        [_vocab(1, T0)], _matches({1: (MatchStep(10, "食", "た", False),)}), now=T0
    )

    assert added == 1
    assert cache.knows(10, "た")
    assert not cache.persistent
