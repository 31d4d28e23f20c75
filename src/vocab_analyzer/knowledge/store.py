"""Single-file key-value stores backing the knowledge cache."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from pathlib import Path
from typing import Any, Protocol


class CacheStoreError(RuntimeError):
    """Raised when a cache store cannot be read or written."""


class CacheStore(Protocol):
    """Get/put-by-key contract the knowledge cache relies on."""

    def get(self, key: str) -> dict[str, Any] | None: ...

    def put(self, key: str, value: dict[str, Any]) -> None: ...


@dataclass(frozen=True)
class JsonFileStore:
    """Key-value store persisted as one JSON object on disk.

    Writes go to a sibling temporary file that is then moved over the target,
    so a crashed write never leaves a truncated store behind.
    """

    path: Path

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise CacheStoreError(f"Unable to read cache store {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CacheStoreError(f"Cache store {self.path} does not hold a JSON object.")
        return data

    def get(self, key: str) -> dict[str, Any] | None:
        """Return the record stored under ``key``.

        Raises:
            CacheStoreError: If the file exists but cannot be read or parsed.
        """

        value = self._read_all().get(key)
        if value is None:
            return None
        if not isinstance(value, dict):
            raise CacheStoreError(f"Cache record '{key}' in {self.path} is not an object.")
        return value

    def put(self, key: str, value: dict[str, Any]) -> None:
        """Store ``value`` under ``key``, keeping other keys intact.

        Raises:
            CacheStoreError: If the file cannot be read or written.
        """

        data = self._read_all()
        data[key] = value
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise CacheStoreError(f"Unable to write cache store {self.path}: {exc}") from exc


@dataclass
class MemoryStore:
    """In-process store whose records live as long as the object.

    Values are copied through JSON on write, so callers see the same shapes a
    :class:`JsonFileStore` would return.
    """

    records: dict[str, dict[str, Any]] = field(default_factory=dict)

    def get(self, key: str) -> dict[str, Any] | None:
        return self.records.get(key)

    def put(self, key: str, value: dict[str, Any]) -> None:
        self.records[key] = json.loads(json.dumps(value))
