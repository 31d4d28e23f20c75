"""Validation helpers for persisted cache payloads and run summaries."""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any, Iterable, Mapping

from vocab_analyzer.models import ClassificationResult


def validate_cache_payload(payload: Mapping[str, Any]) -> None:
    """Validate the shape of a persisted knowledge cache record.

    Expected shape::

        {"watermark": "<ISO-8601>", "mapping": {"<kanji id>": ["<reading>", ...]}}

    Args:
        payload: Record read from the cache store.

    Raises:
        ValueError: If any field violates the expected shape.
    """

    errors: list[str] = []

    watermark = payload.get("watermark")
    if not isinstance(watermark, str):
        errors.append(f"watermark must be a string, got {type(watermark).__name__}")
    else:
        try:
            datetime.fromisoformat(watermark)
        except ValueError:
            errors.append(f"invalid watermark '{watermark}'")

    mapping = payload.get("mapping")
    if not isinstance(mapping, dict):
        errors.append(f"mapping must be an object, got {type(mapping).__name__}")
    else:
        for key, readings in mapping.items():
            if not str(key).isdigit():
                errors.append(f"invalid kanji id '{key}'")
            if not isinstance(readings, list) or not all(
                isinstance(item, str) and item for item in readings
            ):
                errors.append(f"readings for kanji '{key}' must be a list of non-empty strings")

    if errors:
        preview = "\n".join(f"- {item}" for item in errors[:25])
        rest = len(errors) - min(25, len(errors))
        more = f"\n- ... and {rest} more" if rest > 0 else ""
        raise ValueError(
            f"Knowledge cache validation failed with {len(errors)} errors:\n{preview}{more}"
        )


def collect_state_counts(results: Iterable[ClassificationResult]) -> dict[str, int]:
    """Count classification results by reading state.

    Args:
        results: Classification results for one run.

    Returns:
        Dictionary of state label to count.
    """

    counter: Counter[str] = Counter()
    for result in results:
        counter[result.state.value] += 1
    return dict(counter)
