"""TSV write helpers for classification output."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence

from vocab_analyzer.models import ClassificationResult, MatchStep, VocabularyItem

TSV_HEADER = [
    "subject_id",
    "characters",
    "reading",
    "state",
    "attribution",
]


def format_attribution(steps: Sequence[MatchStep] | None) -> str:
    """Render attribution steps as ``glyph:reading`` pairs.

    Secondary readings are marked with a trailing ``*``; an absent attribution
    renders as an empty string.
    """

    if steps is None:
        return ""
    return " ".join(
        f"{step.characters}:{step.reading}{'' if step.primary else '*'}" for step in steps
    )


def write_tsv(
    vocabulary: Sequence[VocabularyItem],
    results: Mapping[int, ClassificationResult],
    output_path: Path,
    include_header: bool = True,
) -> None:
    """Write one row per classified vocabulary item in vocabulary order.

    Args:
        vocabulary: Items in output order.
        results: Classification keyed by subject id.
        output_path: Destination TSV file path.
        include_header: Whether to include a header row.
    """

    with output_path.open("w", encoding="utf-8") as handle:
        if include_header:
            handle.write("\t".join(TSV_HEADER))
            handle.write("\n")
        for item in vocabulary:
            result = results.get(item.subject_id)
            if result is None:
                continue
            handle.write(
                "\t".join(
                    [
                        str(item.subject_id),
                        item.characters,
                        item.target_reading or "",
                        result.state.value,
                        format_attribution(result.steps),
                    ]
                )
            )
            handle.write("\n")
