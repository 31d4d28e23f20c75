"""Markdown report generation for analysis run summaries."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from vocab_analyzer.models import ClassificationReport, ClassificationResult, ReadingState
from vocab_analyzer.validation import collect_state_counts


def _markdown_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render a deterministic GitHub-flavored markdown table.

    Args:
        headers: Table header labels.
        rows: Table body rows as string sequences.

    Returns:
        Markdown table text.
    """

    line_header = "| " + " | ".join(headers) + " |"
    line_sep = "| " + " | ".join("---" for _ in headers) + " |"
    body = ["| " + " | ".join(row) + " |" for row in rows]
    return "\n".join([line_header, line_sep, *body])


def build_report_md(
    results: Mapping[int, ClassificationResult], report: ClassificationReport
) -> str:
    """Build the markdown report for one analysis run.

    Args:
        results: Classification keyed by vocabulary subject id.
        report: Run diagnostics.

    Returns:
        Full markdown content with summary tables.
    """

    state_counts = collect_state_counts(results.values())
    state_rows = [(state.value, str(state_counts.get(state.value, 0))) for state in ReadingState]

    new_rows = [
        (str(item.subject_id), item.characters, item.kanji, item.reading)
        for item in sorted(
            report.new_secondary, key=lambda item: (item.subject_id, item.kanji, item.reading)
        )
    ]

    unattributed_rows = [
        (str(item.subject_id), item.characters, item.reading, item.notes)
        for item in sorted(report.unattributed, key=lambda item: item.subject_id)
    ]

    knowledge = "persistent" if report.knowledge_persistent else "memory only"

    sections = [
        "# Vocabulary Reading Report",
        "",
        f"Knowledge cache: {knowledge}, {report.cache_additions} secondary readings added.",
        "",
        "## Vocabulary per state",
        _markdown_table(["state", "count"], state_rows),
        "",
        "## New secondary readings",
        _markdown_table(["subject_id", "characters", "kanji", "reading"], new_rows),
        "",
        "## Unattributed vocabulary",
        _markdown_table(["subject_id", "characters", "reading", "notes"], unattributed_rows),
    ]

    return "\n".join(sections) + "\n"
