"""CLI entrypoint for the vocabulary reading analysis pipeline."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from vocab_analyzer.io.tsv_io import write_tsv
from vocab_analyzer.knowledge.store import JsonFileStore
from vocab_analyzer.models import ReadingState
from vocab_analyzer.pipeline import run_pipeline
from vocab_analyzer.provider.records import ProviderError, SubjectProvider
from vocab_analyzer.provider.snapshot import SnapshotProvider
from vocab_analyzer.provider.wanikani import DEFAULT_API_URL, WaniKaniClient
from vocab_analyzer.reporting.report_md import build_report_md
from vocab_analyzer.validation import collect_state_counts

TOKEN_ENV_VAR = "WANIKANI_API_TOKEN"
DEFAULT_CACHE_PATH = Path.home() / ".vocab_analyzer" / "knowledge_cache.json"


def _format_table(headers: Sequence[str], data_rows: Sequence[Sequence[str]]) -> str:
    """Format rows as an ASCII table for terminal output.

    Args:
        headers: Table headers.
        data_rows: Row values.

    Returns:
        Monospace table string.
    """

    widths = [len(header) for header in headers]
    for row in data_rows:
        for idx, value in enumerate(row):
            widths[idx] = max(widths[idx], len(value))

    header_line = " | ".join(header.ljust(widths[idx]) for idx, header in enumerate(headers))
    separator_line = "-+-".join("-" * width for width in widths)
    body_lines = [
        " | ".join(value.ljust(widths[idx]) for idx, value in enumerate(row)) for row in data_rows
    ]
    return "\n".join([header_line, separator_line, *body_lines])


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct CLI argument parser.

    Returns:
        Configured parser for the analysis command.
    """

    parser = argparse.ArgumentParser(
        description="Classify pending WaniKani vocabulary by kanji reading familiarity."
    )
    parser.add_argument("--output", required=True, type=Path, help="Destination TSV output path.")
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Markdown report output path (default: report.md next to TSV).",
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Read subjects and assignments from a JSON snapshot instead of the API.",
    )
    parser.add_argument(
        "--api-token",
        default=None,
        help=f"WaniKani API token (default: ${TOKEN_ENV_VAR}, also read from .env).",
    )
    parser.add_argument("--api-url", default=DEFAULT_API_URL, help="WaniKani API base URL.")
    parser.add_argument(
        "--cache",
        type=Path,
        default=DEFAULT_CACHE_PATH,
        help="Knowledge cache JSON path.",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Keep the knowledge cache in memory only for this run.",
    )
    parser.add_argument("--no-header", action="store_true", help="Do not write TSV header.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser


def _build_provider(args: argparse.Namespace) -> SubjectProvider:
    if args.snapshot is not None:
        return SnapshotProvider(args.snapshot)
    token = args.api_token or os.environ.get(TOKEN_ENV_VAR)
    if not token:
        raise SystemExit(f"No API token: pass --api-token, set {TOKEN_ENV_VAR}, or use --snapshot.")
    return WaniKaniClient(token, api_url=args.api_url)


def main(argv: Sequence[str] | None = None) -> int:
    """Run CLI workflow from arguments through artifact generation.

    Returns:
        Zero exit status on success.
    """

    load_dotenv()
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    report_path = args.report if args.report is not None else args.output.parent / "report.md"
    provider = _build_provider(args)
    store = None if args.no_cache else JsonFileStore(args.cache)

    try:
        result = run_pipeline(provider, store)
    except ProviderError as exc:
        raise SystemExit(f"Failed to fetch subjects: {exc}") from exc

    write_tsv(
        result.vocabulary,
        result.results,
        output_path=args.output,
        include_header=not args.no_header,
    )
    report_path.write_text(build_report_md(result.results, result.report), encoding="utf-8")

    print(f"Wrote {len(result.results)} rows to {args.output}")
    print(f"Wrote report to {report_path}")

    counts = collect_state_counts(result.results.values())
    state_rows = [[state.value, str(counts.get(state.value, 0))] for state in ReadingState]
    print("\nVocabulary by reading state:")
    print(_format_table(["state", "count"], state_rows))
    print(
        "\nKnowledge summary: "
        f"cache_additions={result.report.cache_additions}, "
        f"new_secondary={len(result.report.new_secondary)}, "
        f"unattributed={len(result.report.unattributed)}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
