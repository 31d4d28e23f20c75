"""Script-class tokenization of Japanese vocabulary glyph strings."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Callable, Sequence

import jaconv

from vocab_analyzer.models import Token, TokenKind

# The iteration mark 々 is left out: no kanji subject carries it.
KANJI_RE = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]")
HIRAGANA_RE = re.compile(r"[\u3041-\u309f]")
KATAKANA_RE = re.compile(r"[\u30a0-\u30ff\uff66-\uff9f]")

_KIND_BY_LABEL = {kind.value: kind for kind in TokenKind}


@dataclass(frozen=True)
class RawSegment:
    """Run of glyphs as reported by a script classifier."""

    kind: str
    value: str


RawTokenizer = Callable[[str], Sequence[RawSegment]]


def script_label(char: str) -> str:
    """Classify one glyph by Unicode block.

    Args:
        char: Single character.

    Returns:
        One of ``kanji``, ``hiragana``, ``katakana`` or ``other``.
    """

    if KANJI_RE.fullmatch(char):
        return "kanji"
    if HIRAGANA_RE.fullmatch(char):
        return "hiragana"
    if KATAKANA_RE.fullmatch(char):
        return "katakana"
    return "other"


def split_script_runs(text: str) -> list[RawSegment]:
    """Split text into maximal runs of one script class.

    Args:
        text: Glyph string such as ``食べ物``.

    Returns:
        Ordered segments covering ``text``; kanji runs are not split here.
    """

    segments: list[RawSegment] = []
    buf: list[str] = []
    current = ""

    for char in text:
        label = script_label(char)
        if buf and label != current:
            segments.append(RawSegment(current, "".join(buf)))
            buf.clear()
        current = label
        buf.append(char)

    if buf:
        segments.append(RawSegment(current, "".join(buf)))
    return segments


def to_hiragana(text: str) -> str:
    """Fold katakana, full or half width, to hiragana, leaving other glyphs untouched."""

    return jaconv.kata2hira(jaconv.h2z(text))


def tokenize(text: str, raw_tokenizer: RawTokenizer = split_script_runs) -> tuple[Token, ...]:
    """Normalize raw script runs into tokens ready for reading matching.

    Multi-glyph kanji runs are split into one token per glyph because each
    kanji contributes its own part of the pronunciation. Labels the matcher
    does not know become ``TokenKind.OTHER``.

    Args:
        text: Glyph string to tokenize.
        raw_tokenizer: Script classifier producing :class:`RawSegment` runs.

    Returns:
        Tokens whose values concatenate back to ``text``.
    """

    if not text:
        return ()

    tokens: list[Token] = []
    for segment in raw_tokenizer(text):
        kind = _KIND_BY_LABEL.get(segment.kind, TokenKind.OTHER)
        if kind is TokenKind.IDEOGRAPHIC:
            tokens.extend(Token(kind, glyph) for glyph in segment.value)
        else:
            tokens.append(Token(kind, segment.value))
    return tuple(tokens)
