"""Backtracking alignment of vocabulary readings to component kanji."""

from __future__ import annotations

from typing import Callable, Mapping, Sequence

from vocab_analyzer.models import MatchStep, Token, TokenKind, VocabularyItem
from vocab_analyzer.readings.repository import KanjiReadings, KanjiRepository
from vocab_analyzer.script.tokenizer import to_hiragana, tokenize


def match_readings(
    tokens: Sequence[Token],
    target_reading: str,
    readings_by_glyph: Mapping[str, KanjiReadings],
) -> tuple[MatchStep, ...] | None:
    """Attribute each part of ``target_reading`` to the token that produces it.

    Tokens and reading are consumed together from the front. The search runs
    twice: first with primary readings only, then, if that fails, with every
    kanji trying its primary readings before its secondary ones, in declared
    order. A primary-only decomposition therefore always wins when one exists.
    Kana tokens must appear literally in the reading (katakana compared as
    hiragana) and other tokens consume nothing.

    Args:
        tokens: Tokenized vocabulary characters.
        target_reading: Kana pronunciation of the whole word.
        readings_by_glyph: Kanji glyph -> accepted reading sets.

    Returns:
        One step per kanji token in order, or ``None`` when no decomposition
        consumes the reading exactly. A kanji glyph missing from
        ``readings_by_glyph`` makes every branch through it fail.
    """

    reading = to_hiragana(target_reading)

    def search(allow_secondary: bool) -> tuple[MatchStep, ...] | None:
        memo: dict[tuple[int, int], tuple[MatchStep, ...] | None] = {}

        def helper(token_idx: int, offset: int) -> tuple[MatchStep, ...] | None:
            key = (token_idx, offset)
            if key in memo:
                return memo[key]

            if token_idx == len(tokens):
                return () if offset == len(reading) else None

            token = tokens[token_idx]
            result: tuple[MatchStep, ...] | None = None

            if token.kind is TokenKind.IDEOGRAPHIC:
                kanji = readings_by_glyph.get(token.value)
                if kanji is not None:
                    result = match_kanji(kanji, offset, token_idx)
            elif token.kind is TokenKind.OTHER:
                result = helper(token_idx + 1, offset)
            else:
                kana = to_hiragana(token.value)
                if len(kana) <= len(reading) - offset and reading.startswith(kana, offset):
                    result = helper(token_idx + 1, offset + len(kana))

            memo[key] = result
            return result

        def match_kanji(
            kanji: KanjiReadings, offset: int, token_idx: int
        ) -> tuple[MatchStep, ...] | None:
            passes = [(kanji.primary, True)]
            if allow_secondary:
                passes.append((kanji.secondary, False))
            for candidates, primary in passes:
                for candidate in candidates:
                    folded = to_hiragana(candidate)
                    if not folded or not reading.startswith(folded, offset):
                        continue
                    rest = helper(token_idx + 1, offset + len(folded))
                    if rest is not None:
                        step = MatchStep(
                            subject_id=kanji.subject_id,
                            characters=kanji.characters,
                            reading=candidate,
                            primary=primary,
                        )
                        return (step, *rest)
            return None

        return helper(0, 0)

    steps = search(allow_secondary=False)
    if steps is None:
        steps = search(allow_secondary=True)
    return steps


def attribute_reading(
    vocabulary: VocabularyItem,
    kanji_repo: KanjiRepository,
    tokenizer: Callable[[str], Sequence[Token]] = tokenize,
) -> tuple[MatchStep, ...] | None:
    """Tokenize a vocabulary item and match it against its target reading.

    Args:
        vocabulary: Item to attribute.
        kanji_repo: Kanji fetched for this run.
        tokenizer: Tokenizer producing single-glyph kanji tokens.

    Returns:
        Attribution steps, or ``None`` when the item has no accepted primary
        reading or its reading cannot be decomposed.
    """

    target = vocabulary.target_reading
    if target is None:
        return None
    tokens = tokenizer(vocabulary.characters)
    return match_readings(tokens, target, kanji_repo.readings_for(vocabulary))
