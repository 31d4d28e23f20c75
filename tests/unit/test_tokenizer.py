"""Unit tests for script-class tokenization."""

from __future__ import annotations

import pytest

from vocab_analyzer.models import Token, TokenKind
from vocab_analyzer.script.tokenizer import (
    RawSegment,
    script_label,
    split_script_runs,
    to_hiragana,
    tokenize,
)


def test_tokenize_splits_kanji_runs_into_single_glyph_tokens() -> None:
    assert tokenize("地中海") == (
        Token(TokenKind.IDEOGRAPHIC, "地"),
        Token(TokenKind.IDEOGRAPHIC, "中"),
        Token(TokenKind.IDEOGRAPHIC, "海"),
    )


def test_tokenize_keeps_kana_runs_whole_and_is_lossless() -> None:
    text = "お食べ物サービス！"

    tokens = tokenize(text)

    assert [token.kind for token in tokens] == [
        TokenKind.HIRAGANA,
        TokenKind.IDEOGRAPHIC,
        TokenKind.HIRAGANA,
        TokenKind.IDEOGRAPHIC,
        TokenKind.KATAKANA,
        TokenKind.OTHER,
    ]
    assert "".join(token.value for token in tokens) == text


def test_tokenize_empty_string_yields_no_tokens() -> None:
    assert tokenize("") == ()


def test_tokenize_normalizes_injected_raw_tokenizer_output() -> None:
    """Unknown labels become OTHER and multi-glyph kanji runs are split."""

    def raw(text: str) -> list[RawSegment]:
        return [RawSegment("kanji", "大人"), RawSegment("englishNumeral", "2")]

    assert tokenize("大人2", raw_tokenizer=raw) == (
        Token(TokenKind.IDEOGRAPHIC, "大"),
        Token(TokenKind.IDEOGRAPHIC, "人"),
        Token(TokenKind.OTHER, "2"),
    )


def test_tokenize_propagates_raw_tokenizer_errors() -> None:
    def raw(text: str) -> list[RawSegment]:
        raise RuntimeError("classifier down")

    with pytest.raises(RuntimeError, match="classifier down"):
        tokenize("地", raw_tokenizer=raw)


def test_script_label_classifies_iteration_mark_as_other() -> None:
    assert script_label("々") == "other"
    assert script_label("人") == "kanji"
    assert script_label("ー") == "katakana"
    assert script_label("A") == "other"


def test_split_script_runs_groups_maximal_runs() -> None:
    assert split_script_runs("日本語ですね") == [
        RawSegment("kanji", "日本語"),
        RawSegment("hiragana", "ですね"),
    ]


def test_to_hiragana_folds_katakana_only() -> None:
    assert to_hiragana("サボる") == "さぼる"
    assert to_hiragana("ゲーム") == "げーむ"
    assert to_hiragana("地") == "地"


def test_to_hiragana_widens_half_width_katakana() -> None:
    assert to_hiragana("ｹﾞｰﾑ") == "げーむ"
    assert to_hiragana("ﾀﾍﾞる") == "たべる"


def test_tokenize_keeps_iteration_mark_out_of_kanji_tokens() -> None:
    assert tokenize("人々") == (
        Token(TokenKind.IDEOGRAPHIC, "人"),
        Token(TokenKind.OTHER, "々"),
    )
