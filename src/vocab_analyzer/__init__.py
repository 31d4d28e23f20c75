"""Kanji reading attribution and vocabulary difficulty classification."""

from .models import (
    ClassificationReport,
    ClassificationResult,
    Kanji,
    MatchStep,
    Reading,
    ReadingState,
    Token,
    TokenKind,
    VocabularyItem,
)

__all__ = [
    "Reading",
    "Kanji",
    "VocabularyItem",
    "Token",
    "TokenKind",
    "MatchStep",
    "ReadingState",
    "ClassificationResult",
    "ClassificationReport",
]
