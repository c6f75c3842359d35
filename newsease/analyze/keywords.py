"""Keyword extraction and keyword-to-category lookup."""

from __future__ import annotations

from collections.abc import Iterable

from newsease.models import Article

MIN_KEYWORD_LENGTH = 4

STOP_WORDS = frozenset([
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
    "her", "was", "one", "our", "out", "day", "get", "has", "him", "his",
    "how", "man", "new", "now", "old", "see", "two", "way", "who", "boy",
    "did", "its", "let", "put", "say", "she", "too", "use",
])

# Checked in this order; first hit wins
CATEGORY_KEYWORDS = (
    ("technology", ("technology", "ai", "tech", "digital", "computer", "software")),
    ("business", ("business", "economy", "market", "finance", "stock")),
    ("sports", ("sports", "football", "basketball", "game", "team")),
)


def tokenize(text: str, stop_words: Iterable[str] = STOP_WORDS) -> list[str]:
    """Lowercase, split on whitespace, drop short tokens and stop words."""
    stop = stop_words if isinstance(stop_words, (set, frozenset)) else set(stop_words)
    return [
        word for word in text.lower().split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in stop
    ]


def extract_keywords(
    articles: Iterable[Article], stop_words: Iterable[str] = STOP_WORDS,
) -> dict[str, int]:
    """Count keyword occurrences across the whole collection.

    Keys appear in first-seen order, which is what breaks ties when
    topics are ranked.
    """
    stop = frozenset(stop_words)
    counts: dict[str, int] = {}
    for article in articles:
        for word in tokenize(f"{article.title} {article.description}", stop):
            counts[word] = counts.get(word, 0) + 1
    return counts


def category_for_keyword(keyword: str) -> str:
    """Best-effort category for a keyword, ``general`` when nothing matches."""
    word = keyword.lower()
    for category, words in CATEGORY_KEYWORDS:
        if word in words:
            return category
    return "general"
