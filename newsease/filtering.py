"""Filter pipeline: turn the article collection into what a screen shows."""

from __future__ import annotations

from collections.abc import Iterable

from newsease.models import CATEGORIES, Article, FilterQuery, UserPreferences


def matches_search(article: Article, search_text: str) -> bool:
    """Case-insensitive substring match on title or description."""
    needle = search_text.strip().lower()
    if not needle:
        return True
    return needle in article.title.lower() or needle in article.description.lower()


def visible_articles(
    articles: Iterable[Article],
    query: FilterQuery,
    prefs: UserPreferences,
    limit: int | None = None,
) -> list[Article]:
    """Apply the query and preferences, keeping the input order.

    Bookmarks-only mode ignores the search text and category. Blocked
    sources are always dropped. ``limit=None`` means no cap.
    """
    if query.bookmarks_only:
        predicates = [lambda a: a.id in prefs.bookmarked_articles]
    else:
        predicates = []
        if query.is_search_active:
            predicates.append(lambda a: matches_search(a, query.search_text))
        if query.category is not None:
            predicates.append(lambda a: a.category == query.category)

    result = []
    for article in articles:
        if article.source.id in prefs.blocked_sources:
            continue
        if all(pred(article) for pred in predicates):
            result.append(article)
    if limit is not None:
        return result[:limit]
    return result


def bookmarked_articles(
    articles: Iterable[Article], prefs: UserPreferences,
) -> list[Article]:
    return [a for a in articles if a.id in prefs.bookmarked_articles]


def read_articles(
    articles: Iterable[Article], prefs: UserPreferences,
) -> list[Article]:
    return [a for a in articles if a.id in prefs.read_articles]


def local_articles(articles: Iterable[Article]) -> list[Article]:
    return [a for a in articles if a.is_local]


def unread_count(articles: Iterable[Article], prefs: UserPreferences) -> int:
    return sum(1 for a in articles if a.id not in prefs.read_articles)


def categories_with_articles(articles: Iterable[Article]) -> list[str]:
    """Categories present in ``articles``, in canonical order."""
    present = {a.category for a in articles}
    return [c for c in CATEGORIES if c in present]
