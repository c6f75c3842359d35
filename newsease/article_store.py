"""In-memory article collection owned by a session."""

from __future__ import annotations

import logging
from typing import Iterator

from newsease.models import Article

logger = logging.getLogger(__name__)


class ArticleStore:
    """Ordered mapping of article id to article.

    Iteration order is insertion order, which upstream is newest first.
    Articles are replaced wholesale on refresh and otherwise only flagged.
    """

    def __init__(self, articles: list[Article] | None = None):
        self._articles: dict[str, Article] = {}
        if articles:
            self.replace(articles)

    def replace(self, articles: list[Article]) -> None:
        """Swap in a freshly fetched collection. Duplicate ids keep the first."""
        fresh: dict[str, Article] = {}
        for article in articles:
            if article.id in fresh:
                logger.warning("Dropping duplicate article id %s", article.id)
                continue
            fresh[article.id] = article
        self._articles = fresh

    def update(self, articles: list[Article]) -> None:
        """Overwrite known articles in place (e.g. with scored copies)."""
        for article in articles:
            if article.id in self._articles:
                self._articles[article.id] = article

    def get(self, article_id: str) -> Article | None:
        return self._articles.get(article_id)

    def all(self) -> list[Article]:
        return list(self._articles.values())

    def __iter__(self) -> Iterator[Article]:
        return iter(list(self._articles.values()))

    def __len__(self) -> int:
        return len(self._articles)

    def __contains__(self, article_id: object) -> bool:
        return article_id in self._articles

    def sync_flags(
        self, bookmarked: set[str], read: set[str],
    ) -> None:
        """Mirror bookmark/read membership onto the article flags."""
        for article in self._articles.values():
            article.is_bookmarked = article.id in bookmarked
            article.is_read = article.id in read
