"""Feed session: the state a news screen works against.

The session owns the article store, preferences, reading stats and search
history. Every mutating call ends by recomputing ``visible``; there is no
implicit reactivity, so callers read ``visible`` after each call.
All calls are expected on a single event loop.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from newsease.analyze.trending import TrendingEngine
from newsease.article_store import ArticleStore
from newsease.config import (
    get_cache_expiry_seconds,
    get_display_limits,
    get_history_limit,
    get_weekly_goal,
)
from newsease.filtering import (
    bookmarked_articles,
    categories_with_articles,
    local_articles,
    read_articles,
    unread_count,
    visible_articles,
)
from newsease.ingest import get_source
from newsease.ingest.base import BaseSource
from newsease.location import BaseLocationProvider, LocationError
from newsease.models import (
    CATEGORIES,
    REFRESH_INTERVALS,
    Article,
    Coordinate,
    FilterQuery,
    TrendingReport,
)
from newsease.persistence import (
    ArticleCache,
    PreferencesManager,
    ReadingStatsStore,
    SearchHistory,
)
from newsease.stats import add_reading_time, record_read

logger = logging.getLogger(__name__)


class FeedSession:
    def __init__(
        self,
        config: dict,
        store,
        source: BaseSource | None = None,
        location_provider: BaseLocationProvider | None = None,
        engine: TrendingEngine | None = None,
    ):
        self.config = config
        self.source = source or get_source(config)
        self.location_provider = location_provider
        self.engine = engine or TrendingEngine.from_config(config)
        self.limits = get_display_limits(config)

        self.preferences_manager = PreferencesManager(store)
        self.cache = ArticleCache(store, get_cache_expiry_seconds(config))
        self.stats_store = ReadingStatsStore(store, get_weekly_goal(config))
        self.stats = self.stats_store.load()
        self.history = SearchHistory(store, get_history_limit(config))

        self.articles = ArticleStore()
        self.query = FilterQuery()
        self.visible: list[Article] = []
        self.trending = TrendingReport()
        self.is_loading = False
        self.error_message: str | None = None
        self.refreshed_at: datetime | None = None

    @property
    def preferences(self):
        return self.preferences_manager.preferences

    # --- Loading ---

    async def load_initial(self) -> None:
        """Use the article cache when it is fresh, otherwise fetch."""
        cached = self.cache.get_cached_articles()
        if cached:
            logger.info("Loaded %d articles from cache", len(cached))
            self._ingest(cached, cache=False)
            return
        await self.refresh()

    async def refresh(self) -> None:
        """Fetch the feed for the selected categories. Safe to call repeatedly."""
        prefs = self.preferences
        self.error_message = None
        location = self._current_location()
        await self._load(
            self.source.fetch(
                set(prefs.selected_categories),
                location=location,
                country=prefs.preferred_country,
                language=prefs.preferred_language,
            ),
            what="refresh",
        )
        self.refreshed_at = datetime.now(timezone.utc)

    async def search(self, text: str | None = None) -> list[Article]:
        """Run a source search for the current (or given) search text.

        Blank text just reapplies the local filters.
        """
        if text is not None:
            self.query.search_text = text
        if not self.query.is_search_active:
            return self.recompute()

        term = self.query.search_text.strip()
        if self.query.category is not None:
            categories = {self.query.category}
        else:
            categories = set(self.preferences.selected_categories)
        self.history.add(term)
        self.error_message = None
        await self._load(self.source.search(term, categories), what="search", cache=False)
        return self.visible

    async def top_headlines(self) -> list[Article]:
        self.error_message = None
        await self._load(
            self.source.top_headlines(
                country=self.preferences.preferred_country,
                category=self.query.category,
            ),
            what="headlines",
        )
        return self.visible

    async def _load(self, pending, what: str, cache: bool = True) -> None:
        self.is_loading = True
        try:
            articles = await pending
        except Exception:
            logger.exception("Article %s failed", what)
            self.error_message = f"Failed to load articles ({what})"
            return
        finally:
            self.is_loading = False
        self._ingest(articles, cache=cache)

    def _ingest(self, articles: list[Article], cache: bool = True) -> None:
        self.articles.replace(articles)
        self._sync_flags()
        if cache:
            self.cache.cache_articles(self.articles.all())
        self.analyze_trending()

    def _current_location(self) -> Coordinate | None:
        if not self.preferences.location_based_news or self.location_provider is None:
            return None
        try:
            return self.location_provider.require_location()
        except LocationError as exc:
            logger.info("Fetching without location: %s", exc.reason)
            self.error_message = exc.message
            return None

    # --- Trending ---

    def analyze_trending(self, now: datetime | None = None) -> TrendingReport:
        """Rescore every article and store the scored copies back."""
        self.trending = self.engine.analyze(self.articles.all(), now)
        self.articles.update(self.trending.articles)
        self.recompute()
        return self.trending

    # --- User actions ---

    def toggle_bookmark(self, article_id: str) -> bool:
        """Flip bookmark membership. Returns the new bookmarked state."""
        manager = self.preferences_manager
        if article_id in self.preferences.bookmarked_articles:
            manager.unbookmark_article(article_id)
            state = False
        else:
            manager.bookmark_article(article_id)
            state = True

        article = self.articles.get(article_id)
        if article is not None:
            article.is_bookmarked = state
        self.recompute()
        return state

    def mark_as_read(self, article_id: str, now: datetime | None = None) -> None:
        """Mark read and count it in the stats. Repeat calls count again."""
        article = self.articles.get(article_id)
        if article is None:
            raise KeyError(f"Unknown article: {article_id}")

        self.preferences_manager.mark_article_as_read(article_id)
        article.is_read = True
        record_read(self.stats, article.category, now)
        self.stats_store.save(self.stats)
        self.recompute()

    def record_reading_time(self, seconds: float) -> None:
        add_reading_time(self.stats, seconds)
        self.stats_store.save(self.stats)

    def select_category(self, category: str | None) -> list[Article]:
        if category is not None and category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category}")
        self.query.category = category
        return self.recompute()

    def set_search_text(self, text: str) -> list[Article]:
        self.query.search_text = text
        return self.recompute()

    def toggle_bookmarks_filter(self) -> list[Article]:
        self.query.bookmarks_only = not self.query.bookmarks_only
        return self.recompute()

    def block_source(self, source_id: str) -> list[Article]:
        self.preferences_manager.block_source(source_id)
        return self.recompute()

    def unblock_source(self, source_id: str) -> list[Article]:
        self.preferences_manager.unblock_source(source_id)
        return self.recompute()

    def clear_search_history(self) -> None:
        self.history.clear()

    def share_text(self, article_id: str) -> str:
        article = self.articles.get(article_id)
        if article is None:
            raise KeyError(f"Unknown article: {article_id}")
        return f"{article.title}\n\n{article.description}\n\nRead more: {article.url}"

    # --- Views ---

    def recompute(self) -> list[Article]:
        """Rebuild the visible list from the store, query and preferences."""
        limit = None if self.query.bookmarks_only else self.limits["feed"]
        self.visible = visible_articles(
            self.articles, self.query, self.preferences, limit,
        )
        return self.visible

    def preview(self) -> list[Article]:
        return self.visible[: self.limits["preview"]]

    def bookmarked(self) -> list[Article]:
        return bookmarked_articles(self.articles, self.preferences)

    def read(self) -> list[Article]:
        return read_articles(self.articles, self.preferences)

    def local(self) -> list[Article]:
        return local_articles(self.articles)

    def _sync_flags(self) -> None:
        prefs = self.preferences
        self.articles.sync_flags(prefs.bookmarked_articles, prefs.read_articles)

    @property
    def refresh_interval_seconds(self) -> int | None:
        return REFRESH_INTERVALS.get(self.preferences.refresh_interval)

    @property
    def total_count(self) -> int:
        return len(self.articles)

    @property
    def filtered_count(self) -> int:
        return len(self.visible)

    @property
    def unread_count(self) -> int:
        return unread_count(self.articles, self.preferences)

    @property
    def local_count(self) -> int:
        return len(self.local())

    @property
    def bookmarked_count(self) -> int:
        return len(self.bookmarked())

    @property
    def categories_with_articles(self) -> list[str]:
        return categories_with_articles(self.articles)

    @property
    def can_refresh(self) -> bool:
        return not self.is_loading

    @property
    def status_message(self) -> str:
        if self.is_loading:
            return "Loading news..."
        if not self.visible:
            return "No articles available"
        return f"{len(self.visible)} articles"
