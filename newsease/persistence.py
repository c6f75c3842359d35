"""JSON codecs for the models and the managers that persist them.

Everything here sits on top of a key-value store exposing
``get(key) -> bytes | None``, ``set(key, bytes)`` and ``remove(key)``
(see ``newsease.db``). Anything that fails to decode is logged and replaced
by its default value; decode errors never reach the caller.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from newsease.models import (
    CATEGORIES,
    Article,
    Coordinate,
    NewsLocation,
    NewsSource,
    ReadingStats,
    UserLocation,
    UserPreferences,
)

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "UserPreferences"
CACHE_KEY = "CachedNewsArticles"
CACHE_EXPIRATION_KEY = "CacheExpiration"
READING_STATS_KEY = "ReadingStats"
SEARCH_HISTORY_KEY = "SearchHistory"

DECODE_ERRORS = (ValueError, KeyError, TypeError, AttributeError)


def _dt_str(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


def _parse_dt(s: str | None) -> datetime | None:
    if s is None:
        return None
    return datetime.fromisoformat(s)


def _dumps(obj) -> bytes:
    return json.dumps(obj, sort_keys=True).encode()


def _loads(data: bytes):
    return json.loads(data.decode())


# --- Article codec ---


def article_to_dict(article: Article) -> dict:
    """Serialize an article. Trending fields are volatile and left out."""
    location = None
    if article.location:
        coord = article.location.coordinate
        location = {
            "city": article.location.city,
            "country": article.location.country,
            "coordinate": (
                {"latitude": coord.latitude, "longitude": coord.longitude}
                if coord else None
            ),
        }
    src = article.source
    return {
        "id": article.id,
        "title": article.title,
        "description": article.description,
        "content": article.content,
        "author": article.author,
        "source": {
            "id": src.id,
            "name": src.name,
            "description": src.description,
            "url": src.url,
            "category": src.category,
            "language": src.language,
            "country": src.country,
        },
        "published_at": _dt_str(article.published_at),
        "url": article.url,
        "image_url": article.image_url,
        "category": article.category,
        "location": location,
        "is_bookmarked": article.is_bookmarked,
        "is_read": article.is_read,
        "is_downloaded": article.is_downloaded,
        "downloaded_content": article.downloaded_content,
    }


def article_from_dict(data: dict) -> Article:
    location = None
    if data.get("location"):
        loc = data["location"]
        coord = loc.get("coordinate")
        location = NewsLocation(
            city=loc.get("city"),
            country=loc["country"],
            coordinate=(
                Coordinate(coord["latitude"], coord["longitude"])
                if coord else None
            ),
        )
    return Article(
        id=data["id"],
        title=data["title"],
        description=data["description"],
        content=data.get("content"),
        author=data.get("author"),
        source=NewsSource(**data["source"]),
        published_at=_parse_dt(data["published_at"]),
        url=data["url"],
        image_url=data.get("image_url"),
        category=data["category"],
        location=location,
        is_bookmarked=data.get("is_bookmarked", False),
        is_read=data.get("is_read", False),
        is_downloaded=data.get("is_downloaded", False),
        downloaded_content=data.get("downloaded_content"),
    )


# --- Preferences codec ---


def preferences_to_dict(prefs: UserPreferences) -> dict:
    loc = prefs.last_location
    return {
        "selected_categories": sorted(prefs.selected_categories),
        "preferred_language": prefs.preferred_language,
        "preferred_country": prefs.preferred_country,
        "location_based_news": prefs.location_based_news,
        "push_notifications": prefs.push_notifications,
        "dark_mode": prefs.dark_mode,
        "font_size": prefs.font_size,
        "refresh_interval": prefs.refresh_interval,
        "bookmarked_articles": sorted(prefs.bookmarked_articles),
        "read_articles": sorted(prefs.read_articles),
        "blocked_sources": sorted(prefs.blocked_sources),
        "last_location": (
            {
                "latitude": loc.latitude,
                "longitude": loc.longitude,
                "city": loc.city,
                "country": loc.country,
                "timestamp": _dt_str(loc.timestamp),
            }
            if loc else None
        ),
    }


def preferences_from_dict(data: dict) -> UserPreferences:
    defaults = UserPreferences()
    loc = data.get("last_location")
    return UserPreferences(
        selected_categories=set(
            data.get("selected_categories", defaults.selected_categories)
        ),
        preferred_language=data.get("preferred_language", defaults.preferred_language),
        preferred_country=data.get("preferred_country", defaults.preferred_country),
        location_based_news=data.get("location_based_news", defaults.location_based_news),
        push_notifications=data.get("push_notifications", defaults.push_notifications),
        dark_mode=data.get("dark_mode", defaults.dark_mode),
        font_size=data.get("font_size", defaults.font_size),
        refresh_interval=data.get("refresh_interval", defaults.refresh_interval),
        bookmarked_articles=set(data.get("bookmarked_articles", [])),
        read_articles=set(data.get("read_articles", [])),
        blocked_sources=set(data.get("blocked_sources", [])),
        last_location=(
            UserLocation(
                latitude=loc["latitude"],
                longitude=loc["longitude"],
                city=loc.get("city"),
                country=loc.get("country"),
                timestamp=_parse_dt(loc["timestamp"]),
            )
            if loc else None
        ),
    )


# --- ReadingStats codec ---


def stats_to_dict(stats: ReadingStats) -> dict:
    return {
        "total_read": stats.total_read,
        "time_spent_reading": stats.time_spent_reading,
        "category_counts": dict(stats.category_counts),
        "articles_read_today": stats.articles_read_today,
        "last_read_date": _dt_str(stats.last_read_date),
        "weekly_goal": stats.weekly_goal,
        "current_streak": stats.current_streak,
    }


def stats_from_dict(data: dict) -> ReadingStats:
    return ReadingStats(
        total_read=int(data.get("total_read", 0)),
        time_spent_reading=float(data.get("time_spent_reading", 0.0)),
        category_counts={
            k: int(v) for k, v in data.get("category_counts", {}).items()
        },
        articles_read_today=int(data.get("articles_read_today", 0)),
        last_read_date=_parse_dt(data.get("last_read_date")),
        weekly_goal=int(data.get("weekly_goal", 50)),
        current_streak=int(data.get("current_streak", 0)),
    )


# --- Managers ---


class PreferencesManager:
    """Load, mutate and save the user's preferences."""

    def __init__(self, store):
        self.store = store
        self.preferences = self._load()

    def _load(self) -> UserPreferences:
        data = self.store.get(PREFERENCES_KEY)
        if data is not None:
            try:
                return preferences_from_dict(_loads(data))
            except DECODE_ERRORS as exc:
                logger.warning("Discarding unreadable preferences: %s", exc)
        prefs = UserPreferences()
        self.store.set(PREFERENCES_KEY, _dumps(preferences_to_dict(prefs)))
        return prefs

    def save(self) -> None:
        self.store.set(PREFERENCES_KEY, _dumps(preferences_to_dict(self.preferences)))

    def reset(self) -> None:
        self.preferences = UserPreferences()
        self.save()

    def toggle_category(self, category: str) -> None:
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category}")
        selected = self.preferences.selected_categories
        if category in selected:
            selected.discard(category)
        else:
            selected.add(category)
        self.save()

    def bookmark_article(self, article_id: str) -> None:
        self.preferences.bookmarked_articles.add(article_id)
        self.save()

    def unbookmark_article(self, article_id: str) -> None:
        self.preferences.bookmarked_articles.discard(article_id)
        self.save()

    def mark_article_as_read(self, article_id: str) -> None:
        self.preferences.read_articles.add(article_id)
        self.save()

    def block_source(self, source_id: str) -> None:
        self.preferences.blocked_sources.add(source_id)
        self.save()

    def unblock_source(self, source_id: str) -> None:
        self.preferences.blocked_sources.discard(source_id)
        self.save()

    def update_location(self, location: UserLocation) -> None:
        self.preferences.last_location = location
        self.save()


class ArticleCache:
    """Last fetched article list, valid for ``expiry_seconds`` after writing."""

    def __init__(self, store, expiry_seconds: float = 30 * 60):
        self.store = store
        self.expiry_seconds = expiry_seconds

    def cache_articles(
        self, articles: list[Article], now: datetime | None = None,
    ) -> None:
        now = now or datetime.now(timezone.utc)
        payload = [article_to_dict(a) for a in articles]
        self.store.set(CACHE_KEY, _dumps(payload))
        self.store.set(CACHE_EXPIRATION_KEY, now.isoformat().encode())

    def get_cached_articles(self, now: datetime | None = None) -> list[Article]:
        now = now or datetime.now(timezone.utc)
        stamp = self.store.get(CACHE_EXPIRATION_KEY)
        data = self.store.get(CACHE_KEY)
        if stamp is None or data is None:
            return []

        try:
            cached_at = datetime.fromisoformat(stamp.decode())
            if (now - cached_at).total_seconds() >= self.expiry_seconds:
                logger.debug("Article cache expired (written %s)", cached_at)
                return []
            return [article_from_dict(item) for item in _loads(data)]
        except DECODE_ERRORS as exc:
            logger.warning("Failed to decode cached articles: %s", exc)
            return []

    def clear(self) -> None:
        self.store.remove(CACHE_KEY)
        self.store.remove(CACHE_EXPIRATION_KEY)


class ReadingStatsStore:
    """Persisted reading stats. The weekly goal always comes from config."""

    def __init__(self, store, weekly_goal: int = 50):
        self.store = store
        self.weekly_goal = weekly_goal

    def load(self) -> ReadingStats:
        data = self.store.get(READING_STATS_KEY)
        if data is None:
            return ReadingStats(weekly_goal=self.weekly_goal)
        try:
            stats = stats_from_dict(_loads(data))
        except DECODE_ERRORS as exc:
            logger.warning("Discarding unreadable reading stats: %s", exc)
            return ReadingStats(weekly_goal=self.weekly_goal)
        stats.weekly_goal = self.weekly_goal
        return stats

    def save(self, stats: ReadingStats) -> None:
        self.store.set(READING_STATS_KEY, _dumps(stats_to_dict(stats)))


class SearchHistory:
    """Most-recent-first list of past queries, de-duplicated and capped."""

    def __init__(self, store, max_entries: int = 10):
        self.store = store
        self.max_entries = max_entries
        self.entries: list[str] = self._load()

    def _load(self) -> list[str]:
        data = self.store.get(SEARCH_HISTORY_KEY)
        if data is None:
            return []
        try:
            entries = _loads(data)
            if not isinstance(entries, list):
                raise TypeError(f"expected list, got {type(entries).__name__}")
            return [str(e) for e in entries][: self.max_entries]
        except DECODE_ERRORS as exc:
            logger.warning("Discarding unreadable search history: %s", exc)
            return []

    def add(self, query: str) -> None:
        if not query:
            return
        self.entries = [q for q in self.entries if q != query]
        self.entries.insert(0, query)
        del self.entries[self.max_entries:]
        self._save()

    def clear(self) -> None:
        self.entries = []
        self._save()

    def _save(self) -> None:
        self.store.set(SEARCH_HISTORY_KEY, _dumps(self.entries))
