"""Core data models for the news feed."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

CATEGORIES = (
    "general",
    "business",
    "entertainment",
    "health",
    "science",
    "sports",
    "technology",
)

CATEGORY_DISPLAY = {
    "general": "General",
    "business": "Business",
    "entertainment": "Entertainment",
    "health": "Health",
    "science": "Science",
    "sports": "Sports",
    "technology": "Technology",
}

# Refresh interval key -> seconds (None = manual only)
REFRESH_INTERVALS = {
    "15min": 15 * 60,
    "30min": 30 * 60,
    "1hour": 60 * 60,
    "2hours": 2 * 60 * 60,
    "manual": None,
}

FONT_SIZES = ("small", "medium", "large", "extraLarge")

POPULARITY_EMOJI = {
    "hot": "\U0001f525",
    "trending": "\U0001f4c8",
    "normal": "",
}


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class NewsSource:
    """Publisher an article came from."""

    id: str
    name: str
    language: str = "en"
    country: str = "us"
    description: str | None = None
    url: str | None = None
    category: str | None = None


@dataclass
class Coordinate:
    latitude: float
    longitude: float


@dataclass
class NewsLocation:
    """Place an article is tagged with."""

    country: str
    city: str | None = None
    coordinate: Coordinate | None = None


@dataclass
class Article:
    """A single news article held for the session."""

    title: str
    description: str
    source: NewsSource
    published_at: datetime
    url: str
    category: str  # one of CATEGORIES
    content: str | None = None
    author: str | None = None
    image_url: str | None = None
    location: NewsLocation | None = None
    is_bookmarked: bool = False
    is_read: bool = False
    # Volatile, recomputed by the trending engine on every pass
    trending_score: float = 0.0
    is_hot: bool = False
    is_trending: bool = False
    is_breaking: bool = False
    is_downloaded: bool = False
    downloaded_content: str | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category}")

    @property
    def is_local(self) -> bool:
        return self.location is not None

    @property
    def text(self) -> str:
        """Lowercased title and description, the text keywords are drawn from."""
        return f"{self.title} {self.description}".lower()


@dataclass
class TrendingTopic:
    """A keyword surfaced by one trending analysis pass."""

    keyword: str  # normalized (lowercase) token
    count: int
    trending_score: float  # 0-10
    category: str = "general"

    @property
    def label(self) -> str:
        return self.keyword.capitalize()

    @property
    def display_text(self) -> str:
        return f"#{self.label}"

    @property
    def popularity_level(self) -> str:
        if self.trending_score > 8.0:
            return "hot"
        if self.trending_score > 5.0:
            return "trending"
        return "normal"

    @property
    def emoji(self) -> str:
        return POPULARITY_EMOJI[self.popularity_level]


@dataclass
class TrendingReport:
    """Everything one analysis pass produces. Superseded by the next pass."""

    keyword_counts: dict[str, int] = field(default_factory=dict)
    topics: list[TrendingTopic] = field(default_factory=list)
    articles: list[Article] = field(default_factory=list)
    hot: list[Article] = field(default_factory=list)
    breaking: list[Article] = field(default_factory=list)
    analyzed_at: datetime = field(default_factory=_utcnow)


@dataclass
class UserLocation:
    latitude: float
    longitude: float
    city: str | None = None
    country: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class UserPreferences:
    """Per-user settings and article state read on every filter pass."""

    selected_categories: set[str] = field(default_factory=lambda: set(CATEGORIES))
    preferred_language: str = "en"
    preferred_country: str = "us"
    location_based_news: bool = True
    push_notifications: bool = True
    dark_mode: bool = False
    font_size: str = "medium"  # one of FONT_SIZES
    refresh_interval: str = "30min"  # key of REFRESH_INTERVALS
    bookmarked_articles: set[str] = field(default_factory=set)
    read_articles: set[str] = field(default_factory=set)
    blocked_sources: set[str] = field(default_factory=set)
    last_location: UserLocation | None = None


@dataclass
class FilterQuery:
    """Transient search/category/bookmark toggle driving list visibility."""

    search_text: str = ""
    category: str | None = None
    bookmarks_only: bool = False

    @property
    def is_search_active(self) -> bool:
        return bool(self.search_text.strip())


@dataclass
class ReadingStats:
    """Aggregate reading activity, updated once per mark-as-read call."""

    total_read: int = 0
    time_spent_reading: float = 0.0  # seconds
    category_counts: dict[str, int] = field(default_factory=dict)
    articles_read_today: int = 0
    last_read_date: datetime | None = None
    weekly_goal: int = 50
    current_streak: int = 0
