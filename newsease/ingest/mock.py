"""Mock article source: generates sample articles after a simulated delay."""

from __future__ import annotations

import asyncio
import logging
import random
import string
from datetime import datetime, timedelta, timezone

from newsease.config import get_source_config
from newsease.ingest import catalog, register_source
from newsease.ingest.base import BaseSource
from newsease.models import CATEGORIES, Article, Coordinate, NewsLocation, NewsSource

logger = logging.getLogger(__name__)

DAY = 86400

FEED_MAX_AGE = 7 * DAY
LOCAL_MAX_AGE = 3 * DAY
SEARCH_MAX_AGE = 2 * DAY
HEADLINE_MAX_AGE = 12 * 3600

ARTICLES_PER_CATEGORY = (3, 8)
LOCAL_ARTICLES = (2, 5)

# Roughly 50km either way
LOCAL_JITTER_DEGREES = 0.5


@register_source("mock")
class MockSource(BaseSource):
    """Generate plausible articles from the sample catalog."""

    def __init__(self, config: dict, rng: random.Random | None = None):
        super().__init__(config)
        cfg = get_source_config(config)
        self.delay = cfg["delay_seconds"]
        self.rng = rng or random.Random(cfg["seed"])

    @property
    def name(self) -> str:
        return "mock"

    async def fetch(
        self,
        categories: set[str],
        location: Coordinate | None = None,
        country: str = "us",
        language: str = "en",
    ) -> list[Article]:
        await self._simulate_latency()
        now = datetime.now(timezone.utc)

        articles = []
        for category in sorted(categories):
            count = self.rng.randint(*ARTICLES_PER_CATEGORY)
            articles.extend(self._category_articles(category, count, location, now))

        if location is not None:
            count = self.rng.randint(*LOCAL_ARTICLES)
            articles.extend(self._local_articles(location, count, now))

        articles.sort(key=lambda a: a.published_at, reverse=True)
        logger.info(
            "Mock fetched %d articles for %d categories (country=%s, language=%s)",
            len(articles), len(categories), country, language,
        )
        return articles

    async def search(self, query: str, categories: set[str]) -> list[Article]:
        await self._simulate_latency()
        now = datetime.now(timezone.utc)
        pool = sorted(categories) or ["general"]
        display = string.capwords(query)

        articles = []
        for template in catalog.SEARCH_TEMPLATES:
            category = self.rng.choice(pool)
            source = self.rng.choice(catalog.sources_for(category))
            title = template.format(q=display)
            articles.append(self._make_article(
                title=title,
                description=catalog.SEARCH_DESCRIPTION.format(q=query),
                source=source,
                category=category,
                published_at=self._published(now, SEARCH_MAX_AGE),
                url_kind="search",
            ))

        articles.sort(key=lambda a: a.published_at, reverse=True)
        logger.info("Mock search '%s' returned %d articles", query, len(articles))
        return articles

    async def top_headlines(
        self, country: str = "us", category: str | None = None,
    ) -> list[Article]:
        await self._simulate_latency()
        now = datetime.now(timezone.utc)

        articles = []
        for title in catalog.HEADLINE_TITLES:
            article_category = category or self.rng.choice(CATEGORIES)
            source = self.rng.choice(catalog.sources_for(article_category))
            articles.append(self._make_article(
                title=title,
                description=catalog.HEADLINE_DESCRIPTION,
                source=source,
                category=article_category,
                published_at=self._published(now, HEADLINE_MAX_AGE),
                url_kind="headline",
            ))

        articles.sort(key=lambda a: a.published_at, reverse=True)
        logger.info("Mock headlines returned %d articles (country=%s)", len(articles), country)
        return articles

    async def _simulate_latency(self) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)

    def _category_articles(
        self,
        category: str,
        count: int,
        location: Coordinate | None,
        now: datetime,
    ) -> list[Article]:
        titles = catalog.TITLES[category]
        descriptions = catalog.DESCRIPTIONS[category]
        sources = catalog.sources_for(category)

        articles = []
        for index, title in enumerate(titles[:count]):
            articles.append(self._make_article(
                title=title,
                description=descriptions[index % len(descriptions)],
                source=self.rng.choice(sources),
                category=category,
                published_at=self._published(now, FEED_MAX_AGE),
                location=self._nearby(location) if location else None,
            ))
        return articles

    def _local_articles(
        self, location: Coordinate, count: int, now: datetime,
    ) -> list[Article]:
        articles = []
        for index, title in enumerate(catalog.LOCAL_TITLES[:count]):
            source = NewsSource(
                id=f"local-news-{self.rng.randint(1000, 9999)}",
                name="Local News Network",
                description="Your trusted source for local news",
                url="https://localnews.com",
                category="general",
            )
            articles.append(self._make_article(
                title=title,
                description=catalog.LOCAL_DESCRIPTIONS[
                    index % len(catalog.LOCAL_DESCRIPTIONS)
                ],
                source=source,
                category="general",
                published_at=self._published(now, LOCAL_MAX_AGE),
                location=self._nearby(location),
                image_url=catalog.LOCAL_IMAGE_URL,
                host="localnews",
            ))
        return articles

    def _make_article(
        self,
        title: str,
        description: str,
        source: NewsSource,
        category: str,
        published_at: datetime,
        location: NewsLocation | None = None,
        image_url: str | None = None,
        url_kind: str = "article",
        host: str | None = None,
    ) -> Article:
        slug = f"{self.rng.getrandbits(32):08x}"
        return Article(
            title=title,
            description=description,
            content="\n\n".join(catalog.CONTENT_PARAGRAPHS),
            author=self._author(),
            source=source,
            published_at=published_at,
            url=f"https://{host or source.id}.com/{url_kind}-{slug}",
            image_url=image_url or self.rng.choice(catalog.IMAGE_URLS),
            category=category,
            location=location,
            id=f"{self.rng.getrandbits(128):032x}",
        )

    def _published(self, now: datetime, max_age: float) -> datetime:
        return now - timedelta(seconds=self.rng.uniform(0, max_age))

    def _author(self) -> str:
        return f"{self.rng.choice(catalog.FIRST_NAMES)} {self.rng.choice(catalog.LAST_NAMES)}"

    def _nearby(self, center: Coordinate) -> NewsLocation:
        return NewsLocation(
            city="Local City",
            country="United States",
            coordinate=Coordinate(
                center.latitude + self.rng.uniform(-LOCAL_JITTER_DEGREES, LOCAL_JITTER_DEGREES),
                center.longitude + self.rng.uniform(-LOCAL_JITTER_DEGREES, LOCAL_JITTER_DEGREES),
            ),
        )
