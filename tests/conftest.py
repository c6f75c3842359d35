"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from newsease.config import load_config
from newsease.db import MemoryStore
from newsease.models import Article, Coordinate, NewsLocation, NewsSource

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_config(tmp_path):
    """Config with no simulated latency and a fixed seed."""
    config_text = """
source:
  type: mock
  delay_seconds: 0
  seed: 42

trending:
  topic_limit: 10
  topic_score_base: 100

display:
  feed_limit: 20
  preview_limit: 10

cache:
  expiry_minutes: 30

history:
  max_entries: 10

location:
  status: authorized
  latitude: 37.7749
  longitude: -122.4194
  address: "San Francisco, CA"

database:
  path: "DB_PATH_PLACEHOLDER"
"""
    db_path = str(tmp_path / "test.db")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text.replace("DB_PATH_PLACEHOLDER", db_path))
    return load_config(str(cfg_path))


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def make_article():
    """Build an article published ``hours_old`` hours before NOW."""

    def _make(
        title: str,
        description: str = "",
        category: str = "general",
        hours_old: float = 1.0,
        source_id: str = "news-central",
        **kwargs,
    ) -> Article:
        return Article(
            title=title,
            description=description,
            source=NewsSource(id=source_id, name=source_id.replace("-", " ").title()),
            published_at=NOW - timedelta(hours=hours_old),
            url=f"https://{source_id}.com/{abs(hash(title)) % 10**8}",
            category=category,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_articles(make_article):
    """A small newest-first feed across categories and sources."""
    return [
        make_article(
            "Quantum Computing Breakthrough Achieved",
            "Researchers report a quantum processor milestone.",
            category="technology", hours_old=0.5, source_id="tech-insider",
        ),
        make_article(
            "Stock Market Reaches New High",
            "Market analysis shows quantum investment growth.",
            category="business", hours_old=1.5, source_id="market-watch",
        ),
        make_article(
            "Championship Final Breaks Records",
            "The team celebrates a historic championship win.",
            category="sports", hours_old=3, source_id="news-central",
        ),
        make_article(
            "City Council Approves Transit Plan",
            "Local residents welcome the transit plan.",
            category="general", hours_old=8, source_id="local-news-1234",
            location=NewsLocation(
                country="United States", city="Local City",
                coordinate=Coordinate(37.8, -122.3),
            ),
        ),
        make_article(
            "New Treatment Shows Promise",
            "Medical research advances treatment options.",
            category="health", hours_old=30, source_id="news-central",
        ),
        make_article(
            "Space Mission Discovers Exoplanet",
            "Scientific discoveries expand understanding.",
            category="science", hours_old=50, source_id="news-central",
        ),
    ]
