"""Tests for the feed session."""

from __future__ import annotations

import pytest

from newsease.ingest.base import BaseSource
from newsease.location import DENIED, ERROR_MESSAGES, StaticLocationProvider
from newsease.models import Coordinate
from newsease.persistence import PreferencesManager
from newsease.session import FeedSession

SF = Coordinate(37.7749, -122.4194)


class FakeSource(BaseSource):
    """Returns canned articles and records what it was asked for."""

    def __init__(self, articles=None, fail: bool = False):
        super().__init__({})
        self.articles = articles or []
        self.fail = fail
        self.calls = []

    @property
    def name(self) -> str:
        return "fake"

    async def fetch(self, categories, location=None, country="us", language="en"):
        self.calls.append(("fetch", set(categories), location))
        if self.fail:
            raise RuntimeError("upstream unavailable")
        return list(self.articles)

    async def search(self, query, categories):
        self.calls.append(("search", query, set(categories)))
        if self.fail:
            raise RuntimeError("upstream unavailable")
        return list(self.articles)

    async def top_headlines(self, country="us", category=None):
        self.calls.append(("headlines", country, category))
        return list(self.articles)


def _session(config, store, source, status="authorized"):
    provider = StaticLocationProvider(status, SF, "San Francisco, CA")
    return FeedSession(config, store, source=source, location_provider=provider)


@pytest.mark.asyncio
async def test_refresh_loads_scores_and_caches(sample_config, memory_store, sample_articles):
    """Refresh fetches with the location, scores and caches the feed."""
    source = FakeSource(sample_articles)
    session = _session(sample_config, memory_store, source)
    await session.refresh()

    assert session.error_message is None
    assert session.total_count == len(sample_articles)
    assert session.visible[0].id == sample_articles[0].id
    assert session.trending.topics[0].keyword == "quantum"
    assert session.refreshed_at is not None
    assert session.cache.get_cached_articles()
    assert source.calls == [("fetch", set(session.preferences.selected_categories), SF)]


@pytest.mark.asyncio
async def test_refresh_without_location_permission(sample_config, memory_store, sample_articles):
    """Denied location still loads the feed and reports why."""
    source = FakeSource(sample_articles)
    session = _session(sample_config, memory_store, source, status=DENIED)
    await session.refresh()

    assert source.calls[0][2] is None
    assert session.error_message == ERROR_MESSAGES[DENIED]
    assert session.total_count == len(sample_articles)


@pytest.mark.asyncio
async def test_location_news_disabled(sample_config, memory_store, sample_articles):
    """Location-based news off means no location and no error."""
    source = FakeSource(sample_articles)
    session = _session(sample_config, memory_store, source, status=DENIED)
    session.preferences.location_based_news = False
    await session.refresh()

    assert source.calls[0][2] is None
    assert session.error_message is None


@pytest.mark.asyncio
async def test_source_failure_keeps_previous_articles(sample_config, memory_store, sample_articles):
    """A failing source leaves the previous feed in place."""
    source = FakeSource(sample_articles)
    session = _session(sample_config, memory_store, source)
    await session.refresh()

    source.fail = True
    await session.refresh()

    assert session.error_message == "Failed to load articles (refresh)"
    assert session.total_count == len(sample_articles)
    assert session.is_loading is False
    assert session.can_refresh


@pytest.mark.asyncio
async def test_load_initial_prefers_fresh_cache(sample_config, memory_store, sample_articles):
    """A fresh cache is used without touching the source."""
    await _session(sample_config, memory_store, FakeSource(sample_articles)).refresh()

    failing = FakeSource(fail=True)
    session = _session(sample_config, memory_store, failing)
    await session.load_initial()

    assert failing.calls == []
    assert session.error_message is None
    assert [a.id for a in session.articles] == [a.id for a in sample_articles]


@pytest.mark.asyncio
async def test_load_initial_fetches_without_cache(sample_config, memory_store, sample_articles):
    """Without a cache the first load fetches."""
    source = FakeSource(sample_articles)
    session = _session(sample_config, memory_store, source)
    await session.load_initial()
    assert len(source.calls) == 1
    assert session.total_count == len(sample_articles)


@pytest.mark.asyncio
async def test_toggle_bookmark_twice_restores(sample_config, memory_store, sample_articles):
    """Toggling twice restores the original bookmark state."""
    session = _session(sample_config, memory_store, FakeSource(sample_articles))
    await session.refresh()
    article_id = sample_articles[2].id

    assert session.toggle_bookmark(article_id) is True
    assert session.articles.get(article_id).is_bookmarked
    assert article_id in PreferencesManager(memory_store).preferences.bookmarked_articles

    assert session.toggle_bookmark(article_id) is False
    assert not session.articles.get(article_id).is_bookmarked
    assert session.preferences.bookmarked_articles == set()


@pytest.mark.asyncio
async def test_bookmark_flags_survive_refresh(sample_config, memory_store, sample_articles):
    """Refetched articles pick up saved bookmark flags."""
    session = _session(sample_config, memory_store, FakeSource(sample_articles))
    await session.refresh()
    session.toggle_bookmark(sample_articles[0].id)
    await session.refresh()

    assert session.articles.get(sample_articles[0].id).is_bookmarked
    assert session.bookmarked_count == 1


@pytest.mark.asyncio
async def test_mark_as_read_counts_every_call(sample_config, memory_store, sample_articles, now):
    """Reads always count in stats; the read set only grows."""
    session = _session(sample_config, memory_store, FakeSource(sample_articles))
    await session.refresh()
    article = sample_articles[0]

    session.mark_as_read(article.id, now=now)
    session.mark_as_read(article.id, now=now)

    assert session.articles.get(article.id).is_read
    assert session.preferences.read_articles == {article.id}
    assert session.stats.total_read == 2
    assert session.stats.category_counts == {"technology": 2}
    assert session.unread_count == len(sample_articles) - 1

    reopened = _session(sample_config, memory_store, FakeSource())
    assert reopened.stats.total_read == 2


@pytest.mark.asyncio
async def test_mark_unknown_article_raises(sample_config, memory_store):
    """Unknown ids raise and leave the stats alone."""
    session = _session(sample_config, memory_store, FakeSource())
    with pytest.raises(KeyError):
        session.mark_as_read("missing")
    assert session.stats.total_read == 0


@pytest.mark.asyncio
async def test_feed_capped_but_bookmarks_are_not(sample_config, memory_store, make_article):
    """The feed is capped, bookmarks-only mode is not."""
    articles = [make_article(f"Story number {i}") for i in range(25)]
    session = _session(sample_config, memory_store, FakeSource(articles))
    await session.refresh()
    assert session.filtered_count == 20
    assert len(session.preview()) == 10

    for article in articles[:22]:
        session.toggle_bookmark(article.id)
    session.toggle_bookmarks_filter()
    assert session.filtered_count == 22


@pytest.mark.asyncio
async def test_category_and_search_filters(sample_config, memory_store, sample_articles):
    """Category and search filters stack and can be cleared."""
    session = _session(sample_config, memory_store, FakeSource(sample_articles))
    await session.refresh()

    assert [a.category for a in session.select_category("business")] == ["business"]
    assert session.set_search_text("championship") == []
    session.select_category(None)
    assert len(session.visible) == 1

    with pytest.raises(ValueError):
        session.select_category("weather")


@pytest.mark.asyncio
async def test_block_source_hides_articles(sample_config, memory_store, sample_articles):
    """Blocking hides a source until it is unblocked."""
    session = _session(sample_config, memory_store, FakeSource(sample_articles))
    await session.refresh()

    session.block_source("news-central")
    assert all(a.source.id != "news-central" for a in session.visible)
    session.unblock_source("news-central")
    assert session.filtered_count == len(sample_articles)


@pytest.mark.asyncio
async def test_blank_search_does_not_hit_source(sample_config, memory_store, sample_articles):
    """A blank search only reapplies local filters."""
    source = FakeSource(sample_articles)
    session = _session(sample_config, memory_store, source)
    await session.search("   ")
    assert source.calls == []
    assert session.history.entries == []


@pytest.mark.asyncio
async def test_search_records_history(sample_config, memory_store, sample_articles):
    """Search trims the query, scopes categories and records history."""
    source = FakeSource(sample_articles)
    session = _session(sample_config, memory_store, source)
    session.select_category("technology")
    results = await session.search(" quantum ")

    assert source.calls == [("search", "quantum", {"technology"})]
    assert session.history.entries == ["quantum"]
    assert [a.category for a in results] == ["technology"]
    assert session.cache.get_cached_articles() == []


@pytest.mark.asyncio
async def test_failed_search_sets_error(sample_config, memory_store):
    """A failing search sets the error message."""
    session = _session(sample_config, memory_store, FakeSource(fail=True))
    await session.search("quantum")
    assert session.error_message == "Failed to load articles (search)"


@pytest.mark.asyncio
async def test_top_headlines_uses_selected_category(sample_config, memory_store, sample_articles):
    """Headlines are requested for the selected category."""
    source = FakeSource(sample_articles)
    session = _session(sample_config, memory_store, source)
    session.select_category("sports")
    await session.top_headlines()
    assert source.calls == [("headlines", "us", "sports")]


@pytest.mark.asyncio
async def test_share_text_and_status(sample_config, memory_store, sample_articles):
    """Share text and status message follow the loaded feed."""
    session = _session(sample_config, memory_store, FakeSource(sample_articles))
    assert session.status_message == "No articles available"
    await session.refresh()

    article = sample_articles[1]
    assert session.share_text(article.id) == (
        f"{article.title}\n\n{article.description}\n\nRead more: {article.url}"
    )
    assert session.status_message == f"{len(sample_articles)} articles"
    assert session.local_count == 1
    assert session.refresh_interval_seconds == 1800


def test_record_reading_time_persists(sample_config, memory_store):
    """Reading time accumulates and is saved."""
    session = _session(sample_config, memory_store, FakeSource())
    session.record_reading_time(120)
    session.record_reading_time(-5)
    assert session.stats.time_spent_reading == 120
    assert _session(sample_config, memory_store, FakeSource()).stats.time_spent_reading == 120
