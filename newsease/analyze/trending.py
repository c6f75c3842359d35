"""Trending engine: topic ranking and per-article popularity scores.

A pass is a pure function of the article collection and the evaluation
time. Nothing carries over between passes, so each call returns a fresh
``TrendingReport`` and leaves its input articles untouched.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from newsease.analyze.keywords import (
    STOP_WORDS,
    category_for_keyword,
    extract_keywords,
)
from newsease.models import Article, TrendingReport, TrendingTopic

logger = logging.getLogger(__name__)

TOPIC_LIMIT = 10
TOPIC_SCORE_BASE = 100.0
TOPIC_SCORE_CAP = 10.0

KEYWORD_WEIGHT = 0.1

# (max age in hours, bonus), first match wins
RECENCY_BONUSES = ((1.0, 3.0), (6.0, 2.0), (24.0, 1.0))

HOT_THRESHOLD = 7.0
TRENDING_THRESHOLD = 5.0
BREAKING_THRESHOLD = 6.0
BREAKING_MAX_AGE_HOURS = 2.0

HOT_LIMIT = 10
BREAKING_LIMIT = 5


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def age_hours(published_at: datetime, now: datetime) -> float:
    return (_as_utc(now) - _as_utc(published_at)).total_seconds() / 3600


def recency_bonus(hours_old: float) -> float:
    for max_age, bonus in RECENCY_BONUSES:
        if hours_old < max_age:
            return bonus
    return 0.0


def topic_score(count: int, score_base: float = TOPIC_SCORE_BASE) -> float:
    """Score a keyword count on a 0-10 scale, proportional to ``count``."""
    if score_base <= 0:
        return TOPIC_SCORE_CAP if count > 0 else 0.0
    return min(count / score_base * 100, TOPIC_SCORE_CAP)


def generate_trending_topics(
    keyword_counts: dict[str, int],
    limit: int = TOPIC_LIMIT,
    score_base: float = TOPIC_SCORE_BASE,
) -> list[TrendingTopic]:
    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(keyword_counts.items(), key=lambda kv: kv[1], reverse=True)
    return [
        TrendingTopic(
            keyword=keyword,
            count=count,
            trending_score=topic_score(count, score_base),
            category=category_for_keyword(keyword),
        )
        for keyword, count in ranked[:limit]
    ]


def article_score(
    article: Article, keyword_counts: dict[str, int], now: datetime,
) -> float:
    text = article.text
    score = 0.0
    for keyword, count in keyword_counts.items():
        if keyword in text:
            score += count * KEYWORD_WEIGHT
    return score + recency_bonus(age_hours(article.published_at, now))


def assign_trending_scores(
    articles: list[Article],
    keyword_counts: dict[str, int],
    now: datetime | None = None,
) -> list[Article]:
    """Return scored copies of ``articles`` with hot/trending/breaking set."""
    now = now or datetime.now(timezone.utc)
    scored = []
    for article in articles:
        score = article_score(article, keyword_counts, now)
        hours_old = age_hours(article.published_at, now)
        scored.append(replace(
            article,
            trending_score=score,
            is_hot=score > HOT_THRESHOLD,
            is_trending=score > TRENDING_THRESHOLD,
            is_breaking=(
                hours_old < BREAKING_MAX_AGE_HOURS and score > BREAKING_THRESHOLD
            ),
        ))
    return scored


def hot_articles(articles: list[Article], limit: int = HOT_LIMIT) -> list[Article]:
    hot = [a for a in articles if a.is_hot]
    hot.sort(key=lambda a: a.trending_score, reverse=True)
    return hot[:limit]


def breaking_news(
    articles: list[Article], limit: int = BREAKING_LIMIT,
) -> list[Article]:
    breaking = [a for a in articles if a.is_breaking]
    breaking.sort(key=lambda a: _as_utc(a.published_at), reverse=True)
    return breaking[:limit]


class TrendingEngine:
    """Run full trending passes with configurable limits and stop words."""

    def __init__(
        self,
        topic_limit: int = TOPIC_LIMIT,
        topic_score_base: float = TOPIC_SCORE_BASE,
        extra_stop_words: list[str] | None = None,
        hot_limit: int = HOT_LIMIT,
        breaking_limit: int = BREAKING_LIMIT,
    ):
        self.topic_limit = topic_limit
        self.topic_score_base = topic_score_base
        self.stop_words = STOP_WORDS | frozenset(extra_stop_words or [])
        self.hot_limit = hot_limit
        self.breaking_limit = breaking_limit

    @classmethod
    def from_config(cls, config: dict) -> TrendingEngine:
        from newsease.config import get_display_limits, get_trending_config

        cfg = get_trending_config(config)
        limits = get_display_limits(config)
        return cls(
            topic_limit=cfg["topic_limit"],
            topic_score_base=cfg["topic_score_base"],
            extra_stop_words=cfg["extra_stop_words"],
            hot_limit=limits["hot"],
            breaking_limit=limits["breaking"],
        )

    def analyze(
        self, articles: list[Article], now: datetime | None = None,
    ) -> TrendingReport:
        now = now or datetime.now(timezone.utc)
        if not articles:
            return TrendingReport(analyzed_at=now)

        counts = extract_keywords(articles, self.stop_words)
        topics = generate_trending_topics(
            counts, self.topic_limit, self.topic_score_base,
        )
        scored = assign_trending_scores(articles, counts, now)
        report = TrendingReport(
            keyword_counts=counts,
            topics=topics,
            articles=scored,
            hot=hot_articles(scored, self.hot_limit),
            breaking=breaking_news(scored, self.breaking_limit),
            analyzed_at=now,
        )
        logger.info(
            "Trending pass: %d articles, %d keywords, %d hot, %d breaking",
            len(articles), len(counts), len(report.hot), len(report.breaking),
        )
        return report
