"""Plain-text rendering of feeds, trending topics and reading stats."""

from __future__ import annotations

from datetime import datetime, timezone

from newsease.analyze.trending import age_hours
from newsease.models import CATEGORY_DISPLAY, Article, ReadingStats, TrendingReport
from newsease.stats import top_category, weekly_progress

RULE = "─" * 40

HOT_MARK = "\U0001f525"
BREAKING_MARK = "⚡"
BOOKMARK_MARK = "★"
UNREAD_MARK = "•"


def time_ago(published_at: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    seconds = max(age_hours(published_at, now) * 3600, 0)
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    return f"{int(seconds // 86400)}d ago"


def format_article_line(article: Article, now: datetime | None = None) -> str:
    marks = ""
    if article.is_breaking:
        marks += BREAKING_MARK
    if article.is_hot:
        marks += HOT_MARK
    if article.is_bookmarked:
        marks += BOOKMARK_MARK
    if not article.is_read:
        marks += UNREAD_MARK
    return (
        f"{marks:<3} {article.title}\n"
        f"    {article.source.name} · {CATEGORY_DISPLAY[article.category]}"
        f" · {time_ago(article.published_at, now)}"
        f" · score {article.trending_score:.1f} · id {article.id}"
    )


def format_feed(
    articles: list[Article], title: str = "NEWS FEED", now: datetime | None = None,
) -> str:
    lines = [title, RULE]
    if not articles:
        lines.append("No articles available")
        return "\n".join(lines)
    for article in articles:
        lines.append(format_article_line(article, now))
    lines.append(RULE)
    lines.append(f"{len(articles)} articles")
    return "\n".join(lines)


def format_trending(report: TrendingReport, now: datetime | None = None) -> str:
    lines = ["TRENDING TOPICS", RULE]
    if not report.topics:
        lines.append("Nothing trending yet")
    for i, topic in enumerate(report.topics, 1):
        badge = f" {topic.emoji}" if topic.emoji else ""
        lines.append(
            f"{i:>2}. {topic.display_text}{badge} "
            f"({topic.count} mentions, score {topic.trending_score:.1f}, "
            f"{topic.category})"
        )

    if report.breaking:
        lines += ["", f"{BREAKING_MARK} BREAKING", RULE]
        lines += [format_article_line(a, now) for a in report.breaking]

    if report.hot:
        lines += ["", f"{HOT_MARK} HOT", RULE]
        lines += [format_article_line(a, now) for a in report.hot]

    return "\n".join(lines)


def format_stats(stats: ReadingStats) -> str:
    progress = weekly_progress(stats)
    lines = [
        "READING STATS",
        RULE,
        f"Total read:      {stats.total_read}",
        f"Read today:      {stats.articles_read_today}",
        f"Current streak:  {stats.current_streak} day(s)",
        f"Goal progress:   {progress:.0%} of {stats.weekly_goal}",
        f"Top category:    {top_category(stats)}",
        f"Time reading:    {int(stats.time_spent_reading // 60)} min",
    ]
    if stats.category_counts:
        lines.append("")
        for category, count in sorted(
            stats.category_counts.items(), key=lambda kv: kv[1], reverse=True,
        ):
            lines.append(f"  {category:<14} {count}")
    return "\n".join(lines)
