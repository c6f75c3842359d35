"""Reading statistics: counters, daily tally and reading streak."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from newsease.models import ReadingStats


def local_date(dt: datetime) -> date:
    """Calendar date of ``dt`` on the user's clock.

    Aware datetimes are converted to local time first; naive ones are taken
    as local wall-clock time already.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.date()


def record_read(
    stats: ReadingStats, category: str, now: datetime | None = None,
) -> ReadingStats:
    """Count one read. Every call counts, repeat reads included.

    ``now`` defaults to aware UTC like every other timestamp here. The daily
    tally and streak compare local calendar dates, not 24-hour windows.
    """
    now = now or datetime.now(timezone.utc)
    stats.total_read += 1
    stats.category_counts[category] = stats.category_counts.get(category, 0) + 1

    last = stats.last_read_date
    if last is not None and local_date(last) == local_date(now):
        stats.articles_read_today += 1
    else:
        stats.articles_read_today = 1
        stats.current_streak = next_streak(stats, now)

    stats.last_read_date = now
    return stats


def next_streak(stats: ReadingStats, now: datetime) -> int:
    """Streak value for the first read on ``now``'s calendar day."""
    last = stats.last_read_date
    yesterday = local_date(now) - timedelta(days=1)
    if last is not None and local_date(last) == yesterday:
        return stats.current_streak + 1
    return 1


def weekly_progress(stats: ReadingStats) -> float:
    if stats.weekly_goal <= 0:
        return 1.0
    return min(stats.articles_read_today / stats.weekly_goal, 1.0)


def top_category(stats: ReadingStats) -> str:
    if not stats.category_counts:
        return "general"
    return max(stats.category_counts.items(), key=lambda kv: kv[1])[0]


def add_reading_time(stats: ReadingStats, seconds: float) -> ReadingStats:
    if seconds > 0:
        stats.time_spent_reading += seconds
    return stats
