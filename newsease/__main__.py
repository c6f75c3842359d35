"""CLI entrypoint: python -m newsease {init-db|refresh|feed|trending|search|...}."""

from __future__ import annotations

import argparse
import asyncio
import inspect
import logging
import logging.handlers
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from newsease.config import get_db_path, load_config
from newsease.db import SQLiteStore, init_db
from newsease.location import StaticLocationProvider
from newsease.models import CATEGORIES
from newsease.report import format_feed, format_stats, format_trending
from newsease.scheduler import AutoRefresher
from newsease.session import FeedSession


def setup_logging(config: dict, verbose: bool = False) -> None:
    """Configure logging with console + rotating file output."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler; stderr so command output stays clean
    console = logging.StreamHandler()
    console.setFormatter(fmt)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.addHandler(console)

    # File handler (rotate at 5MB, keep 3 backups)
    log_dir = Path(get_db_path(config)).parent
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        str(log_dir / "newsease.log"), maxBytes=5 * 1024 * 1024, backupCount=3,
    )
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)


logger = logging.getLogger("newsease")


def _config_from_env() -> dict:
    """CONFIG_PATH must exist if set; a missing default config.yaml means defaults."""
    path = os.environ.get("CONFIG_PATH")
    if path:
        return load_config(path)
    if Path("config.yaml").exists():
        return load_config("config.yaml")
    return {}


@contextmanager
def _open_session(config: dict) -> Iterator[FeedSession]:
    """Session over the SQLite store; the connection is closed on exit."""
    store = SQLiteStore(get_db_path(config))
    try:
        yield FeedSession(
            config, store, location_provider=StaticLocationProvider.from_config(config),
        )
    finally:
        store.close()


def _report_error(session: FeedSession) -> None:
    if session.error_message:
        print(f"! {session.error_message}", file=sys.stderr)


def cmd_init_db(config: dict, args) -> None:
    """Initialize the SQLite database."""
    db_path = get_db_path(config)
    init_db(db_path)
    print(f"Database initialized at {db_path}")


async def cmd_refresh(config: dict, args) -> None:
    with _open_session(config) as session:
        await session.refresh()
        _report_error(session)
        print(format_feed(session.visible))


async def cmd_feed(config: dict, args) -> None:
    with _open_session(config) as session:
        await session.load_initial()
        _report_error(session)

        if args.category:
            session.select_category(args.category)
        if args.search:
            session.set_search_text(args.search)
        if args.bookmarks:
            session.toggle_bookmarks_filter()
        if args.local:
            articles, title = session.local(), "LOCAL NEWS"
        else:
            articles, title = session.visible, "NEWS FEED"
        if args.limit is not None:
            articles = articles[: args.limit]
        print(format_feed(articles, title=title))


async def cmd_trending(config: dict, args) -> None:
    with _open_session(config) as session:
        await session.load_initial()
        _report_error(session)
        print(format_trending(session.trending))


async def cmd_search(config: dict, args) -> None:
    with _open_session(config) as session:
        if args.category:
            session.select_category(args.category)
        results = await session.search(" ".join(args.query))
        _report_error(session)
        print(format_feed(results, title=f"SEARCH: {session.query.search_text}"))


async def cmd_headlines(config: dict, args) -> None:
    with _open_session(config) as session:
        if args.category:
            session.select_category(args.category)
        await session.top_headlines()
        _report_error(session)
        print(format_feed(session.visible, title="TOP HEADLINES"))


async def cmd_bookmark(config: dict, args) -> None:
    with _open_session(config) as session:
        await session.load_initial()
        state = session.toggle_bookmark(args.article_id)
    print(f"{args.article_id}: {'bookmarked' if state else 'bookmark removed'}")


async def cmd_read(config: dict, args) -> None:
    with _open_session(config) as session:
        await session.load_initial()
        try:
            session.mark_as_read(args.article_id)
        except KeyError:
            print(f"Unknown article: {args.article_id}")
            sys.exit(1)
        total = session.stats.total_read
    print(f"{args.article_id}: marked as read ({total} total)")


def cmd_block(config: dict, args) -> None:
    with _open_session(config) as session:
        session.block_source(args.source_id)
    print(f"Blocked source {args.source_id}")


def cmd_unblock(config: dict, args) -> None:
    with _open_session(config) as session:
        session.unblock_source(args.source_id)
    print(f"Unblocked source {args.source_id}")


def cmd_stats(config: dict, args) -> None:
    with _open_session(config) as session:
        print(format_stats(session.stats))


def cmd_history(config: dict, args) -> None:
    with _open_session(config) as session:
        if args.clear:
            session.clear_search_history()
            print("Search history cleared")
            return
        entries = list(session.history.entries)
    if not entries:
        print("No searches yet.")
        return
    for i, query in enumerate(entries, 1):
        print(f"{i:>2}. {query}")


async def cmd_watch(config: dict, args) -> None:
    """Keep refreshing on the configured interval until interrupted."""
    with _open_session(config) as session:
        await session.load_initial()
        print(format_trending(session.trending))

        interval = args.interval or session.refresh_interval_seconds
        if not interval:
            print("Refresh interval is 'manual'; nothing to watch.")
            return

        async def _refresh_and_print() -> None:
            await session.refresh()
            _report_error(session)
            print()
            print(format_trending(session.trending))

        refresher = AutoRefresher(_refresh_and_print, interval)
        refresher.start()
        try:
            while refresher.running:
                await asyncio.sleep(1)
        finally:
            await refresher.stop()


COMMANDS = {
    "init-db": cmd_init_db,
    "refresh": cmd_refresh,
    "feed": cmd_feed,
    "trending": cmd_trending,
    "search": cmd_search,
    "headlines": cmd_headlines,
    "bookmark": cmd_bookmark,
    "read": cmd_read,
    "block": cmd_block,
    "unblock": cmd_unblock,
    "stats": cmd_stats,
    "history": cmd_history,
    "watch": cmd_watch,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m newsease")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create the database")
    sub.add_parser("refresh", help="fetch a fresh feed")

    feed = sub.add_parser("feed", help="show the feed (cached if fresh)")
    feed.add_argument("--category", choices=CATEGORIES)
    feed.add_argument("--search")
    feed.add_argument("--bookmarks", action="store_true")
    feed.add_argument("--local", action="store_true")
    feed.add_argument("--limit", type=int)

    sub.add_parser("trending", help="show trending topics, hot and breaking")

    search = sub.add_parser("search", help="search for articles")
    search.add_argument("query", nargs="+")
    search.add_argument("--category", choices=CATEGORIES)

    headlines = sub.add_parser("headlines", help="show top headlines")
    headlines.add_argument("--category", choices=CATEGORIES)

    bookmark = sub.add_parser("bookmark", help="toggle a bookmark")
    bookmark.add_argument("article_id")

    read = sub.add_parser("read", help="mark an article as read")
    read.add_argument("article_id")

    block = sub.add_parser("block", help="hide a source")
    block.add_argument("source_id")
    unblock = sub.add_parser("unblock", help="show a hidden source again")
    unblock.add_argument("source_id")

    sub.add_parser("stats", help="show reading stats")

    history = sub.add_parser("history", help="show recent searches")
    history.add_argument("--clear", action="store_true")

    watch = sub.add_parser("watch", help="auto-refresh and print trending")
    watch.add_argument("--interval", type=float, help="seconds between refreshes")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    config = _config_from_env()
    setup_logging(config, verbose=args.verbose)
    handler = COMMANDS[args.command]

    try:
        if inspect.iscoroutinefunction(handler):
            asyncio.run(handler(config, args))
        else:
            handler(config, args)
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
