"""Abstract base class for article sources."""

from __future__ import annotations

from abc import ABC, abstractmethod

from newsease.models import Article, Coordinate


class BaseSource(ABC):
    """Base class for article suppliers."""

    def __init__(self, config: dict):
        self.config = config

    @abstractmethod
    async def fetch(
        self,
        categories: set[str],
        location: Coordinate | None = None,
        country: str = "us",
        language: str = "en",
    ) -> list[Article]:
        """Fetch the feed for the given categories, newest first."""
        ...

    @abstractmethod
    async def search(self, query: str, categories: set[str]) -> list[Article]:
        """Return articles matching ``query``."""
        ...

    @abstractmethod
    async def top_headlines(
        self, country: str = "us", category: str | None = None,
    ) -> list[Article]:
        """Return the day's top headlines."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name."""
        ...
