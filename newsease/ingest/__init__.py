"""Article source registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from newsease.ingest.base import BaseSource

SOURCES: dict[str, type[BaseSource]] = {}


def register_source(name: str):
    """Decorator to register an article source."""

    def decorator(cls):
        SOURCES[name] = cls
        return cls

    return decorator


def get_source(config: dict) -> BaseSource:
    """Instantiate the source named by ``source.type`` in config."""
    from newsease.config import get_source_config

    source_type = get_source_config(config)["type"]
    if source_type not in SOURCES:
        raise ValueError(f"Unknown article source: {source_type}")
    return SOURCES[source_type](config)


# Import implementations to trigger registration
from newsease.ingest.mock import MockSource  # noqa: E402, F401
