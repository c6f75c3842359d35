"""Trending analysis: keyword extraction and article scoring."""

from __future__ import annotations

from newsease.analyze.keywords import extract_keywords  # noqa: F401
from newsease.analyze.trending import TrendingEngine  # noqa: F401
