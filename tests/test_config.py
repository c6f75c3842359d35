"""Tests for config loading and getters."""

from __future__ import annotations

import pytest

from newsease.analyze.trending import TrendingEngine
from newsease.config import (
    get_cache_expiry_seconds,
    get_db_path,
    get_display_limits,
    get_history_limit,
    get_location_config,
    get_source_config,
    get_trending_config,
    get_weekly_goal,
    load_config,
)


def test_load_sample_config(sample_config):
    """Getters read the values written to the test config."""
    assert get_source_config(sample_config) == {
        "type": "mock", "delay_seconds": 0.0, "seed": 42,
    }
    assert get_cache_expiry_seconds(sample_config) == 1800
    assert get_history_limit(sample_config) == 10
    assert get_db_path(sample_config).endswith("test.db")


def test_missing_file_raises(tmp_path):
    """An explicit config path must exist."""
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_empty_file_gives_defaults(tmp_path):
    """An empty YAML file is a valid config."""
    path = tmp_path / "config.yaml"
    path.write_text("")
    config = load_config(str(path))
    assert config == {}
    assert get_db_path(config) == "data/newsease.db"
    assert get_display_limits(config) == {
        "feed": 20, "preview": 10, "hot": 10, "breaking": 5,
    }
    assert get_trending_config(config)["topic_score_base"] == 100.0
    assert get_weekly_goal(config) == 50
    assert get_location_config(config)["status"] == "not_determined"


def test_env_var_substitution(tmp_path, monkeypatch):
    """Whole-value and embedded ${VAR} references are resolved."""
    monkeypatch.setenv("NEWSEASE_TEST_DB", "/tmp/from-env.db")
    monkeypatch.setenv("NEWSEASE_TEST_CITY", "Oakland")
    path = tmp_path / "config.yaml"
    path.write_text(
        'database:\n  path: "${NEWSEASE_TEST_DB}"\n'
        'location:\n  address: "${NEWSEASE_TEST_CITY}, CA"\n'
    )
    config = load_config(str(path))
    assert get_db_path(config) == "/tmp/from-env.db"
    assert get_location_config(config)["address"] == "Oakland, CA"


def test_unset_env_var_falls_back(tmp_path, monkeypatch):
    """An unset variable resolves to empty, so the default applies."""
    monkeypatch.delenv("NEWSEASE_TEST_UNSET", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text('database:\n  path: "${NEWSEASE_TEST_UNSET}"\n')
    assert get_db_path(load_config(str(path))) == "data/newsease.db"


def test_extra_stop_words_lowercased():
    config = {"trending": {"extra_stop_words": ["Breaking", "NEWS"]}}
    assert get_trending_config(config)["extra_stop_words"] == ["breaking", "news"]


def test_location_config(sample_config):
    """Location section is parsed into floats and an address."""
    cfg = get_location_config(sample_config)
    assert cfg["status"] == "authorized"
    assert cfg["latitude"] == pytest.approx(37.7749)
    assert cfg["address"] == "San Francisco, CA"


def test_empty_values_use_defaults(tmp_path):
    """Keys present with no value behave like missing keys."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "source:\n  delay_seconds:\n  seed:\n"
        "trending:\n  topic_limit:\n  extra_stop_words:\n"
        "display:\n  feed_limit:\n"
        "cache:\n  expiry_minutes:\n"
        "stats:\n  weekly_goal:\n"
        "location:\n  status:\n  latitude:\n"
        "database:\n  path:\n"
    )
    config = load_config(str(path))
    assert get_source_config(config) == {
        "type": "mock", "delay_seconds": 0.5, "seed": None,
    }
    assert get_trending_config(config) == {
        "topic_limit": 10, "topic_score_base": 100.0, "extra_stop_words": [],
    }
    assert get_display_limits(config)["feed"] == 20
    assert get_cache_expiry_seconds(config) == 1800
    assert get_weekly_goal(config) == 50
    assert get_location_config(config)["status"] == "not_determined"
    assert get_location_config(config)["latitude"] is None
    assert get_db_path(config) == "data/newsease.db"


def test_empty_stop_words_build_engine():
    """An empty stop-word entry does not break engine construction."""
    engine = TrendingEngine.from_config({"trending": {"extra_stop_words": None}})
    assert engine.topic_limit == 10


def test_zero_values_are_kept():
    """Zero is a real setting, not a missing one."""
    config = {"source": {"delay_seconds": 0}, "stats": {"weekly_goal": 0}}
    assert get_source_config(config)["delay_seconds"] == 0.0
    assert get_weekly_goal(config) == 0
