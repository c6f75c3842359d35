"""Load configuration from YAML with env var substitution, plus typed getters."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _load_dotenv(path: str | Path = ".env") -> None:
    """Load a .env file into os.environ (without overwriting existing vars)."""
    env_path = Path(path)
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            if key and key not in os.environ:
                os.environ[key] = value.strip().strip("'\"")


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        match = ENV_PATTERN.fullmatch(value)
        if match:
            return os.environ.get(match.group(1), "")
        return ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file and resolve environment variables."""
    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return _resolve_env_vars(raw)


def _section(config: dict, name: str) -> dict:
    return config.get(name) or {}


def _value(cfg: dict, key: str, default: Any) -> Any:
    """``cfg[key]``, or ``default`` when the key is missing or left empty."""
    value = cfg.get(key)
    if value is None or value == "":
        return default
    return value


def get_db_path(config: dict) -> str:
    """Get database path from config."""
    return _value(_section(config, "database"), "path", "data/newsease.db")


def get_source_config(config: dict) -> dict:
    """Article source type, simulated latency and RNG seed."""
    cfg = _section(config, "source")
    return {
        "type": _value(cfg, "type", "mock"),
        "delay_seconds": float(_value(cfg, "delay_seconds", 0.5)),
        "seed": _value(cfg, "seed", None),
    }


def get_trending_config(config: dict) -> dict:
    cfg = _section(config, "trending")
    return {
        "topic_limit": int(_value(cfg, "topic_limit", 10)),
        "topic_score_base": float(_value(cfg, "topic_score_base", 100)),
        "extra_stop_words": [
            str(w).lower() for w in _value(cfg, "extra_stop_words", [])
        ],
    }


def get_display_limits(config: dict) -> dict[str, int]:
    """Caps for the feed, compact previews and the hot/breaking subsets."""
    cfg = _section(config, "display")
    return {
        "feed": int(_value(cfg, "feed_limit", 20)),
        "preview": int(_value(cfg, "preview_limit", 10)),
        "hot": int(_value(cfg, "hot_limit", 10)),
        "breaking": int(_value(cfg, "breaking_limit", 5)),
    }


def get_cache_expiry_seconds(config: dict) -> float:
    return float(_value(_section(config, "cache"), "expiry_minutes", 30)) * 60


def get_history_limit(config: dict) -> int:
    return int(_value(_section(config, "history"), "max_entries", 10))


def get_weekly_goal(config: dict) -> int:
    return int(_value(_section(config, "stats"), "weekly_goal", 50))


def get_location_config(config: dict) -> dict:
    """Static location fix used in place of a device location service."""
    cfg = _section(config, "location")
    lat = _value(cfg, "latitude", None)
    lon = _value(cfg, "longitude", None)
    return {
        "status": _value(cfg, "status", "not_determined"),
        "latitude": float(lat) if lat is not None else None,
        "longitude": float(lon) if lon is not None else None,
        "address": _value(cfg, "address", None),
    }
