"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_UPSTREAM_BASE_URL = "https://test.teaching-me.org/users/v1/open"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class UpstreamSettings:
    """
    Connection settings shared by every client of the marketplace API.
    """

    base_url: str = DEFAULT_UPSTREAM_BASE_URL
    accept_language: str = "en"
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class PriceAveragingSettings:
    """
    Runtime settings for the average price pipeline.
    """

    page_size: int = 10
    max_pages: int = 1000
    max_concurrent_pipelines: int = 8


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Periodic recomputation settings.
    """

    enabled: bool = False
    interval_minutes: int = 60


@lru_cache(maxsize=1)
def get_upstream_settings() -> UpstreamSettings:
    """
    Return cached upstream API settings from environment variables.
    """

    return UpstreamSettings(
        base_url=_get_str_env("UPSTREAM_BASE_URL", DEFAULT_UPSTREAM_BASE_URL).rstrip("/"),
        accept_language=_get_str_env("UPSTREAM_ACCEPT_LANGUAGE", "en"),
        timeout_seconds=max(1.0, _get_float_env("UPSTREAM_HTTP_TIMEOUT_SECONDS", 15.0)),
    )


@lru_cache(maxsize=1)
def get_price_averaging_settings() -> PriceAveragingSettings:
    """
    Return cached pipeline settings from environment variables.
    """

    return PriceAveragingSettings(
        page_size=max(1, _get_int_env("PRICE_AVERAGING_PAGE_SIZE", 10)),
        max_pages=max(1, _get_int_env("PRICE_AVERAGING_MAX_PAGES", 1000)),
        max_concurrent_pipelines=max(1, _get_int_env("PRICE_AVERAGING_MAX_CONCURRENCY", 8)),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return cached scheduler settings from environment variables.
    """

    return SchedulerSettings(
        enabled=_get_bool_env("PRICE_AVERAGING_SCHEDULE_ENABLED", False),
        interval_minutes=max(1, _get_int_env("PRICE_AVERAGING_SCHEDULE_MINUTES", 60)),
    )
