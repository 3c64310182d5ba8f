"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from app.domain.scraping import ScrapeOptions
from db.config import load_env_files


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
class ScrapingSettings:
    """
    Fetch and extraction settings for the page extractor.
    """

    user_agent: str = "WebScraper/1.0"
    timeout_seconds: float = 30.0
    max_redirects: int = 10
    max_links: int = 100
    max_images: int = 50
    extract_images: bool = True
    extract_favicon: bool = True
    extract_headers: bool = True
    favicon_timeout_seconds: float = 3.0

    def to_options(self) -> ScrapeOptions:
        return ScrapeOptions(
            timeout_seconds=self.timeout_seconds,
            user_agent=self.user_agent,
            max_redirects=self.max_redirects,
            max_links=self.max_links,
            max_images=self.max_images,
            extract_images=self.extract_images,
            extract_favicon=self.extract_favicon,
            extract_headers=self.extract_headers,
            favicon_timeout_seconds=self.favicon_timeout_seconds,
        )


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Cron driver and scheduled-execution settings.
    """

    timezone: str = "UTC"
    execution_timeout_seconds: float = 300.0
    max_workers: int = 10
    misfire_grace_seconds: int = 60
    autostart: bool = True


@lru_cache(maxsize=1)
def get_scraping_settings() -> ScrapingSettings:
    """
    Return cached extractor settings from environment variables.
    """

    return ScrapingSettings(
        user_agent=_get_str_env("SCRAPE_USER_AGENT", "WebScraper/1.0"),
        timeout_seconds=max(1.0, _get_float_env("SCRAPE_TIMEOUT_SECONDS", 30.0)),
        max_redirects=max(0, _get_int_env("SCRAPE_MAX_REDIRECTS", 10)),
        max_links=max(1, _get_int_env("SCRAPE_MAX_LINKS", 100)),
        max_images=max(1, _get_int_env("SCRAPE_MAX_IMAGES", 50)),
        extract_images=_get_bool_env("SCRAPE_EXTRACT_IMAGES", True),
        extract_favicon=_get_bool_env("SCRAPE_EXTRACT_FAVICON", True),
        extract_headers=_get_bool_env("SCRAPE_EXTRACT_HEADERS", True),
        favicon_timeout_seconds=max(0.5, _get_float_env("SCRAPE_FAVICON_TIMEOUT_SECONDS", 3.0)),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return cached scheduler settings from environment variables.

    The execution timeout always exceeds the fetch timeout so a scheduled run
    has room to parse and persist after a slow fetch.
    """

    fetch_timeout = get_scraping_settings().timeout_seconds
    execution_timeout = _get_float_env("SCHEDULER_EXECUTION_TIMEOUT_SECONDS", 300.0)
    return SchedulerSettings(
        timezone=_get_str_env("SCHEDULER_TIMEZONE", "UTC"),
        execution_timeout_seconds=max(fetch_timeout + 30.0, execution_timeout),
        max_workers=max(1, _get_int_env("SCHEDULER_MAX_WORKERS", 10)),
        misfire_grace_seconds=max(1, _get_int_env("SCHEDULER_MISFIRE_GRACE_SECONDS", 60)),
        autostart=_get_bool_env("SCHEDULER_AUTOSTART", True),
    )


def get_log_level() -> str:
    return _get_str_env("LOG_LEVEL", "INFO").upper()
