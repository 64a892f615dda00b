"""Application configuration helpers."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Tuple

from dotenv import load_dotenv

from maps_scraper.core.place_extractor import ListingSelectors
from maps_scraper.core.site_enricher import ContactPatterns

logger = logging.getLogger(__name__)

DEFAULT_NAVIGATION_TIMEOUT_MS = 30000
DEFAULT_NETWORK_IDLE_TIMEOUT_MS = 60000
DEFAULT_RETRY_LIMIT = 3


class ConfigError(RuntimeError):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True)
class ExtractionConfig:
    """Selectors and patterns handed to the page extractors."""

    listing_selectors: ListingSelectors = field(default_factory=ListingSelectors)
    contact_patterns: ContactPatterns = field(default_factory=ContactPatterns)


@dataclass(frozen=True)
class Settings:
    headless: bool = True
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    network_idle_timeout_ms: int = DEFAULT_NETWORK_IDLE_TIMEOUT_MS
    retry_limit: int = DEFAULT_RETRY_LIMIT
    # None follows navigation_timeout_ms / network_idle_timeout_ms.
    retry_min_backoff_ms: Optional[int] = None
    retry_max_backoff_ms: Optional[int] = None
    retry_backoff_factor: float = 2.0
    human_delay_range: Tuple[float, float] = (1.0, 2.0)
    scroll_pause_s: float = 1.5
    scroll_stall_pause_s: float = 3.0
    max_scroll_attempts: int = 10
    screenshot_dir: str = "debug_screenshots"
    output_dir: str = "scraper-output"
    log_file: Optional[str] = "scraper.log"
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)

    def __post_init__(self) -> None:
        if self.retry_min_backoff_ms is None:
            object.__setattr__(self, "retry_min_backoff_ms", self.navigation_timeout_ms)
        if self.retry_max_backoff_ms is None:
            object.__setattr__(self, "retry_max_backoff_ms", self.network_idle_timeout_ms)


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    headless = os.getenv("SCRAPER_HEADLESS", "true").lower() in {"1", "true", "yes"}
    navigation_timeout_ms = _get_int_env("SCRAPER_NAVIGATION_TIMEOUT_MS", DEFAULT_NAVIGATION_TIMEOUT_MS)
    network_idle_timeout_ms = _get_int_env("SCRAPER_NETWORK_IDLE_TIMEOUT_MS", DEFAULT_NETWORK_IDLE_TIMEOUT_MS)
    retry_limit = _get_int_env("SCRAPER_RETRY_LIMIT", DEFAULT_RETRY_LIMIT)
    retry_min_backoff_ms = _get_int_env("SCRAPER_RETRY_MIN_BACKOFF_MS", navigation_timeout_ms)
    retry_max_backoff_ms = _get_int_env("SCRAPER_RETRY_MAX_BACKOFF_MS", network_idle_timeout_ms)
    screenshot_dir = os.getenv("SCRAPER_SCREENSHOT_DIR") or "debug_screenshots"
    output_dir = os.getenv("SCRAPER_OUTPUT_DIR") or "scraper-output"
    log_file = os.getenv("SCRAPER_LOG_FILE", "scraper.log").strip() or None

    if retry_max_backoff_ms < retry_min_backoff_ms:
        logger.warning(
            "SCRAPER_RETRY_MAX_BACKOFF_MS (%s) is below the minimum backoff (%s); using the minimum.",
            retry_max_backoff_ms,
            retry_min_backoff_ms,
        )
        retry_max_backoff_ms = retry_min_backoff_ms

    return Settings(
        headless=headless,
        navigation_timeout_ms=navigation_timeout_ms,
        network_idle_timeout_ms=network_idle_timeout_ms,
        retry_limit=retry_limit,
        retry_min_backoff_ms=retry_min_backoff_ms,
        retry_max_backoff_ms=retry_max_backoff_ms,
        screenshot_dir=screenshot_dir,
        output_dir=output_dir,
        log_file=log_file,
    )
