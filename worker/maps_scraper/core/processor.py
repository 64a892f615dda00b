"""Per-listing pipeline: navigate, extract, validate, enrich, with retries."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from bs4 import BeautifulSoup

from maps_scraper.core.browser import snapshot_page
from maps_scraper.core.config import Settings
from maps_scraper.core.place_extractor import extract_place
from maps_scraper.core.retry import ErrorKind, RetryPolicy, StructuralError, classify_error
from maps_scraper.core.site_enricher import extract_contacts
from maps_scraper.models import ContactDetails, SearchResult

logger = logging.getLogger(__name__)

# Comma selector: resolves as soon as either element is attached.
READY_SELECTOR = 'div[role="main"], body'


class ResultProcessor:
    """Scrape one listing page into a SearchResult.

    Transport failures and missing titles are retried according to the retry
    policy; anything else ends the listing immediately. Failures are logged and
    reported as ``None`` so a batch never sees per-link exceptions.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.retry_policy = retry_policy or RetryPolicy.from_settings(settings)
        self._sleep = sleep

    async def process(self, page: Any, link: str, want_email: bool, want_social: bool) -> Optional[SearchResult]:
        screenshot_taken = False

        async def attempt() -> SearchResult:
            nonlocal screenshot_taken
            try:
                return await self._scrape_listing(page, link, want_email, want_social)
            except StructuralError:
                if not screenshot_taken:
                    screenshot_taken = True
                    await self._capture_screenshot(page)
                raise

        def on_retry(exc: BaseException, attempt_number: int, retries_left: int) -> None:
            logger.warning(
                "Retrying link %s due to error: %s. Retries left: %d", link, exc, retries_left
            )

        try:
            return await self.retry_policy.call(
                attempt, classify=classify_error, on_retry=on_retry, sleep=self._sleep
            )
        except Exception as exc:  # noqa: BLE001
            kind = classify_error(exc)
            if kind is ErrorKind.UNCLASSIFIED:
                logger.error("Processing error for %s: %s", link, exc, exc_info=True)
            else:
                logger.error("Giving up on %s after %s error: %s", link, kind.value, exc)
            return None

    async def _scrape_listing(self, page: Any, link: str, want_email: bool, want_social: bool) -> SearchResult:
        settings = self.settings
        want_contact = want_email or want_social
        multiplier = 2 if want_contact else 1

        await page.goto(link, wait_until="networkidle", timeout=settings.navigation_timeout_ms * multiplier)
        await self._human_pause()
        await page.wait_for_selector(READY_SELECTOR, timeout=settings.network_idle_timeout_ms * multiplier)

        snapshot = await snapshot_page(page)
        soup = BeautifulSoup(snapshot.html, "html.parser")
        result = extract_place(soup, settings.extraction.listing_selectors)

        if not result.title:
            raise StructuralError("No title found - possible captcha, block, or page structure change")

        if result.website and want_contact:
            contacts = await self._visit_website(page, result.website, want_email, want_social)
            if contacts is not None:
                result = replace(result, email=contacts.email, social_links=contacts.social_links)

        return result

    async def _visit_website(
        self, page: Any, website: str, want_email: bool, want_social: bool
    ) -> Optional[ContactDetails]:
        """Mine the listing's own website; a failure here keeps the listing data."""

        try:
            await page.goto(website, wait_until="networkidle", timeout=self.settings.navigation_timeout_ms)
            await self._human_pause()
            snapshot = await snapshot_page(page, include_text=True)
            return extract_contacts(
                snapshot,
                want_email=want_email,
                want_social=want_social,
                patterns=self.settings.extraction.contact_patterns,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Website extraction failed for %s: %s", website, exc)
            return None

    async def _human_pause(self) -> None:
        low, high = self.settings.human_delay_range
        await self._sleep(random.uniform(low, high))

    async def _capture_screenshot(self, page: Any) -> Optional[Path]:
        screenshots_dir = Path(self.settings.screenshot_dir)
        path = screenshots_dir / f"failed_{int(time.time() * 1000)}.png"
        try:
            screenshots_dir.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(path))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to capture debug screenshot %s: %s", path, exc)
            return None
        logger.info("Saved debug screenshot to %s", path)
        return path
