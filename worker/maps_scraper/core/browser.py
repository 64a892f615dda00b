"""Playwright session helpers: launch, context setup and page snapshots."""

from __future__ import annotations

import logging
import random
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright

from maps_scraper.core.config import Settings
from maps_scraper.models import PageSnapshot

logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-extensions",
    "--no-first-run",
    "--disable-default-apps",
    "--disable-blink-features=AutomationControlled",
    "--disable-background-timer-throttling",
]

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/121.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36",
)

_HIDE_AUTOMATION_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3] });
"""


async def launch_browser(playwright: Playwright, settings: Settings) -> Browser:
    browser = await playwright.chromium.launch(headless=settings.headless, args=BROWSER_ARGS)
    logger.info("Chromium launched (headless=%s)", settings.headless)
    return browser


async def new_browser_context(browser: Browser, settings: Settings) -> BrowserContext:
    """Create a context with a randomised desktop fingerprint."""

    context = await browser.new_context(
        user_agent=random.choice(USER_AGENTS),
        viewport={
            "width": 1920 + random.randint(0, 99),
            "height": 1080 + random.randint(0, 99),
        },
        extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
    )
    await context.add_init_script(_HIDE_AUTOMATION_SCRIPT)
    context.set_default_navigation_timeout(settings.navigation_timeout_ms)
    context.set_default_timeout(settings.network_idle_timeout_ms)
    return context


async def snapshot_page(page: Page, *, include_text: bool = False) -> PageSnapshot:
    """Serialize the rendered DOM so extraction can run outside the browser."""

    html = await page.content()
    text = await page.inner_text("body") if include_text else ""
    return PageSnapshot(url=page.url, html=html, text=text)


async def close_quietly(target: Any) -> None:
    try:
        await target.close()
    except Exception as exc:  # noqa: BLE001
        logger.debug("Ignoring error while closing %r: %s", target, exc)
