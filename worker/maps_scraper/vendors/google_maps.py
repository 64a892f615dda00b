"""Google Maps search page helpers: URL building, feed scrolling, link discovery."""

import asyncio
import logging
from typing import Any, List, Optional
from urllib.parse import quote

from maps_scraper.core.config import Settings
from maps_scraper.models import Coordinates

logger = logging.getLogger(__name__)
_BASE_URL = "https://www.google.com/maps/search/"

FEED_SELECTOR = 'div[role="feed"]'
RESULT_LINK_SELECTOR = f"{FEED_SELECTOR} > div:nth-child(n+3) > div > a"

_SCROLL_FEED_JS = """
(selector) => {
  const feed = document.querySelector(selector);
  if (!feed) return null;
  feed.scrollBy(0, feed.clientHeight * 0.8);
  return feed.scrollHeight;
}
"""

_FEED_HEIGHT_JS = """
(selector) => {
  const feed = document.querySelector(selector);
  return feed ? feed.scrollHeight : null;
}
"""

_LINK_HREFS_JS = "(anchors) => anchors.map((anchor) => anchor.getAttribute('href'))"


def build_search_url(search_term: str, coordinates: Optional[Coordinates] = None) -> str:
    query = quote(search_term.strip(), safe="")
    location = f"/@{coordinates.latitude},{coordinates.longitude},15z" if coordinates else ""
    return f"{_BASE_URL}{query}{location}"


async def count_result_links(page: Any) -> int:
    return await page.locator(RESULT_LINK_SELECTOR).count()


async def auto_scroll(page: Any, result_limit: int, settings: Settings) -> int:
    """Scroll the results feed until enough listings are loaded or it stops growing.

    Returns the number of result anchors present when scrolling stopped.
    """

    last_height = await page.evaluate(_FEED_HEIGHT_JS, FEED_SELECTOR)
    if last_height is None:
        logger.warning("Results feed not found; skipping auto-scroll")
        return 0

    count = await count_result_links(page)
    stalls = 0
    while count < result_limit and stalls < settings.max_scroll_attempts:
        await page.evaluate(_SCROLL_FEED_JS, FEED_SELECTOR)
        await asyncio.sleep(settings.scroll_pause_s)

        new_height = await page.evaluate(_FEED_HEIGHT_JS, FEED_SELECTOR)
        count = await count_result_links(page)
        if new_height == last_height:
            stalls += 1
            await asyncio.sleep(settings.scroll_stall_pause_s)
        last_height = new_height
        logger.debug("Feed scrolled: %d results loaded (stalls=%d)", count, stalls)

    return count


async def collect_listing_links(page: Any, result_limit: int) -> List[str]:
    hrefs = await page.eval_on_selector_all(RESULT_LINK_SELECTOR, _LINK_HREFS_JS)
    links = [href for href in hrefs if href]
    return links[:result_limit]
