"""Field extraction for a rendered Google Maps place page."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from bs4 import BeautifulSoup

from maps_scraper.models import SearchResult

logger = logging.getLogger(__name__)

_MAIN_HEADER = 'div[role="main"] > div:nth-child(2) > div > div:nth-child(1)'
_GROUPING_CHARS = re.compile(r"[(),\s]")


@dataclass(frozen=True)
class ListingSelectors:
    """Ordered selector chains, most specific first."""

    title: Tuple[str, ...] = (
        f"{_MAIN_HEADER} > div:nth-child(1) > h1",
        "h1.title",
        "h1",
    )
    type: Tuple[str, ...] = (
        f"{_MAIN_HEADER} > div:nth-child(2) > div > div:nth-child(2) > span:nth-child(1) > span > button",
        ".business-type",
    )
    address: Tuple[str, ...] = (
        'button[data-tooltip="Copy address"] > div > div:nth-child(2) > div:nth-child(1)',
        ".address",
    )
    phone: Tuple[str, ...] = (
        'button[data-tooltip="Copy phone number"] > div > div:nth-child(2) > div:nth-child(1)',
        ".phone-number",
    )
    website: Tuple[str, ...] = ('a[data-tooltip="Open website"]',)
    rating: Tuple[str, ...] = (
        f"{_MAIN_HEADER} > div:nth-child(2) > div > div:nth-child(1) > div:nth-child(2)"
        " > span:nth-child(1) > span:nth-child(1)",
    )
    review_count: Tuple[str, ...] = (
        f"{_MAIN_HEADER} > div:nth-child(2) > div > div:nth-child(1) > div:nth-child(2)"
        " > span:nth-child(2) > span > span",
    )


def select_text(soup: BeautifulSoup, selectors: Iterable[str]) -> Optional[str]:
    """Return the trimmed text of the first selector that yields non-empty text."""

    for selector in selectors:
        node = soup.select_one(selector)
        if node is None:
            continue
        text = _strip_or_none(node.get_text())
        if text:
            return text
    return None


def select_attribute(soup: BeautifulSoup, selectors: Iterable[str], attribute: str) -> Optional[str]:
    for selector in selectors:
        node = soup.select_one(selector)
        if node is None:
            continue
        value = _strip_or_none(node.get(attribute))
        if value:
            return value
    return None


def parse_rating(text: Optional[str]) -> Optional[float]:
    """Parse ratings such as ``"4.6"``; a decimal comma is not a rating."""

    if not text:
        return None
    return _safe_float(text.strip())


def parse_review_count(text: Optional[str]) -> Optional[int]:
    """Parse counts such as ``"(1,234)"``; anything non-numeric yields ``None``."""

    if not text:
        return None
    cleaned = _GROUPING_CHARS.sub("", text)
    if not cleaned.isdecimal():
        return None
    return int(cleaned)


def extract_place(soup: BeautifulSoup, selectors: Optional[ListingSelectors] = None) -> SearchResult:
    """Build a SearchResult from the listing detail page.

    A missing title is returned as ``None``; deciding whether that is fatal is
    left to the caller.
    """

    selectors = selectors or ListingSelectors()
    result = SearchResult(
        title=select_text(soup, selectors.title),
        type=select_text(soup, selectors.type),
        address=select_text(soup, selectors.address),
        phone=select_text(soup, selectors.phone),
        website=select_attribute(soup, selectors.website, "href"),
        rating=parse_rating(select_text(soup, selectors.rating)),
        review_count=parse_review_count(select_text(soup, selectors.review_count)),
    )
    logger.debug("Extracted listing fields: %s", result)
    return result


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number
