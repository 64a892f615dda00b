"""Website enrichment utilities for extracting public contact data."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from bs4 import BeautifulSoup

from maps_scraper.core.social import EMAIL_REGEX, SOCIAL_PLATFORMS, SocialPlatform
from maps_scraper.models import ContactDetails, PageSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactPatterns:
    email: Pattern[str] = EMAIL_REGEX
    platforms: Tuple[SocialPlatform, ...] = SOCIAL_PLATFORMS


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


def extract_mailto_links(soup: BeautifulSoup) -> List[str]:
    """Return mailto targets in document order, without scheme or query."""

    emails: List[str] = []
    for anchor in soup.select('a[href^="mailto:"]'):
        value = anchor["href"].split(":", 1)[1]
        email = value.split("?")[0].strip()
        if email:
            emails.append(email)
    return emails


def extract_email(soup: BeautifulSoup, text: str, pattern: Pattern[str] = EMAIL_REGEX) -> Optional[str]:
    """Pick one email for the site.

    The first address visible in the page text comes before any mailto target;
    the merged candidates are de-duplicated and the first one wins.
    """

    candidates: List[str] = []
    match = pattern.search(text or "")
    if match:
        candidates.append(match.group(0))
    candidates.extend(extract_mailto_links(soup))

    unique = _unique(candidates)
    return unique[0] if unique else None


def extract_social_links(
    soup: BeautifulSoup, platforms: Iterable[SocialPlatform] = SOCIAL_PLATFORMS
) -> Dict[str, List[str]]:
    """Collect platform-specific profile URLs present in anchor tags."""

    hrefs = [anchor["href"].strip() for anchor in soup.find_all("a", href=True)]
    results: Dict[str, List[str]] = {}
    for platform in platforms:
        matches = _unique(href for href in hrefs if href and platform.pattern.search(href))
        if matches:
            results[platform.name] = matches
    return results


def extract_contacts(
    snapshot: PageSnapshot,
    *,
    want_email: bool,
    want_social: bool,
    patterns: Optional[ContactPatterns] = None,
) -> ContactDetails:
    """Run the requested extractions over a rendered website snapshot."""

    patterns = patterns or ContactPatterns()
    soup = BeautifulSoup(snapshot.html, "html.parser")

    email = extract_email(soup, snapshot.text, patterns.email) if want_email else None
    social_links = extract_social_links(soup, patterns.platforms) if want_social else None

    logger.debug(
        "Contact extraction for %s: email=%s platforms=%s",
        snapshot.url,
        email,
        sorted(social_links) if social_links else [],
    )
    return ContactDetails(email=email, social_links=social_links)
