"""Core data models shared by the Google Maps scraping pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class ScraperOptions:
    """Caller-supplied parameters for one scrape run."""

    search_term: str
    coordinates: Optional[Coordinates] = None
    result_limit: int = 10
    extract_email: bool = False
    extract_social_links: bool = False
    concurrency: int = 1

    def __post_init__(self) -> None:
        if not self.search_term or not self.search_term.strip():
            raise ValueError("search_term must be provided")
        if self.result_limit < 1:
            raise ValueError("result_limit must be positive")
        if self.concurrency < 1:
            raise ValueError("concurrency must be a positive integer")

    @property
    def wants_contact(self) -> bool:
        return self.extract_email or self.extract_social_links


@dataclass(frozen=True, slots=True)
class PageSnapshot:
    """Serialized state of a rendered page: its markup and visible text."""

    url: str
    html: str
    text: str = ""


@dataclass(frozen=True, slots=True)
class ContactDetails:
    """Email and social profiles mined from a listing's own website."""

    email: Optional[str] = None
    social_links: Optional[Dict[str, List[str]]] = None


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One Google Maps listing as rendered on its detail page.

    ``email`` and ``social_links`` stay ``None`` unless the corresponding
    extraction was requested and the listing's website could be visited.
    """

    title: Optional[str]
    type: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    email: Optional[str] = None
    social_links: Optional[Dict[str, List[str]]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "title": self.title,
            "type": self.type,
            "address": self.address,
            "phone": self.phone,
            "website": self.website,
            "rating": self.rating,
            "reviewCount": self.review_count,
        }
        if self.email is not None:
            payload["email"] = self.email
        if self.social_links is not None:
            payload["socialLinks"] = {platform: list(links) for platform, links in self.social_links.items()}
        return payload
