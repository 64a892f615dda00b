"""Utilities for transforming scraped listings into output rows."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from maps_scraper.models import SearchResult

logger = logging.getLogger(__name__)

BASE_COLUMNS = ("title", "type", "address", "phone", "website", "rating", "reviewCount")
SOCIAL_SEPARATOR = ", "


def to_records(results: Iterable[Optional[SearchResult]]) -> List[Optional[Dict[str, Any]]]:
    """Serialise results for JSON output, keeping failed slots as ``None``."""
    return [result.to_dict() if result is not None else None for result in results]


def _social_columns(results: Sequence[SearchResult]) -> List[str]:
    platforms: List[str] = []
    for result in results:
        for platform, links in (result.social_links or {}).items():
            if links and platform not in platforms:
                platforms.append(platform)
    return platforms


def to_csv_rows(results: Iterable[Optional[SearchResult]]) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Flatten successful results into CSV rows.

    Social links become one column per platform, joined into a single string;
    only platforms found on at least one listing get a column.
    """

    scraped = [result for result in results if result is not None]
    platforms = _social_columns(scraped)
    include_email = any(result.email is not None for result in scraped)

    fieldnames = list(BASE_COLUMNS)
    if include_email:
        fieldnames.append("email")
    fieldnames.extend(platforms)

    rows: List[Dict[str, Any]] = []
    for result in scraped:
        record = result.to_dict()
        row = {column: record.get(column) for column in BASE_COLUMNS}
        if include_email:
            row["email"] = result.email
        social_links = result.social_links or {}
        for platform in platforms:
            row[platform] = SOCIAL_SEPARATOR.join(social_links.get(platform, []))
        rows.append(row)

    logger.debug("Prepared %d CSV rows with columns %s", len(rows), fieldnames)
    return fieldnames, rows
