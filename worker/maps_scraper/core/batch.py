"""Run the result processor over a list of listing links."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from maps_scraper.core.browser import close_quietly
from maps_scraper.core.processor import ResultProcessor
from maps_scraper.models import SearchResult

logger = logging.getLogger(__name__)


class BatchRunner:
    """Process links sequentially or through a pool of isolated pages.

    Every link gets exactly one slot in the output, in input order; failed
    links occupy theirs as ``None``.
    """

    def __init__(self, processor: ResultProcessor, open_page: Callable[[], Awaitable[Any]]) -> None:
        self.processor = processor
        self._open_page = open_page

    async def run(
        self,
        links: Sequence[str],
        *,
        want_email: bool = False,
        want_social: bool = False,
        concurrency: int = 1,
    ) -> List[Optional[SearchResult]]:
        if concurrency < 1:
            raise ValueError("concurrency must be a positive integer")
        if not links:
            return []
        if concurrency == 1:
            return await self._run_sequential(links, want_email, want_social)
        return await self._run_pooled(links, want_email, want_social, concurrency)

    async def _run_sequential(
        self, links: Sequence[str], want_email: bool, want_social: bool
    ) -> List[Optional[SearchResult]]:
        page = await self._open_page()
        results: List[Optional[SearchResult]] = []
        try:
            for index, link in enumerate(links):
                results.append(await self._process_one(page, index, link, want_email, want_social))
        finally:
            await close_quietly(page)
        return results

    async def _run_pooled(
        self, links: Sequence[str], want_email: bool, want_social: bool, concurrency: int
    ) -> List[Optional[SearchResult]]:
        pages: List[Any] = []
        pool: asyncio.Queue = asyncio.Queue()

        async def worker(index: int, link: str) -> Optional[SearchResult]:
            page = await pool.get()
            try:
                return await self._process_one(page, index, link, want_email, want_social)
            finally:
                pool.put_nowait(page)

        try:
            for _ in range(min(concurrency, len(links))):
                pages.append(await self._open_page())
                pool.put_nowait(pages[-1])

            logger.info("Processing %d links with %d concurrent pages", len(links), len(pages))
            return list(await asyncio.gather(*(worker(index, link) for index, link in enumerate(links))))
        finally:
            for page in pages:
                await close_quietly(page)

    async def _process_one(
        self, page: Any, index: int, link: str, want_email: bool, want_social: bool
    ) -> Optional[SearchResult]:
        try:
            result = await self.processor.process(page, link, want_email, want_social)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error processing search result %d: %s", index + 1, exc, exc_info=True)
            return None
        if result is not None:
            logger.info("Processed result %d: %s", index + 1, result.title)
        return result
