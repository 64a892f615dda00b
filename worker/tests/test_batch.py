import asyncio
import logging

import pytest
from playwright.async_api import Error as PlaywrightError

from fakes import DummySite, fast_settings, listing_html
from maps_scraper.core.batch import BatchRunner
from maps_scraper.core.processor import ResultProcessor
from maps_scraper.models import SearchResult


def run(coro):
    return asyncio.run(coro)


def links(count):
    return [f"https://www.google.com/maps/place/{index}" for index in range(1, count + 1)]


def run_batch(site, settings, urls, **kwargs):
    runner = BatchRunner(ResultProcessor(settings), site.new_page)
    return run(runner.run(urls, **kwargs))


def test_empty_batch_opens_no_pages(tmp_path):
    site = DummySite({})
    assert run_batch(site, fast_settings(tmp_path), []) == []
    assert site.pages == []


def test_rejects_non_positive_concurrency(tmp_path):
    with pytest.raises(ValueError):
        run_batch(DummySite({}), fast_settings(tmp_path), links(1), concurrency=0)


def test_sequential_batch_shares_one_page(tmp_path):
    urls = links(3)
    site = DummySite({url: listing_html(title=f"Place {i}") for i, url in enumerate(urls, 1)})

    results = run_batch(site, fast_settings(tmp_path), urls)

    assert [result.title for result in results] == ["Place 1", "Place 2", "Place 3"]
    assert len(site.pages) == 1
    assert site.visits == urls
    assert site.pages[0].closed


def test_end_to_end_batch_keeps_slots(tmp_path, caplog):
    urls = links(3)
    site = DummySite(
        {
            urls[0]: listing_html(title="First"),
            urls[1]: listing_html(title="Second"),
            urls[2]: listing_html(title=None),
        },
        failures={urls[1]: [PlaywrightError("net::ERR_CONNECTION_RESET")]},
    )

    with caplog.at_level(logging.WARNING):
        results = run_batch(site, fast_settings(tmp_path), urls)

    assert len(results) == 3
    assert results[0].title == "First"
    assert results[1].title == "Second"
    assert results[2] is None
    second_retries = [r for r in caplog.records if r.getMessage().startswith(f"Retrying link {urls[1]} ")]
    assert len(second_retries) == 1
    assert len(site.screenshots) == 1


class ExplodingProcessor:
    """Processor whose second link raises straight through."""

    async def process(self, page, link, want_email, want_social):
        if link.endswith("/2"):
            raise RuntimeError("synthetic failure")
        return SearchResult(title=link.rsplit("/", 1)[1])


def test_one_failing_link_does_not_stop_the_batch():
    site = DummySite({})
    runner = BatchRunner(ExplodingProcessor(), site.new_page)

    results = run(runner.run(links(4)))

    assert [r.title if r else None for r in results] == ["1", None, "3", "4"]


class SlowProcessor:
    """Finishes later links first and records how many links share a page at once."""

    def __init__(self):
        self.in_flight = 0
        self.max_in_flight = 0
        self.busy_pages = set()
        self.page_clashes = 0

    async def process(self, page, link, want_email, want_social):
        if id(page) in self.busy_pages:
            self.page_clashes += 1
        self.busy_pages.add(id(page))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        index = int(link.rsplit("/", 1)[1])
        await asyncio.sleep(0.01 * (6 - index))
        self.in_flight -= 1
        self.busy_pages.discard(id(page))
        if index == 3:
            return None
        return SearchResult(title=f"Place {index}", email="x@y.z" if want_email else None)


def test_pooled_batch_preserves_order_and_isolates_pages():
    site = DummySite({})
    processor = SlowProcessor()
    runner = BatchRunner(processor, site.new_page)

    results = run(runner.run(links(5), want_email=True, concurrency=2))

    assert [r.title if r else None for r in results] == ["Place 1", "Place 2", None, "Place 4", "Place 5"]
    assert all(r.email == "x@y.z" for r in results if r)
    assert processor.max_in_flight == 2
    assert processor.page_clashes == 0
    assert len(site.pages) == 2
    assert all(page.closed for page in site.pages)


def test_pool_never_opens_more_pages_than_links():
    site = DummySite({})
    runner = BatchRunner(SlowProcessor(), site.new_page)

    results = run(runner.run(links(2), concurrency=8))

    assert len(results) == 2
    assert len(site.pages) == 2


def test_pool_closes_opened_pages_when_opening_fails():
    site = DummySite({})
    opened = []

    async def flaky_open_page():
        if len(opened) == 2:
            raise RuntimeError("context closed")
        page = await site.new_page()
        opened.append(page)
        return page

    runner = BatchRunner(SlowProcessor(), flaky_open_page)

    with pytest.raises(RuntimeError):
        run(runner.run(links(4), concurrency=3))

    assert len(opened) == 2
    assert all(page.closed for page in opened)
