"""CLI job that scrapes Google Maps listings and writes them to disk."""

import argparse
import asyncio
import logging
import random
from dataclasses import replace
from typing import List, Optional

from playwright.async_api import Browser, async_playwright

from maps_scraper.core.batch import BatchRunner
from maps_scraper.core.browser import close_quietly, launch_browser, new_browser_context
from maps_scraper.core.config import ConfigError, Settings, get_settings
from maps_scraper.core.processor import ResultProcessor
from maps_scraper.etl.export import save_csv, save_json
from maps_scraper.models import Coordinates, ScraperOptions, SearchResult
from maps_scraper.vendors import google_maps

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


async def scrape_with_browser(
    browser: Browser, options: ScraperOptions, settings: Settings
) -> List[Optional[SearchResult]]:
    """Search Google Maps and scrape every discovered listing with an open browser."""

    context = await new_browser_context(browser, settings)
    try:
        search_page = await context.new_page()
        url = google_maps.build_search_url(options.search_term, options.coordinates)
        logger.info("Searching Google Maps: %s", url)

        await search_page.goto(url, wait_until="networkidle")
        await asyncio.sleep(random.uniform(*settings.human_delay_range))

        idle_timeout = settings.network_idle_timeout_ms * (2 if options.wants_contact else 1)
        await search_page.wait_for_selector(google_maps.FEED_SELECTOR, timeout=idle_timeout)

        await google_maps.auto_scroll(search_page, options.result_limit, settings)
        links = await google_maps.collect_listing_links(search_page, options.result_limit)
        logger.info("Found %d search result links", len(links))
        await close_quietly(search_page)

        runner = BatchRunner(ResultProcessor(settings), context.new_page)
        results = await runner.run(
            links,
            want_email=options.extract_email,
            want_social=options.extract_social_links,
            concurrency=options.concurrency,
        )
    finally:
        await close_quietly(context)

    scraped = sum(1 for result in results if result is not None)
    logger.info("Successfully scraped %d of %d results", scraped, len(results))
    return results


async def run_scrape(options: ScraperOptions, settings: Optional[Settings] = None) -> List[Optional[SearchResult]]:
    """Full pipeline. Browser launch or search page failures propagate to the caller."""

    settings = settings or get_settings()
    async with async_playwright() as playwright:
        browser = await launch_browser(playwright, settings)
        try:
            return await scrape_with_browser(browser, options, settings)
        finally:
            await close_quietly(browser)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape Google Maps listings")
    parser.add_argument("search_term", help="Search query, e.g. 'restaurants in Perth WA, Australia'")
    parser.add_argument("--lat", dest="latitude", type=float, help="Latitude to centre the search on")
    parser.add_argument("--lng", dest="longitude", type=float, help="Longitude to centre the search on")
    parser.add_argument("--limit", dest="result_limit", type=int, default=10, help="Maximum listings to scrape")
    parser.add_argument("--email", dest="extract_email", action="store_true", help="Visit websites for an email")
    parser.add_argument(
        "--social", dest="extract_social_links", action="store_true", help="Visit websites for social profiles"
    )
    parser.add_argument("--concurrency", type=int, default=1, help="Listings processed at the same time")
    parser.add_argument("--format", dest="output_format", choices=("json", "csv", "both"), default="json")
    parser.add_argument("--output-dir", dest="output_dir", help="Directory for result files")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(debug: bool, log_file: Optional[str]) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=LOG_FORMAT, handlers=handlers)


def options_from_args(args: argparse.Namespace) -> ScraperOptions:
    coordinates = None
    if args.latitude is not None or args.longitude is not None:
        if args.latitude is None or args.longitude is None:
            raise ValueError("--lat and --lng must be given together")
        coordinates = Coordinates(latitude=args.latitude, longitude=args.longitude)

    return ScraperOptions(
        search_term=args.search_term,
        coordinates=coordinates,
        result_limit=args.result_limit,
        extract_email=args.extract_email,
        extract_social_links=args.extract_social_links,
        concurrency=args.concurrency,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ConfigError as exc:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error("Configuration error: %s", exc)
        return 2

    configure_logging(args.debug, settings.log_file)
    if args.headed:
        settings = replace(settings, headless=False)

    try:
        options = options_from_args(args)
    except ValueError as exc:
        logger.error("Invalid options: %s", exc)
        return 2

    try:
        results = asyncio.run(run_scrape(options, settings))
    except Exception as exc:  # noqa: BLE001
        logger.error("Scraping failed: %s", exc, exc_info=True)
        return 1

    output_dir = args.output_dir or settings.output_dir
    if args.output_format in ("json", "both"):
        save_json(results, output_dir)
    if args.output_format in ("csv", "both"):
        save_csv(results, output_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
