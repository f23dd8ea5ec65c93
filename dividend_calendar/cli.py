import argparse
import logging

from dividend_calendar.cache_store import CacheStore
from dividend_calendar.config import ScraperConfig
from dividend_calendar.http_client import HttpClient
from dividend_calendar.pages.calendar_page import CalendarPage
from dividend_calendar.pages.detail_page import DetailPage
from dividend_calendar.scrape_coordinator import ScrapeCoordinator
from dividend_calendar.selenium_client import SeleniumClient


def build_client(config: ScraperConfig):
    if config.fetcher == "browser":
        return SeleniumClient()
    return HttpClient()


def build_coordinator(config: ScraperConfig, client) -> ScrapeCoordinator:
    return ScrapeCoordinator(
        calendar_page=CalendarPage(client, url=config.calendar_url, timeout=config.calendar_timeout),
        detail_page=DetailPage(client, base_url=config.base_url, timeout=config.detail_timeout),
        store=CacheStore(config.cache_path),
        max_workers=config.max_workers,
        wait_timeout=config.wait_timeout,
        progress_alpha=config.progress_alpha,
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Dividend calendar scraper")
    parser.add_argument("--cache", help="Path of the companies cache (JSON)")
    parser.add_argument("--workers", type=int, help="Concurrent detail-page fetches")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for all enrichment tasks")
    parser.add_argument("--browser", action="store_true", help="Fetch pages with headless Chrome")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    config = ScraperConfig.from_env(
        cache_path=args.cache,
        max_workers=args.workers,
        wait_timeout=args.timeout,
        fetcher="browser" if args.browser else None,
    )

    client = build_client(config)
    try:
        coordinator = build_coordinator(config, client)
        companies = coordinator.run()
    finally:
        client.close()

    print(f"{coordinator.last_mode.value}: {len(companies)} companies cached")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
