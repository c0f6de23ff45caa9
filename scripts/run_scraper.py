"""Manual fetch runner for testing and debugging adapters.

Fetches one listing URL through the full pipeline (rate limit, retry,
validation, extraction) and prints the normalized record.

Usage:
    python scripts/run_scraper.py --url "https://www.cardhobby.com/#/carddetails/67180979"
    python scripts/run_scraper.py --url "https://www.ebay.com/itm/123456789012"
    python scripts/run_scraper.py --list
"""

import argparse
import asyncio
import os
import sys

import httpx

# Add backend to path so we can import bidtracker modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from bidtracker.config import settings
from bidtracker.core.exceptions import BidTrackerException
from bidtracker.scrapers.pipeline import FetchPipeline
from bidtracker.scrapers.register_adapters import build_registry


async def run_fetch(url: str) -> int:
    """Fetch a URL and display the result.

    Args:
        url: Listing detail-page URL

    Returns:
        Process exit code
    """
    registry = build_registry()
    adapter = registry.find(url)
    if adapter is None:
        print(f"\n❌ Error: no adapter handles '{url}'")
        print("\n📋 Available adapters:")
        for slug in registry.get_registered_slugs():
            print(f"   - {slug}")
        return 1

    print(f"\n{'='*70}")
    print(f"  Fetching with {adapter.name} adapter")
    print(f"{'='*70}\n")

    async with httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT_SECONDS) as client:
        pipeline = FetchPipeline(registry=registry, client=client)
        try:
            record = await pipeline.fetch_normalized_record(url)
        except BidTrackerException as e:
            print(f"❌ {type(e).__name__}: {e.message}")
            return 1

    print(f"  Name:          {record.name}")
    print(f"  Current bid:   {record.current_bid}")
    print(f"  Closes at:     {record.closes_at.isoformat()}")
    print(f"  Seller:        {record.seller_ref}")
    print(f"  Image:         {record.image_url}")
    print(f"  Source:        {record.source_url}")
    print()
    return 0


def list_adapters() -> None:
    """Print registered adapters and their URL patterns."""
    registry = build_registry()
    for slug in registry.get_registered_slugs():
        adapter = registry.get(slug)
        print(
            f"  {slug:<12} {adapter.url_pattern.pattern:<45} "
            f"{adapter.rate_limit.max_requests} req / {adapter.rate_limit.time_window:.0f}s"
        )


def main():
    parser = argparse.ArgumentParser(description="Fetch one listing through the adapter pipeline")
    parser.add_argument("--url", help="Listing detail-page URL")
    parser.add_argument("--list", action="store_true", help="List registered adapters")
    args = parser.parse_args()

    if args.list:
        list_adapters()
        return
    if not args.url:
        parser.error("--url is required unless --list is given")

    sys.exit(asyncio.run(run_fetch(args.url)))


if __name__ == "__main__":
    main()
