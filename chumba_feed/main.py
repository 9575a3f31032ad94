"""
Main entry point and CLI for the Chumba Connect property feed.

Loads the recommended feed from the backend, optionally paging through more
results, and prints the listings that pass the search and filter options.
"""

import asyncio
import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv

from chumba_feed.api.property_client import PropertyApiClient
from chumba_feed.config.feed_config import FeedSettings, get_feed_settings, load_feed_config
from chumba_feed.home_feed import HomeFeed
from chumba_feed.models import LocationContext, RoomListing
from chumba_feed.search.search_logger import SearchLogDebouncer
from chumba_feed.search.vocabulary import (
    ALL_AREAS,
    ANY_ROOM_TYPE,
    PRICE_RANGES,
    get_price_range,
)
from chumba_feed.session.session_manager import FeedSessionManager


logger = logging.getLogger(__name__)


def format_listing(listing: RoomListing) -> str:
    """
    Format a room listing for console output.

    Args:
        listing: RoomListing to format

    Returns:
        Formatted string representation of the listing
    """
    lines = []

    title = listing.title or "[No title]"
    lines.append(f"🏠 {title}")
    lines.append(f"   ID: {listing.id}")

    if listing.price is not None:
        lines.append(f"   Price: {listing.price} Tsh/month")

    if listing.location:
        lines.append(f"   Location: {listing.location}")

    if listing.room_type:
        lines.append(f"   Room type: {listing.room_type}")

    if listing.amenities:
        lines.append(f"   Amenities: {', '.join(listing.amenities)}")

    lines.append(f"   Minimum stay: {listing.min_months} month{'s' if listing.min_months > 1 else ''}")

    if listing.occupied:
        lines.append("   ⛔ OCCUPIED")

    lines.append("")
    return "\n".join(lines)


def format_results(listings: List[RoomListing], total: int) -> str:
    if not listings:
        return f"No rooms match your search ({total} loaded).\n"

    output = [f"\n{'='*60}", f"Showing {len(listings)} of {total} room(s)", f"{'='*60}\n"]
    for listing in listings:
        output.append(format_listing(listing))
    output.append(f"{'='*60}\n")
    return "\n".join(output)


def build_location(args: argparse.Namespace) -> Optional[LocationContext]:
    parts = (args.street, args.district, args.region, args.city)
    if not any(parts):
        return None
    return LocationContext(*parts)


async def run_feed(
    args: argparse.Namespace,
    settings: FeedSettings
) -> int:
    """
    Load the feed and print the visible listings.

    Args:
        args: Parsed command-line arguments
        settings: Feed client settings

    Returns:
        Exit code (0 for success, 1 for error)
    """
    session_manager = FeedSessionManager(
        session_id=settings.session.session_id,
        base_dir=settings.session.base_dir,
    )

    if args.token:
        session_manager.set_token(args.token)

    if args.recent:
        searches = session_manager.recent_searches()
        print("Recent searches:" if searches else "No recent searches.")
        for search in searches:
            print(f"  • {search}")
        return 0

    try:
        price_range = get_price_range(args.price_range)
    except KeyError:
        labels = ", ".join(r.label for r in PRICE_RANGES)
        print(f"Error: unknown price range '{args.price_range}'. Choose one of: {labels}", file=sys.stderr)
        return 1

    async with PropertyApiClient(
        settings.api.base_url,
        session_manager=session_manager,
        timeout_seconds=settings.api.timeout_seconds,
    ) as client:
        search_logger = None
        if settings.search_log.enabled:
            search_logger = SearchLogDebouncer(
                client.store_search, delay_seconds=settings.search_log.debounce_seconds
            )

        feed = HomeFeed(
            client,
            page_size=settings.pagination.page_size,
            search_logger=search_logger,
            session_manager=session_manager,
            location=build_location(args),
        )
        feed.select_location(args.area)
        feed.select_room_type(args.room_type)
        feed.select_price_range(price_range)

        try:
            start_time = datetime.now()

            outcome = await feed.load_initial()
            if not outcome.ok:
                print(f"❌ {outcome.message}", file=sys.stderr)
                return 1

            if args.refresh:
                outcome = await feed.refresh()
                if not outcome.ok:
                    print(f"⚠️  {outcome.message}", file=sys.stderr)

            for _ in range(max(args.pages - 1, 0)):
                feed.begin_momentum()
                outcome = await feed.load_more()
                if outcome.skip_reason:
                    logger.info(f"Stopped paging: {outcome.skip_reason}")
                    break
                if not outcome.ok:
                    print(f"⚠️  {outcome.message}", file=sys.stderr)
                    break

            if args.query:
                analysis = feed.set_query(args.query)
                if analysis is None:
                    reason = feed.classifier.validator.validate(args.query).reason
                    print(f"ℹ️  Ignoring search text: {reason}")
                else:
                    print(f"🔍 Searching for '{args.query}' ({analysis.search_type.value} search)")
                    feed.commit_search()

            visible = feed.visible_listings()
            print(format_results(visible, len(feed.store)))

            elapsed_time = (datetime.now() - start_time).total_seconds()
            logger.info(f"Feed loaded in {elapsed_time:.2f} seconds")

            if search_logger is not None:
                await search_logger.flush()
            return 0
        finally:
            feed.close()


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="chumba-feed",
        description="Browse the Chumba Connect room feed from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the first page of recommended rooms
  python -m chumba_feed.main

  # Search by price and page through three pages
  python -m chumba_feed.main --query 150k --pages 3

  # Filter by area, room type and price bracket
  python -m chumba_feed.main --area Sinza --room-type Studio --price-range "150k - 300k"
        """
    )

    parser.add_argument("--query", "-q", default="", help="Free-text search (e.g. '150k', 'bedsitter in sinza')")
    parser.add_argument("--area", default=ALL_AREAS, help="Location selector (default: All Areas)")
    parser.add_argument("--room-type", default=ANY_ROOM_TYPE, help="Room type selector (default: Any)")
    parser.add_argument("--price-range", default="Any", help="Price bracket label (default: Any)")
    parser.add_argument("--pages", type=int, default=1, help="Number of feed pages to load")
    parser.add_argument("--refresh", action="store_true", help="Refresh the feed after the first load")

    parser.add_argument("--street", default=None, help="Your street, for location-aware recommendations")
    parser.add_argument("--district", default=None, help="Your district")
    parser.add_argument("--region", default=None, help="Your region")
    parser.add_argument("--city", default=None, help="Your city")

    parser.add_argument("--token", default=None, help="Store a bearer token for this session")
    parser.add_argument("--recent", action="store_true", help="List recent searches and exit")

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI application.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    load_dotenv()
    settings = get_feed_settings(load_feed_config())

    try:
        return asyncio.run(run_feed(args, settings))
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
