"""Manual crawler runner for testing and debugging platform adapters.

Runs one crawl from the command line, prints the normalized posts and
optionally stores them in the configured database.

Usage:
    python scripts/run_crawler.py --platform eastmoney --stock 002085
    python scripts/run_crawler.py --platform xueqiu --stock 600519 --pages 1-3
    python scripts/run_crawler.py --platform eastmoney --stock 002085 --save
    python scripts/run_crawler.py --platform xueqiu --stock 600519 --check
"""

import argparse
import asyncio
import os
import sys
from typing import Tuple

# Add backend to path so we can import stockpulse without installing it
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from stockpulse.config import settings
from stockpulse.core.exceptions import InvalidRequestError
from stockpulse.core.logging import configure_logging
from stockpulse.crawlers.driver import CrawlDriver
from stockpulse.crawlers.register_crawlers import register_all_crawlers
from stockpulse.db.session import async_session_factory, engine
from stockpulse.db.utils import init_db
from stockpulse.services.post_service import PostStore


def parse_pages(value: str) -> Tuple[int, int]:
    """'3' -> (3, 3), '1-5' -> (1, 5)."""
    start, _, end = value.partition("-")
    try:
        page_start = int(start)
        page_end = int(end) if end else page_start
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid page range: {value!r}")
    if page_start < 1 or page_end < page_start:
        raise argparse.ArgumentTypeError(f"invalid page range: {value!r}")
    return page_start, page_end


async def run_crawler(
    platform: str,
    stock_code: str,
    pages: Tuple[int, int],
    save: bool = False,
    limit: int = 10,
) -> int:
    """Run a crawl and display the results.

    Returns:
        Process exit code
    """
    registry = register_all_crawlers(settings=settings)
    try:
        crawler = registry.resolve(platform)
    except InvalidRequestError as e:
        print(f"\n❌ Error: {e.message}")
        return 2

    page_start, page_end = pages
    print(f"\n{'='*70}")
    print(f"  Crawling {platform.upper()} stock={stock_code} pages={page_start}-{page_end}")
    print(f"{'='*70}\n")

    try:
        report = await CrawlDriver().crawl(crawler, stock_code, page_start, page_end)
    except InvalidRequestError as e:
        print(f"\n❌ Error: {e.message}")
        return 2

    if report.failed_pages:
        print(f"⚠️  Failed pages: {', '.join(map(str, report.failed_pages))}")
        for page in report.pages:
            if not page.ok:
                print(f"    page {page.page}: {page.error}")
        print()

    if not report.posts:
        print("⚠️  No posts found.\n")
        return 1

    print(f"✅ Found {len(report.posts)} posts\n")
    for i, post in enumerate(report.posts[:limit], 1):
        print(f"[{i}] {post.title}")
        print(f"    🆔 {post.id}  👤 {post.author.nickname}")
        print(f"    🕒 {post.publish_time.isoformat()}")
        print(f"    👁  {post.click_count}  💬 {post.comment_count}\n")

    if save:
        await init_db(engine)
        async with async_session_factory() as session:
            count = await PostStore(session).upsert_many(report.posts)
        await engine.dispose()
        print(f"💾 Saved {count} posts to {settings.DATABASE_URL}\n")

    return 0


async def check_crawler(platform: str, stock_code: str) -> int:
    """Fetch page 1 and report whether the platform answers usable data."""
    registry = register_all_crawlers(settings=settings)
    try:
        crawler = registry.resolve(platform)
    except InvalidRequestError as e:
        print(f"\n❌ Error: {e.message}")
        return 2

    stock_code = stock_code.strip()
    if not stock_code:
        print("\n❌ Error: stock_code is required")
        return 2

    healthy = await crawler.health_check(stock_code)
    print(f"{platform}: {'✅ healthy' if healthy else '❌ unavailable'}")
    return 0 if healthy else 1


def main():
    """Parse arguments and run the crawler."""
    parser = argparse.ArgumentParser(
        description="Run a stock forum crawler for testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_crawler.py --platform eastmoney --stock 002085
  python scripts/run_crawler.py --platform xueqiu --stock 600519 --pages 1-3
  python scripts/run_crawler.py --platform eastmoney --stock 002085 --save
        """,
    )

    parser.add_argument(
        "--platform",
        default="eastmoney",
        help="Platform identifier (e.g., 'eastmoney', 'xueqiu')",
    )

    parser.add_argument(
        "--stock",
        required=True,
        help="Stock code (e.g., '002085')",
    )

    parser.add_argument(
        "--pages",
        type=parse_pages,
        default=(1, 1),
        help="Page or page range to crawl, e.g. '2' or '1-5' (default: 1)",
    )

    parser.add_argument(
        "--save",
        action="store_true",
        help="Upsert the crawled posts into DATABASE_URL",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of posts to display (default: 10)",
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Only check whether the platform answers page 1",
    )

    args = parser.parse_args()
    configure_logging(settings.LOG_LEVEL)

    if args.check:
        sys.exit(asyncio.run(check_crawler(args.platform, args.stock)))
    sys.exit(asyncio.run(run_crawler(args.platform, args.stock, args.pages, args.save, args.limit)))


if __name__ == "__main__":
    main()
