"""
Product Transactions Seed Pipeline

Fetches the full product-transaction dataset from the remote feed and
replaces the contents of the local transactions store.

Usage:
    python -m sources.product_feed.pipeline                      # Default feed + database
    python -m sources.product_feed.pipeline --url URL            # Alternate feed URL
    python -m sources.product_feed.pipeline --db data/other.db   # Alternate database
"""

import argparse
import datetime
import sys
from typing import Optional

from utils import log
from database import DatabaseManager
from errors import ServiceError
from sources.product_feed.provider import ProductFeedProvider

logger = log.setup_verbose_logging("seed")


class SeedPipeline:
    """
    Full reload of the transactions store from the product feed.

    The replace is atomic: a failed fetch or insert leaves the previous
    dataset untouched.
    """

    def __init__(self, url: Optional[str] = None, db_uri: Optional[str] = None):
        self.url = url
        self.db_uri = db_uri
        self.fetched = 0
        self.inserted = 0

    def run(self) -> int:
        """Fetch and store the dataset. Returns the number of records inserted."""
        start = datetime.datetime.now()
        log.header("SEED: Product Transactions")

        provider = ProductFeedProvider(url=self.url)
        log.step(f"Fetching feed from {provider.url}")
        try:
            transactions = provider.fetch_transactions()
        finally:
            provider.close()
        self.fetched = len(transactions)
        log.info(f"Fetched {self.fetched} records")

        if not transactions:
            log.warn("Feed is empty; the store will be emptied")

        log.step("Replacing stored transactions...")
        db = DatabaseManager(db_uri=self.db_uri)
        try:
            self.inserted = db.replace_all(transactions)
        finally:
            db.close()

        elapsed = datetime.datetime.now() - start
        log.summary_table("Seed Summary", [
            ("Records fetched", str(self.fetched)),
            ("Records inserted", str(self.inserted)),
            ("Elapsed", str(elapsed)),
        ])
        log.ok("Seed complete")
        return self.inserted


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the transactions store from the product feed")
    parser.add_argument("--url", help="Feed URL (default: configured product feed)")
    parser.add_argument("--db", help="Database path or sqlite file: URI (default: DATABASE_URI)")
    args = parser.parse_args()

    try:
        SeedPipeline(url=args.url, db_uri=args.db).run()
    except ServiceError as e:
        log.err(str(e))
        logger.exception("Seed failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
