"""
Query service for the product transactions API.

Translates validated request parameters into repository filters and
aggregations, and shapes the results. Every operation is a plain method
returning data; composition happens in the HTTP layer.
"""

import math
from typing import Dict, List, Optional

from database import DatabaseManager
from errors import ValidationError
from models import Aggregation, TransactionFilter
from sources.product_feed.provider import ProductFeedProvider


# Lower bounds of the fixed price buckets; each covers [lower, lower + 100)
PRICE_BUCKET_BOUNDARIES = [0, 100, 200, 300, 400, 500, 600, 700, 800, 900]
OVERFLOW_BUCKET = "901 and above"

MONTH_REQUIRED = "Month parameter is required"


def _price_bucket_expr() -> str:
    upper = PRICE_BUCKET_BOUNDARIES[-1]
    return (
        f"CASE WHEN price >= 0 AND price < {upper} "
        f"THEN CAST(price / 100 AS INTEGER) * 100 "
        f"ELSE '{OVERFLOW_BUCKET}' END"
    )


def _require_month(month: Optional[int]) -> int:
    if month is None:
        raise ValidationError(MONTH_REQUIRED)
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")
    return month


class TransactionQueryService:
    """
    Listing, search and monthly statistics over the transactions store.
    """

    def __init__(self, db: DatabaseManager, provider: ProductFeedProvider = None):
        self.db = db
        self.provider = provider

    # ----------------------------------------------------------------
    # Seed
    # ----------------------------------------------------------------

    def initialize(self) -> int:
        """Fetch the remote dataset and replace the stored collection."""
        if self.provider is None:
            self.provider = ProductFeedProvider()
        transactions = self.provider.fetch_transactions()
        return self.db.replace_all(transactions)

    # ----------------------------------------------------------------
    # Listing
    # ----------------------------------------------------------------

    def list_transactions(
        self,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
        month: Optional[int] = None,
    ) -> Dict:
        """
        Get one page of transactions matching an optional month and search.

        Args:
            page: 1-based page number
            per_page: Page size (no upper bound)
            search: Case-insensitive substring of title, description or price
            month: Calendar month 1-12

        Returns:
            Dict with transactions, currentPage, totalPages, totalTransactions
        """
        if page < 1 or per_page < 1:
            raise ValidationError("page and perPage must be positive integers")
        if month is not None:
            _require_month(month)

        flt = TransactionFilter(month=month, search=search or None)
        transactions = self.db.find(flt, skip=(page - 1) * per_page, limit=per_page)
        total = self.db.count(flt)

        return {
            "transactions": transactions,
            "currentPage": page,
            "totalPages": math.ceil(total / per_page),
            "totalTransactions": total,
        }

    # ----------------------------------------------------------------
    # Monthly statistics
    # ----------------------------------------------------------------

    def get_sales_statistics(self, month: Optional[int]) -> Dict:
        """Total sale amount plus sold and unsold counts for a month."""
        month = _require_month(month)

        totals = self.db.aggregate(Aggregation(
            match=TransactionFilter(month=month),
            accumulator="SUM(price)",
        ))
        total_sales = totals[0]["value"] if totals and totals[0]["value"] is not None else 0

        return {
            "totalSales": total_sales,
            "soldItems": self.db.count(TransactionFilter(month=month, sold=True)),
            "notSoldItems": self.db.count(TransactionFilter(month=month, sold=False)),
        }

    def get_price_ranges(self, month: Optional[int]) -> List[Dict]:
        """
        Histogram of prices for a month.

        Nine 100-wide buckets labeled 0 to 800 cover [0, 900); every other
        price, 900 included, lands in the "901 and above" bucket.

        Every bucket is reported, zero counts included, ordered by lower
        bound with the overflow bucket last.
        """
        month = _require_month(month)

        rows = self.db.aggregate(Aggregation(
            match=TransactionFilter(month=month),
            group_by=_price_bucket_expr(),
        ))
        counts = {r["_id"]: r["value"] for r in rows}

        labels = PRICE_BUCKET_BOUNDARIES[:-1] + [OVERFLOW_BUCKET]
        return [{"_id": label, "count": counts.get(label, 0)} for label in labels]

    def get_categories(self, month: Optional[int]) -> List[Dict]:
        """Number of transactions per category for a month."""
        month = _require_month(month)

        rows = self.db.aggregate(Aggregation(
            match=TransactionFilter(month=month),
            group_by="category",
        ))
        return [{"_id": r["_id"], "count": r["value"]} for r in rows]

    def get_combined(self, month: Optional[int]) -> Dict:
        """Statistics, price ranges and categories for a month in one result."""
        month = _require_month(month)
        return {
            "statistics": self.get_sales_statistics(month),
            "priceRanges": self.get_price_ranges(month),
            "categories": self.get_categories(month),
        }
