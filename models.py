"""
Pydantic data models for the product transactions service.

These models enforce type safety and validation for the one entity that
flows through the system (a product Transaction) and describe the typed
filters and aggregations the repository understands.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Core Entities
# ---------------------------------------------------------------------------

class Transaction(BaseModel):
    """
    A product sale record seeded from the remote product feed.
    The id is assigned by the store on insert; any id in the feed is ignored.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    title: str
    description: str = ""
    price: float
    category: str = ""
    image: str = ""
    sold: bool = False
    date_of_sale: datetime = Field(alias="dateOfSale")

    @field_validator("date_of_sale")
    @classmethod
    def _normalize_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Query Expressions
# ---------------------------------------------------------------------------

class TransactionFilter(BaseModel):
    """
    Predicate over transactions. All set fields combine with AND.

    month:  calendar month (1-12) of dateOfSale, any year
    search: case-insensitive substring of title, description or price text
    sold:   exact match on the sold flag
    """
    month: Optional[int] = Field(None, ge=1, le=12)
    search: Optional[str] = None
    sold: Optional[bool] = None


class Aggregation(BaseModel):
    """
    Grouped reduction over the transactions matching a filter.

    group_by is a SQL expression over transaction columns (None reduces all
    matches into a single row) and accumulator the reducing expression.
    """
    match: TransactionFilter = Field(default_factory=TransactionFilter)
    group_by: Optional[str] = None
    accumulator: str = "COUNT(*)"
