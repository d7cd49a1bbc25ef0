"""
Pydantic models for API request/response validation.
Auto-generates OpenAPI documentation.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional, Union

from models import Transaction


# ----------------------------------------------------------------
# Request parameters
# ----------------------------------------------------------------

class TransactionListParams(BaseModel):
    """Validated query parameters for the transaction listing."""
    page: int = Field(1, ge=1)
    per_page: int = Field(10, ge=1)
    search: Optional[str] = None
    month: Optional[int] = Field(None, ge=1, le=12)


class MonthParams(BaseModel):
    """Validated query parameters for the monthly statistics endpoints."""
    month: int = Field(..., ge=1, le=12)


# ----------------------------------------------------------------
# Responses
# ----------------------------------------------------------------

class MessageResponse(BaseModel):
    message: str


class TransactionPageResponse(BaseModel):
    """One page of transactions."""
    transactions: List[Transaction]
    currentPage: int
    totalPages: int
    totalTransactions: int


class SalesStatisticsResponse(BaseModel):
    """Monthly sales totals."""
    totalSales: float
    soldItems: int
    notSoldItems: int


class PriceRangeBucket(BaseModel):
    """Histogram cell: lower bound (or overflow label) and count."""
    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str] = Field(alias="_id")
    count: int


class CategoryCount(BaseModel):
    """Number of transactions in one category."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(alias="_id")
    count: int


class CombinedResponse(BaseModel):
    """Statistics, price ranges and categories for one month."""
    statistics: SalesStatisticsResponse
    priceRanges: List[PriceRangeBucket]
    categories: List[CategoryCount]


class ErrorResponse(BaseModel):
    """Error response."""
    message: str
    error: Optional[Any] = None
