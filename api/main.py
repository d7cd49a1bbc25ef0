"""
FastAPI application for the Product Transactions API.

Seeds product transactions from a remote feed and exposes listing, search
and monthly statistics under /api, with auto-generated OpenAPI
documentation at /docs.
"""

from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import List, Optional
import logging

from database import DatabaseManager
from errors import ServiceError, ValidationError
from sources.product_feed.provider import ProductFeedProvider
from .config import settings
from .data_access import MONTH_REQUIRED, TransactionQueryService
from .models import (
    CategoryCount,
    CombinedResponse,
    ErrorResponse,
    MessageResponse,
    MonthParams,
    PriceRangeBucket,
    SalesStatisticsResponse,
    TransactionListParams,
    TransactionPageResponse,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter(prefix="/api", tags=["Transactions"], responses=ERROR_RESPONSES)


# ----------------------------------------------------------------
# Dependencies
# ----------------------------------------------------------------

def get_service(request: Request) -> TransactionQueryService:
    return request.app.state.service


def transaction_list_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    per_page: int = Query(10, ge=1, alias="perPage", description="Page size"),
    search: Optional[str] = Query(None, description="Substring of title, description or price"),
    month: Optional[int] = Query(None, ge=1, le=12, description="Calendar month (1-12)"),
) -> TransactionListParams:
    return TransactionListParams(page=page, per_page=per_page, search=search, month=month)


def month_params(
    month: Optional[str] = Query(None, description="Calendar month (1-12)"),
) -> MonthParams:
    # An empty value counts as missing
    if not month:
        raise ValidationError(MONTH_REQUIRED)
    try:
        return MonthParams(month=month)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))


def _failure(request: Request, message: str, e: Exception) -> HTTPException:
    """Log a failed operation with its query parameters and build the 500."""
    logger.error(f"{message}: {e} (params={dict(request.query_params)})")
    return HTTPException(status_code=500, detail={"message": message, "error": str(e)})


# ----------------------------------------------------------------
# Seed
# ----------------------------------------------------------------

@router.get("/initialize", response_model=MessageResponse)
def initialize_db(request: Request, service: TransactionQueryService = Depends(get_service)):
    """
    Fetch the remote product feed and replace the entire collection.
    """
    try:
        n = service.initialize()
        logger.info(f"Database initialized with {n} transactions")
        return {"message": "Database initialized successfully with the fetched data"}
    except Exception as e:
        raise _failure(request, "Error initializing database", e)


# ----------------------------------------------------------------
# Listing
# ----------------------------------------------------------------

@router.get("/transactions", response_model=TransactionPageResponse)
def get_transactions(
    request: Request,
    params: TransactionListParams = Depends(transaction_list_params),
    service: TransactionQueryService = Depends(get_service),
):
    """
    Get a page of transactions.

    - **page**: 1-based page number (default 1)
    - **perPage**: page size (default 10)
    - **search**: case-insensitive match on title, description or price
    - **month**: restrict to a calendar month (1-12), any year
    """
    try:
        return service.list_transactions(
            page=params.page,
            per_page=params.per_page,
            search=params.search,
            month=params.month,
        )
    except ValidationError:
        raise
    except Exception as e:
        raise _failure(request, "Error fetching transactions", e)


# ----------------------------------------------------------------
# Monthly statistics
# ----------------------------------------------------------------

@router.get("/statistics", response_model=SalesStatisticsResponse)
def get_sales_statistics(
    request: Request,
    params: MonthParams = Depends(month_params),
    service: TransactionQueryService = Depends(get_service),
):
    """Total sale amount, sold items and unsold items for a month."""
    try:
        return service.get_sales_statistics(params.month)
    except ValidationError:
        raise
    except Exception as e:
        raise _failure(request, "Error fetching sales statistics", e)


@router.get("/price-range", response_model=List[PriceRangeBucket])
def get_price_range_data(
    request: Request,
    params: MonthParams = Depends(month_params),
    service: TransactionQueryService = Depends(get_service),
):
    """Price histogram for a month: buckets of 100 plus "901 and above"."""
    try:
        return service.get_price_ranges(params.month)
    except ValidationError:
        raise
    except Exception as e:
        raise _failure(request, "Error fetching price range data", e)


@router.get("/categories", response_model=List[CategoryCount])
def get_category_data(
    request: Request,
    params: MonthParams = Depends(month_params),
    service: TransactionQueryService = Depends(get_service),
):
    """Number of items per category for a month."""
    try:
        return service.get_categories(params.month)
    except ValidationError:
        raise
    except Exception as e:
        raise _failure(request, "Error fetching category data", e)


@router.get("/combined", response_model=CombinedResponse)
def get_combined_data(
    request: Request,
    params: MonthParams = Depends(month_params),
    service: TransactionQueryService = Depends(get_service),
):
    """Statistics, price ranges and categories for a month in one response."""
    try:
        return service.get_combined(params.month)
    except ValidationError:
        raise
    except Exception as e:
        raise _failure(request, "Error fetching combined data", e)


# ----------------------------------------------------------------
# Application
# ----------------------------------------------------------------

def create_app(
    db: Optional[DatabaseManager] = None,
    provider: Optional[ProductFeedProvider] = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        db: Transactions store (opened from settings at startup if omitted)
        provider: Product feed fetcher (built from settings if omitted)
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the database connection unless one was injected; close it on shutdown."""
        if app.state.service is None:
            try:
                app.state.db = DatabaseManager()
                logger.info(f"Connected to database: {app.state.db.db_uri}")
            except ServiceError as e:
                logger.error(f"Failed to connect to database: {e}")
                raise
            app.state.service = TransactionQueryService(app.state.db, provider)
        yield
        if app.state.owns_db and app.state.db is not None:
            app.state.db.close()
            logger.info("Database connection closed")

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Enable CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.owns_db = db is None
    app.state.db = db
    app.state.service = TransactionQueryService(db, provider) if db is not None else None

    @app.get("/", tags=["Health"])
    def root():
        """API health check."""
        return {"message": "API is running..."}

    app.include_router(router)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning(f"Rejected {request.url.path}: {exc} (params={dict(request.query_params)})")
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid parameters for {request.url.path}: {dict(request.query_params)}")
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid query parameters", "error": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = exc.detail
        elif exc.status_code == 404:
            content = {"message": "Route not found"}
        else:
            content = {"message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        logger.error(f"Unhandled service error on {request.url.path}: {exc}")
        return JSONResponse(status_code=exc.status_code, content={"message": "Internal server error", "error": str(exc)})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level="info"
    )
