"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from farmledger.config import settings
from farmledger.middleware.error_handler import ErrorHandlerMiddleware
from farmledger.middleware.rate_limit import limiter
from farmledger.api.v1.routers import (
    activities,
    catalog,
    exports,
    harvests,
    plots,
    products,
    reports,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Loads the farm snapshot on startup and closes outbound clients on shutdown.
    """
    from farmledger.api.dependencies import get_farm_service
    from farmledger.infrastructure.insight_client import get_insight_client

    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Storage backend: {settings.storage_backend}")
    logger.info(f"Insight rate limit: {settings.rate_limit_requests} requests/minute")

    service = get_farm_service()
    await service.load()

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await service.store.close()
    await get_insight_client().close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Farm Management API

    Records plots, input inventory, management activities and harvests, and
    derives the financial figures shown on the dashboard and in reports.

    ## Features

    - **Records**: plots, products, activities (planned or completed) and harvests
    - **Financial Summary**: revenue, cost and profit per plot and for the farm
    - **Service Costs**: completed activity cost by activity type
    - **Harvest Statistics**: volume, revenue and classification split
    - **Calendar**: a month of activities grouped by day
    - **Exports**: CSV lists and full JSON backup/restore
    - **Insights**: AI-written analysis of the farm's finances

    ## Cost Rules

    1. An activity's cost is its labor plus its products, priced when it is saved
    2. Only completed activities count as cost
    3. Every harvest counts as revenue
    4. Records on a deleted plot still count towards the farm totals
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
for module in (plots, products, activities, harvests, catalog, reports, exports):
    app.include_router(module.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "storage": settings.storage_backend,
    }
