"""
FastAPI Application Entry Point.

This module initializes the FastAPI application, loads the reference
catalog once at startup and includes all routers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from healthflow.config import settings
from healthflow.api.router import api_router
from healthflow.core import metrics
from healthflow.core.exceptions import LocationNotFound, PathwayError, ProcedureNotFound, StoreFailure
from healthflow.core.rate_limiter import limiter, rate_limit_exceeded_handler
from healthflow.core.sentry import init_sentry
from healthflow.middleware.metrics_middleware import MetricsMiddleware
from healthflow.services.advisory_service import get_advisory_grounder
from healthflow.services.catalog_service import ReferenceCatalog, load_from_path

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: the catalog is built once and only read afterwards
    init_sentry(settings.SENTRY_DSN, environment=settings.ENVIRONMENT)
    app.state.catalog = load_from_path(settings.REFERENCE_DATA_PATH)
    if app.state.catalog.is_empty:
        logger.warning("Starting in degraded mode: catalog and national-average tiers unavailable")
    logger.info(f"{settings.APP_NAME} ready ({settings.ENVIRONMENT})")
    yield
    # Shutdown
    app.state.catalog = ReferenceCatalog.empty()
    logger.info(f"{settings.APP_NAME} shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="Out-of-pocket cost estimates, hidden costs and eligible hospitals for medical procedures",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# ============================================
# Domain error handlers
# ============================================

@app.exception_handler(LocationNotFound)
@app.exception_handler(ProcedureNotFound)
async def not_found_handler(request: Request, exc: PathwayError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": exc.message},
    )


@app.exception_handler(StoreFailure)
async def store_failure_handler(request: Request, exc: StoreFailure) -> JSONResponse:
    logger.error(f"Store failure on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Server error"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)

app.include_router(api_router)
app.include_router(metrics.router, tags=["Monitoring"])


@app.get("/health", tags=["Health"])
async def health_check(request: Request) -> dict:
    """
    Health check endpoint.

    Returns:
        dict: Status, catalog size and advisory configuration.
    """
    catalog = getattr(request.app.state, "catalog", None)
    countries = len(catalog) if catalog is not None else 0
    return {
        "status": "healthy" if countries else "degraded",
        "catalog_countries": countries,
        "advisory": get_advisory_grounder().get_status(),
    }
