"""
Student ERP API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging
- Database, rate limiter, email client and upload storage (app.state)
- CORS middleware
- API routing
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from erp.api import api_router
from erp.core.config import settings
from erp.core.database import Database
from erp.core.email import EmailClient
from erp.core.logging_config import configure_logging
from erp.core.rate_limit import RateLimiter
from erp.core.storage import LocalFileStorage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Builds the process-wide clients on startup and releases them on shutdown:
    - Database engine
    - Rate limiter (Redis, memory fallback)
    - Email client
    - Upload storage
    """
    configure_logging(settings.log_level, json_logs=not settings.is_development)
    logger.info(f"Starting Student ERP API in {settings.python_env} mode...")

    database = Database(
        settings.async_database_url,
        echo=settings.db_echo,
        pooled=settings.is_production,
    )
    try:
        await database.ping()
        logger.info("[OK] Database connected")
    except Exception as e:
        logger.error(f"[FAIL] Database connection failed: {e}")
        if settings.is_production:
            raise

    rate_limiter = await RateLimiter.connect(settings.redis_url)
    if rate_limiter.redis_client is not None:
        logger.info("[OK] Redis connected")
    elif settings.is_production:
        logger.warning("Rate limiting is per-process: Redis is unavailable")

    app.state.database = database
    app.state.rate_limiter = rate_limiter
    app.state.email_client = EmailClient(
        api_key=settings.resend_api_key,
        sender=settings.email_from,
        frontend_url=settings.frontend_url,
    )
    app.state.storage = LocalFileStorage(settings.upload_dir)

    yield  # Application runs here

    logger.info("Shutting down Student ERP API...")
    await rate_limiter.close()
    await database.close()
    logger.info("[OK] Cleanup complete")


app = FastAPI(
    title="Student ERP API",
    description="Student onboarding, batches and communications API",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": {"error": "INTERNAL_ERROR", "message": "An unexpected error occurred."}},
    )


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to Student ERP API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness check endpoint. Not ready while the database is unreachable."""
    try:
        await request.app.state.database.ping()
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "not ready"})
    return JSONResponse(content={"status": "ready"})
