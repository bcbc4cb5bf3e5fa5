"""
FastAPI Main Application
Entry point for the revenue cycle API server
Source: https://fastapi.tiangolo.com/
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from revcycle import __version__
from revcycle.api.routes import claims, denials, eligibility, health, remittances, revenue
from revcycle.core.config import get_settings
from revcycle.utils.logging import get_logger, setup_logging

settings = get_settings()

setup_logging(
    level=settings.LOG_LEVEL,
    log_file=settings.LOG_FILE,
    json_logs=settings.JSON_LOGS or settings.is_production,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]  # noqa: ARG001
    """Application lifespan manager."""
    logger.info(f"Starting revenue cycle API in {settings.ENVIRONMENT} mode")
    logger.info(f"Debug mode: {settings.DEBUG}")

    yield

    logger.info("Shutting down revenue cycle API")


app = FastAPI(
    title="Revenue Cycle API",
    description="Claim lifecycle, remittance posting, denial management and revenue metrics",
    version=__version__,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    openapi_url="/openapi.json" if not settings.is_production else None,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(claims.router)
app.include_router(eligibility.router)
app.include_router(remittances.router)
app.include_router(denials.router)
app.include_router(revenue.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Revenue Cycle API",
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "docs": "/docs" if not settings.is_production else "disabled",
    }
