"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.api.v1 import documents, health
from backoffice.config import settings
from backoffice.db import dispose_engine
from backoffice.logging import setup_logging

# Configure logging before anything else
setup_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    logger.info(
        "Starting Back-office API",
        debug=settings.debug,
        number_width=settings.number_width,
        number_max_attempts=settings.number_max_attempts,
    )

    yield

    logger.info("Shutting down Back-office API")
    await dispose_engine()
    logger.info("Database connections disposed")


app = FastAPI(
    title="Back-office API",
    description="Inventory, sales, quotations and purchasing back-office",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(documents.router, prefix="/api/v1", tags=["documents"])
