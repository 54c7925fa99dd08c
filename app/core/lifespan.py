from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.core.config import settings
from app.core.logging import get_logger, setup_logging
from app.db.session import engine

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan function for the FastAPI application.
    Handles startup and shutdown events for application services.
    """
    # 1. Logging
    setup_logging(settings.LOG_LEVEL)

    # 2. Shared GitHub connection pool. Per-call timeouts are set by the client.
    app.state.github_http = httpx.AsyncClient(
        timeout=settings.GITHUB_TIMEOUT_SECONDS,
        limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
    )
    logger.info("%s started", settings.PROJECT_NAME)

    yield

    # 3. Close GitHub pool
    await app.state.github_http.aclose()

    # 4. Dispose Database Engine
    await engine.dispose()
