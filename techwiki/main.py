"""
TechWiki API.

FastAPI application serving full-text search and the knowledge graph
for the TechWiki encyclopedia.
"""

import logging
import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from techwiki.api.errors import unhandled_error_handler, validation_error_handler
from techwiki.api.v1 import articles, graph, search
from techwiki.config import settings
from techwiki.db import get_db
from techwiki.models.common import HealthResponse
from techwiki.rate_limit import limiter
from techwiki.services import GraphCache, GraphService

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application lifespan handler for startup and shutdown."""
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")
    logger.info(f"Database: {settings.database_path}")
    logger.info(
        f"Search cap: {settings.search_max_results}, graph cross-edge budget: "
        f"{settings.graph_max_cross_edges}, graph cache: {settings.graph_cache_ms}ms"
    )
    yield
    logger.info("Shutting down TechWiki API")


# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description=settings.api_description,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# One graph service (and its single-slot cache) per process
app.state.graph_service = GraphService(cache=GraphCache())

# Register rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)

# Include routers
app.include_router(graph.router)
app.include_router(search.router)
app.include_router(articles.router)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    # Strict CSP for API routes; skip for docs pages that need inline scripts
    if request.url.path not in ("/docs", "/redoc", "/openapi.json"):
        response.headers["Content-Security-Policy"] = "default-src 'none'"
    return response


@app.get("/health", response_model=HealthResponse)
def health_check(
    response: Response,
    conn: sqlite3.Connection = Depends(get_db),
):
    """
    Health check endpoint.

    Returns service status and database connectivity.
    """
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"

    article_count = None
    try:
        article_count = conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0]
        db_status = "connected"
        status = "healthy"

    except sqlite3.Error as e:
        logger.error(f"Health check failed: {e}")
        db_status = "disconnected"
        status = "unhealthy"

    return HealthResponse(
        status=status,
        version=settings.api_version,
        database=db_status,
        articles=article_count,
        timestamp=datetime.now(timezone.utc),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "techwiki.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level="info",
    )
