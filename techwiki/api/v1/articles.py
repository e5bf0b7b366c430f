"""
Articles API endpoints.

Provides article lookup, listings, categories, and statistics.
"""

import logging
import sqlite3

from fastapi import APIRouter, Depends, Path, Query, Request, Response

from techwiki.api.errors import error_response, internal_error, storage_unavailable
from techwiki.config import settings
from techwiki.db import get_db
from techwiki.models.article import (
    ArticleListResponse,
    ArticleRecord,
    CategoryListResponse,
    StatsResponse,
)
from techwiki.models.common import ErrorResponse
from techwiki.rate_limit import limiter
from techwiki.services import ArticleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["articles"])

_ERROR_RESPONSES = {
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get(
    "/articles",
    response_model=ArticleListResponse,
    responses={400: {"model": ErrorResponse}, **_ERROR_RESPONSES},
)
@limiter.limit("30/minute")
def list_articles(
    request: Request,  # noqa: ARG001 - required by slowapi limiter
    response: Response,
    q: str | None = Query(None, description="Optional full-text filter"),
    limit: int = Query(50, ge=1, le=100, description="Maximum articles"),
    offset: int = Query(0, ge=0, description="Offset for unfiltered listings"),
    conn: sqlite3.Connection = Depends(get_db),
):
    """
    List articles.

    With q, returns ranked search matches; otherwise the newest
    non-draft articles.
    """
    response.headers["Cache-Control"] = "private, max-age=60"

    try:
        results = ArticleService.list_articles(conn=conn, query=q, limit=limit, offset=offset)
        return ArticleListResponse(results=results, total=len(results))

    except sqlite3.Error as e:
        logger.error(f"Article listing storage error: {e}")
        return storage_unavailable()

    except Exception as e:
        logger.error(f"Unexpected error in articles endpoint: {e}", exc_info=True)
        return internal_error()


@router.get(
    "/articles/recent",
    response_model=ArticleListResponse,
    responses=_ERROR_RESPONSES,
)
@limiter.limit("30/minute")
def list_recent_articles(
    request: Request,  # noqa: ARG001 - required by slowapi limiter
    response: Response,
    limit: int = Query(10, ge=1, le=50, description="Maximum articles"),
    conn: sqlite3.Connection = Depends(get_db),
):
    """Most recently updated non-draft articles."""
    response.headers["Cache-Control"] = "public, max-age=60"

    try:
        results = ArticleService.list_recent(conn=conn, limit=limit)
        return ArticleListResponse(results=results, total=len(results))

    except sqlite3.Error as e:
        logger.error(f"Recent articles storage error: {e}")
        return storage_unavailable()


@router.get(
    "/articles/trending",
    response_model=ArticleListResponse,
    responses=_ERROR_RESPONSES,
)
@limiter.limit("30/minute")
def list_trending_articles(
    request: Request,  # noqa: ARG001 - required by slowapi limiter
    response: Response,
    limit: int = Query(10, ge=1, le=50, description="Maximum articles"),
    conn: sqlite3.Connection = Depends(get_db),
):
    """Most viewed non-draft articles."""
    response.headers["Cache-Control"] = "public, max-age=60"

    try:
        results = ArticleService.list_trending(conn=conn, limit=limit)
        return ArticleListResponse(results=results, total=len(results))

    except sqlite3.Error as e:
        logger.error(f"Trending articles storage error: {e}")
        return storage_unavailable()


@router.get(
    "/articles/{category}/{slug}",
    response_model=ArticleRecord,
    responses={404: {"model": ErrorResponse}, **_ERROR_RESPONSES},
)
@limiter.limit("60/minute")
def get_article(
    request: Request,  # noqa: ARG001 - required by slowapi limiter
    response: Response,
    category: str = Path(..., max_length=200, description="Category key"),
    slug: str = Path(..., max_length=200, description="Article slug"),
    conn: sqlite3.Connection = Depends(get_db),
):
    """
    Get a stored article by category and slug (case-insensitive).
    """
    response.headers["Cache-Control"] = "public, max-age=300"

    try:
        article = ArticleService.get_article(conn=conn, category=category, slug=slug)

    except sqlite3.Error as e:
        logger.error(f"Article lookup storage error: {e}")
        return storage_unavailable()

    if article is None:
        logger.warning(f"Article not found: {category}/{slug}")
        return error_response(404, "NOT_FOUND", f"Article not found: {category}/{slug}")

    return article


@router.get(
    "/categories",
    response_model=CategoryListResponse,
    responses=_ERROR_RESPONSES,
)
@limiter.limit("30/minute")
def get_categories(
    request: Request,  # noqa: ARG001 - required by slowapi limiter
    response: Response,
    conn: sqlite3.Connection = Depends(get_db),
):
    """
    Get list of all categories with article counts.

    Returns categories sorted by article count (descending).
    """
    response.headers["Cache-Control"] = "public, max-age=3600"

    try:
        return ArticleService.get_categories(conn=conn)

    except sqlite3.Error as e:
        logger.error(f"Categories storage error: {e}")
        return storage_unavailable()


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses=_ERROR_RESPONSES,
)
@limiter.limit("30/minute")
def get_stats(
    request: Request,  # noqa: ARG001 - required by slowapi limiter
    response: Response,
    conn: sqlite3.Connection = Depends(get_db),
):
    """
    Get article counts and full-text index health.
    """
    response.headers["Cache-Control"] = "no-cache"

    try:
        return ArticleService.get_stats(conn=conn, db_path=settings.database_path)

    except sqlite3.Error as e:
        logger.error(f"Stats storage error: {e}")
        return storage_unavailable()
