"""
Search API endpoints.

Provides full-text search over article content.
"""

import logging
import sqlite3

from fastapi import APIRouter, Depends, Query, Request, Response

from techwiki.api.errors import internal_error, storage_unavailable
from techwiki.db import get_db
from techwiki.models.common import ErrorResponse
from techwiki.models.search import SearchResponse
from techwiki.rate_limit import limiter
from techwiki.services import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["search"])


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
@limiter.limit("60/minute")
def search(
    request: Request,  # noqa: ARG001 - required by slowapi limiter
    response: Response,
    q: str = Query("", description="Free-text search query"),
    limit: int = Query(25, ge=1, le=25, description="Maximum results"),
    conn: sqlite3.Connection = Depends(get_db),
):
    """
    Full-text search across article titles, bodies, categories and slugs.

    An empty or punctuation-only query returns no results.
    """
    response.headers["Cache-Control"] = "private, max-age=60"

    try:
        return SearchService.search_response(conn=conn, query=q, limit=limit)

    except sqlite3.Error as e:
        logger.error(f"Search storage error: {e}")
        return storage_unavailable()

    except Exception as e:
        logger.error(f"Unexpected error in search endpoint: {e}", exc_info=True)
        return internal_error()
