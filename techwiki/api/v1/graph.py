"""
Graph API endpoints.

Provides the category/topic/cross-reference graph for visualization.
"""

import logging
import sqlite3
import time

from fastapi import APIRouter, Depends, Query, Request, Response

from techwiki.api.errors import error_response, internal_error, storage_unavailable
from techwiki.db import get_db
from techwiki.models.common import ErrorResponse
from techwiki.models.graph import GraphMode, GraphResponse
from techwiki.rate_limit import limiter
from techwiki.services import GraphService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["graph"])


def get_graph_service(request: Request) -> GraphService:
    """FastAPI dependency returning the process-wide graph service."""
    return request.app.state.graph_service


@router.get(
    "/graph",
    response_model=GraphResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
@limiter.limit("20/minute")
def get_graph(
    request: Request,  # noqa: ARG001 - required by slowapi limiter
    response: Response,
    mode: GraphMode = Query("linked", description="basic (topology only) or linked"),
    max_cross_edges: int | None = Query(
        None, ge=0, le=10000, description="Cross-edge budget (default 1500)"
    ),
    limit: int | None = Query(None, ge=1, le=10000, description="Maximum articles considered"),
    conn: sqlite3.Connection = Depends(get_db),
    graph_service: GraphService = Depends(get_graph_service),
):
    """
    Get the knowledge graph.

    Returns category and topic nodes with category-membership edges and,
    in linked mode, cross edges derived from in-article links.
    """
    response.headers["Cache-Control"] = "public, max-age=300"

    start_time = time.time()

    try:
        payload = graph_service.build_graph(
            conn=conn,
            mode=mode,
            max_cross_edges=max_cross_edges,
            limit=limit,
        )

    except ValueError as e:
        logger.warning(f"Graph query error: {e}")
        return error_response(400, "INVALID_PARAMETER", str(e))

    except sqlite3.Error as e:
        logger.error(f"Graph storage error: {e}")
        return storage_unavailable()

    except Exception as e:
        logger.error(f"Unexpected error in graph endpoint: {e}", exc_info=True)
        return internal_error()

    execution_time_ms = (time.time() - start_time) * 1000

    return GraphResponse(
        mode=mode,
        nodes=payload.nodes,
        edges=payload.edges,
        total_nodes=len(payload.nodes),
        total_edges=len(payload.edges),
        execution_time_ms=execution_time_ms,
    )
