"""
Search service for TechWiki.

Ranks articles against the full-text index and builds highlighted snippets.
"""

import logging
import sqlite3
import time

from techwiki.config import settings
from techwiki.models.search import SearchResponse, SearchResult
from techwiki.services.tokenizer import build_match_expression, tokenize_query

logger = logging.getLogger(__name__)

HIGHLIGHT_OPEN = "<mark>"
HIGHLIGHT_CLOSE = "</mark>"
ELLIPSIS = "…"

# bm25 column weights in articles_fts column order:
# title, body, category, topic, slug
COLUMN_WEIGHTS = (10.0, 1.0, 2.0, 10.0, 2.0)


class SearchService:
    """Service for full-text search operations."""

    @staticmethod
    def search(
        conn: sqlite3.Connection,
        query: str | None,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """
        Rank articles matching every query token.

        Args:
            conn: SQLite connection
            query: Free-text query
            limit: Maximum results; never above settings.search_max_results

        Returns:
            Results ordered by relevance, ties broken by article id. Empty
            when the query has no searchable tokens, in which case the
            connection is not touched.

        Raises:
            sqlite3.Error: If the index cannot be read
        """
        tokens = tokenize_query(query)
        if not tokens:
            return []

        cap = settings.search_max_results
        limit = cap if limit is None else max(0, min(limit, cap))
        if limit == 0:
            return []

        weights = ", ".join(str(w) for w in COLUMN_WEIGHTS)
        sql = f"""
            SELECT a.id, a.category, a.slug, a.topic, a.updated_at,
                   snippet(articles_fts, 1, ?, ?, ?, ?) AS snippet
            FROM articles_fts
            JOIN articles a ON a.id = articles_fts.rowid
            WHERE articles_fts MATCH ?
            ORDER BY bm25(articles_fts, {weights}) ASC, a.id ASC
            LIMIT ?
        """
        params = (
            HIGHLIGHT_OPEN,
            HIGHLIGHT_CLOSE,
            ELLIPSIS,
            settings.snippet_tokens,
            build_match_expression(tokens),
            limit,
        )

        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Search query failed for {tokens}: {e}")
            raise

        results = [
            SearchResult(
                id=row["id"],
                category=row["category"],
                slug=row["slug"],
                topic=row["topic"],
                updated_at=row["updated_at"],
                snippet=row["snippet"] or "",
            )
            for row in rows
        ]

        logger.debug(f"Search {tokens} returned {len(results)} results")
        return results

    @staticmethod
    def search_response(
        conn: sqlite3.Connection,
        query: str | None,
        limit: int | None = None,
    ) -> SearchResponse:
        """Run search() and wrap the results with timing for the API."""
        start_time = time.time()

        results = SearchService.search(conn, query, limit=limit)

        execution_time_ms = (time.time() - start_time) * 1000

        return SearchResponse(
            query=query or "",
            results=results,
            total=len(results),
            execution_time_ms=execution_time_ms,
        )
