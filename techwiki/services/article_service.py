"""
Article service for TechWiki.

Minimal article store: persistence of (category, slug) -> Markdown records,
listings, and the corpus read used by the graph builder. Every write runs
in one transaction together with the matching full-text index hook.
"""

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from techwiki.db.schema import ARTICLE_STATUSES
from techwiki.models.article import (
    ArticleRecord,
    ArticleSummary,
    CategoryInfo,
    CategoryListResponse,
    CorpusRow,
    StatsResponse,
)
from techwiki.services.search_index import SearchIndex
from techwiki.services.search_service import SearchService
from techwiki.services.slug_utils import slugify

logger = logging.getLogger(__name__)

_SUMMARY_COLUMNS = "id, category, slug, topic, updated_at, views"


def _utc_now() -> str:
    """Fixed-width UTC timestamp; text order equals chronological order."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


@contextmanager
def _write_transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Article write plus index hook as one unit: commit together or roll back together."""
    with conn:
        conn.execute("BEGIN IMMEDIATE")
        yield conn


def _normalize_key(value: str) -> str:
    return value.strip().lower()


def _check_status(status: str) -> None:
    if status not in ARTICLE_STATUSES:
        raise ValueError(f"Invalid status: {status} (expected one of {', '.join(ARTICLE_STATUSES)})")


def _encode_references(references: list[Any] | None) -> str | None:
    if not references:
        return None
    return json.dumps(
        [ref.model_dump() if hasattr(ref, "model_dump") else ref for ref in references]
    )


def _row_to_record(row: sqlite3.Row) -> ArticleRecord:
    references_json = row["references_json"]
    return ArticleRecord(
        id=row["id"],
        category=row["category"],
        slug=row["slug"],
        topic=row["topic"],
        markdown=row["markdown"],
        references=json.loads(references_json) if references_json else None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        version=row["version"],
        views=row["views"],
        status=row["status"],
    )


def _row_to_summary(row: sqlite3.Row) -> ArticleSummary:
    return ArticleSummary(
        id=row["id"],
        category=row["category"],
        slug=row["slug"],
        topic=row["topic"],
        updated_at=row["updated_at"],
        views=row["views"],
    )


class ArticleService:
    """Service for article operations."""

    @staticmethod
    def get_article(conn: sqlite3.Connection, category: str, slug: str) -> ArticleRecord | None:
        """Look up an article by its case-insensitive (category, slug) key."""
        row = conn.execute(
            "SELECT * FROM articles WHERE category = ? AND slug = ? LIMIT 1",
            (_normalize_key(category), _normalize_key(slug)),
        ).fetchone()
        return _row_to_record(row) if row else None

    @staticmethod
    def get_article_by_id(conn: sqlite3.Connection, article_id: int) -> ArticleRecord | None:
        """Look up an article by id."""
        row = conn.execute("SELECT * FROM articles WHERE id = ? LIMIT 1", (article_id,)).fetchone()
        return _row_to_record(row) if row else None

    @staticmethod
    def create_article(
        conn: sqlite3.Connection,
        category: str,
        topic: str,
        markdown: str,
        slug: str | None = None,
        status: str = "published",
        references: list[Any] | None = None,
    ) -> ArticleRecord:
        """
        Insert a new article and its index entry.

        Args:
            conn: SQLite connection
            category: Category key (normalized to lower case)
            topic: Display title
            markdown: Article body
            slug: Slug; derived from the topic when omitted
            status: draft, approved or published
            references: Optional list of {title, url} references

        Returns:
            The stored ArticleRecord

        Raises:
            ValueError: If a key is empty, the status is unknown, or the
                (category, slug) pair already exists
            sqlite3.Error: If the write fails; nothing is persisted
        """
        category = _normalize_key(category)
        slug = _normalize_key(slug) if slug else slugify(topic)
        topic = topic.strip()
        if not category or not slug or not topic:
            raise ValueError("category, slug and topic must be non-empty")
        _check_status(status)

        now = _utc_now()
        with _write_transaction(conn):
            if ArticleService.get_article(conn, category, slug) is not None:
                raise ValueError(f"Article already exists: {category}/{slug}")

            cursor = conn.execute(
                """
                INSERT INTO articles (
                    category, topic, slug, markdown, references_json,
                    created_at, updated_at, status
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    category,
                    topic,
                    slug,
                    markdown,
                    _encode_references(references),
                    now,
                    now,
                    status,
                ),
            )
            record = ArticleService.get_article_by_id(conn, cursor.lastrowid)
            SearchIndex.on_article_inserted(conn, record)

        logger.info(f"Created article {record.id} ({category}/{slug})")
        return record

    @staticmethod
    def update_article(
        conn: sqlite3.Connection,
        article_id: int,
        markdown: str | None = None,
        topic: str | None = None,
        status: str | None = None,
        references: list[Any] | None = None,
    ) -> ArticleRecord:
        """
        Update an article's content and reindex it in the same transaction.

        Bumps version and updated_at. Fields left as None keep their value.

        Raises:
            ValueError: If the article does not exist or the status is unknown
        """
        if status is not None:
            _check_status(status)

        with _write_transaction(conn):
            old = ArticleService.get_article_by_id(conn, article_id)
            if old is None:
                raise ValueError("Article not found")

            conn.execute(
                """
                UPDATE articles
                SET topic = ?, markdown = ?, references_json = ?, status = ?,
                    updated_at = ?, version = version + 1
                WHERE id = ?
                """,
                (
                    topic.strip() if topic else old.topic,
                    markdown if markdown is not None else old.markdown,
                    _encode_references(references if references is not None else old.references),
                    status or old.status,
                    _utc_now(),
                    article_id,
                ),
            )
            new = ArticleService.get_article_by_id(conn, article_id)
            SearchIndex.on_article_updated(conn, old, new)

        logger.info(f"Updated article {article_id} to version {new.version}")
        return new

    @staticmethod
    def upsert_article(
        conn: sqlite3.Connection,
        category: str,
        topic: str,
        markdown: str,
        slug: str | None = None,
        status: str = "published",
        references: list[Any] | None = None,
    ) -> ArticleRecord:
        """Create the article, or update it when (category, slug) already exists."""
        slug = _normalize_key(slug) if slug else slugify(topic)
        existing = ArticleService.get_article(conn, category, slug)
        if existing is None:
            return ArticleService.create_article(
                conn,
                category=category,
                topic=topic,
                markdown=markdown,
                slug=slug,
                status=status,
                references=references,
            )

        return ArticleService.update_article(
            conn,
            existing.id,
            markdown=markdown,
            topic=topic,
            status=status,
            references=references,
        )

    @staticmethod
    def set_status(conn: sqlite3.Connection, article_id: int, status: str) -> ArticleRecord:
        """Change publication status (for example to hide a draft from the graph)."""
        _check_status(status)

        with _write_transaction(conn):
            old = ArticleService.get_article_by_id(conn, article_id)
            if old is None:
                raise ValueError("Article not found")
            conn.execute("UPDATE articles SET status = ? WHERE id = ?", (status, article_id))
            new = ArticleService.get_article_by_id(conn, article_id)
            SearchIndex.on_article_updated(conn, old, new)

        return new

    @staticmethod
    def delete_article(conn: sqlite3.Connection, article_id: int) -> bool:
        """
        Delete an article and its index entry.

        Returns:
            True if an article was deleted, False if it did not exist
        """
        with _write_transaction(conn):
            existing = ArticleService.get_article_by_id(conn, article_id)
            if existing is None:
                return False
            conn.execute("DELETE FROM articles WHERE id = ?", (article_id,))
            SearchIndex.on_article_deleted(conn, existing)

        logger.info(f"Deleted article {article_id} ({existing.category}/{existing.slug})")
        return True

    @staticmethod
    def increment_views(conn: sqlite3.Connection, article_id: int) -> None:
        """Bump the view counter. No indexed field changes, so the index is untouched."""
        with _write_transaction(conn):
            conn.execute("UPDATE articles SET views = views + 1 WHERE id = ?", (article_id,))

    @staticmethod
    def list_recent(conn: sqlite3.Connection, limit: int = 10) -> list[ArticleSummary]:
        """Newest non-draft articles first."""
        rows = conn.execute(
            f"""
            SELECT {_SUMMARY_COLUMNS} FROM articles
            WHERE status != 'draft'
            ORDER BY updated_at DESC, id ASC
            LIMIT ?
            """,
            (limit,),
        ).fetchall()
        return [_row_to_summary(row) for row in rows]

    @staticmethod
    def list_trending(conn: sqlite3.Connection, limit: int = 10) -> list[ArticleSummary]:
        """Most viewed non-draft articles first."""
        rows = conn.execute(
            f"""
            SELECT {_SUMMARY_COLUMNS} FROM articles
            WHERE status != 'draft'
            ORDER BY views DESC, updated_at DESC, id ASC
            LIMIT ?
            """,
            (limit,),
        ).fetchall()
        return [_row_to_summary(row) for row in rows]

    @staticmethod
    def list_articles(
        conn: sqlite3.Connection,
        query: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ArticleSummary]:
        """
        List articles, optionally narrowed by a full-text query.

        With a query the ranked search results are returned (up to limit);
        otherwise non-draft articles are paged by last update.
        """
        if query and query.strip():
            results = SearchService.search(conn, query)
            ids = [result.id for result in results[:limit]]
            if not ids:
                return []
            placeholders = ",".join("?" for _ in ids)
            rows = conn.execute(
                f"SELECT {_SUMMARY_COLUMNS} FROM articles WHERE id IN ({placeholders})",
                ids,
            ).fetchall()
            by_id = {row["id"]: row for row in rows}
            return [_row_to_summary(by_id[i]) for i in ids if i in by_id]

        rows = conn.execute(
            f"""
            SELECT {_SUMMARY_COLUMNS} FROM articles
            WHERE status != 'draft'
            ORDER BY updated_at DESC, id ASC
            LIMIT ? OFFSET ?
            """,
            (limit, offset),
        ).fetchall()
        return [_row_to_summary(row) for row in rows]

    @staticmethod
    def read_corpus(
        conn: sqlite3.Connection,
        include_markdown: bool,
        limit: int | None = None,
    ) -> list[CorpusRow]:
        """
        Read the non-draft corpus for graph construction.

        Ordered by views, then recency, then id. Markdown is only selected
        when include_markdown is set.
        """
        fields = "id, category, slug, topic" + (", markdown" if include_markdown else "")
        sql = f"""
            SELECT {fields}
            FROM articles
            WHERE status != 'draft'
            ORDER BY views DESC, updated_at DESC, id ASC
        """
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)

        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Corpus read failed: {e}")
            raise

        return [
            CorpusRow(
                id=row["id"],
                category=row["category"],
                slug=row["slug"],
                topic=row["topic"],
                markdown=row["markdown"] if include_markdown else None,
            )
            for row in rows
        ]

    @staticmethod
    def get_categories(conn: sqlite3.Connection) -> CategoryListResponse:
        """
        Get list of all categories with non-draft article counts.

        Args:
            conn: SQLite connection

        Returns:
            CategoryListResponse sorted by count (descending), then name
        """
        rows = conn.execute(
            """
            SELECT category, COUNT(*) AS count
            FROM articles
            WHERE status != 'draft'
            GROUP BY category
            ORDER BY count DESC, category ASC
            """
        ).fetchall()

        categories = [CategoryInfo(name=row["category"], article_count=row["count"]) for row in rows]

        return CategoryListResponse(
            categories=categories,
            total=len(categories),
        )

    @staticmethod
    def get_stats(conn: sqlite3.Connection, db_path: str) -> StatsResponse:
        """
        Get article, index and database statistics.

        Args:
            conn: SQLite connection
            db_path: Path to database file

        Returns:
            StatsResponse
        """
        by_status = {status: 0 for status in ARTICLE_STATUSES}
        for row in conn.execute("SELECT status, COUNT(*) AS count FROM articles GROUP BY status"):
            by_status[row["status"]] = row["count"]

        by_category = {
            row["category"]: row["count"]
            for row in conn.execute(
                """
                SELECT category, COUNT(*) AS count FROM articles
                GROUP BY category ORDER BY count DESC, category ASC
                """
            )
        }

        total_views = conn.execute("SELECT COALESCE(SUM(views), 0) FROM articles").fetchone()[0]

        articles = {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_category": by_category,
            "total_views": total_views,
        }

        db_size_mb = 0.0
        db_file = Path(db_path)
        if db_file.exists():
            try:
                db_size_mb = db_file.stat().st_size / (1024 * 1024)
            except OSError:
                db_size_mb = 0.0

        database = {
            "size_mb": round(db_size_mb, 2),
            "path": str(db_file),
        }

        return StatsResponse(
            articles=articles,
            index=SearchIndex.check_consistency(conn),
            database=database,
        )
