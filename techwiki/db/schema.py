"""
SQLite schema for the article store and its full-text index.
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)

ARTICLE_STATUSES = ("draft", "approved", "published")

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS articles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        category TEXT NOT NULL,
        topic TEXT NOT NULL,
        slug TEXT NOT NULL,
        markdown TEXT NOT NULL,
        references_json TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        version INTEGER NOT NULL DEFAULT 1,
        views INTEGER NOT NULL DEFAULT 0,
        status TEXT NOT NULL DEFAULT 'published'
            CHECK (status IN ('draft', 'approved', 'published'))
    );

    CREATE UNIQUE INDEX IF NOT EXISTS idx_articles_category_slug
        ON articles (category, slug);
    CREATE INDEX IF NOT EXISTS idx_articles_views
        ON articles (views DESC, updated_at DESC);
    CREATE INDEX IF NOT EXISTS idx_articles_updated
        ON articles (updated_at DESC);

    -- One row per article id (rowid = articles.id), kept in sync by
    -- SearchIndex inside the article write transaction.
    CREATE VIRTUAL TABLE IF NOT EXISTS articles_fts USING fts5(
        title,
        body,
        category,
        topic,
        slug
    );
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they do not exist yet."""
    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    except sqlite3.Error as e:
        logger.error(f"Failed to create schema: {e}")
        raise

    logger.debug("Article schema ready")
