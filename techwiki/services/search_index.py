"""
Full-text index maintenance.

Keeps the articles_fts table in step with the articles table. The hooks
never begin or commit a transaction: the article store calls them inside
the same unit of work as the row change, so an index mutation and its
article write commit or roll back together.
"""

import logging
import sqlite3

from techwiki.models.article import ArticleRecord, IndexConsistency

logger = logging.getLogger(__name__)

_INSERT_SQL = """
    INSERT INTO articles_fts (rowid, title, body, category, topic, slug)
    VALUES (?, ?, ?, ?, ?, ?)
"""


def _index_values(article: ArticleRecord) -> tuple:
    """Map an article onto the indexed field set."""
    return (
        article.id,
        article.topic,
        article.markdown,
        article.category,
        article.topic,
        article.slug,
    )


class SearchIndex:
    """Write hooks and maintenance for the full-text index."""

    @staticmethod
    def on_article_inserted(conn: sqlite3.Connection, article: ArticleRecord) -> None:
        """Add the index entry for a newly inserted article."""
        try:
            conn.execute(_INSERT_SQL, _index_values(article))
        except sqlite3.Error as e:
            logger.error(f"Failed to index article {article.id}: {e}")
            raise

        logger.debug(f"Indexed article {article.id} ({article.category}/{article.slug})")

    @staticmethod
    def on_article_updated(
        conn: sqlite3.Connection,
        old: ArticleRecord,
        new: ArticleRecord,
    ) -> None:
        """
        Replace the index entry of an updated article.

        Raises:
            ValueError: If old and new describe different articles
        """
        if old.id != new.id:
            raise ValueError(f"Article id changed during update: {old.id} -> {new.id}")

        try:
            conn.execute("DELETE FROM articles_fts WHERE rowid = ?", (old.id,))
            conn.execute(_INSERT_SQL, _index_values(new))
        except sqlite3.Error as e:
            logger.error(f"Failed to reindex article {new.id}: {e}")
            raise

        logger.debug(f"Reindexed article {new.id}")

    @staticmethod
    def on_article_deleted(conn: sqlite3.Connection, article: ArticleRecord) -> None:
        """Remove the index entry of a deleted article."""
        try:
            conn.execute("DELETE FROM articles_fts WHERE rowid = ?", (article.id,))
        except sqlite3.Error as e:
            logger.error(f"Failed to remove article {article.id} from index: {e}")
            raise

        logger.debug(f"Removed article {article.id} from index")

    @staticmethod
    def rebuild(conn: sqlite3.Connection) -> int:
        """
        Re-derive the whole index from the article table.

        Runs as a single transaction; readers see either the old or the
        rebuilt index.

        Returns:
            Number of articles indexed
        """
        try:
            with conn:
                conn.execute("DELETE FROM articles_fts")
                conn.execute(
                    """
                    INSERT INTO articles_fts (rowid, title, body, category, topic, slug)
                    SELECT id, topic, markdown, category, topic, slug FROM articles
                    """
                )
                indexed = conn.execute("SELECT COUNT(*) FROM articles_fts").fetchone()[0]
        except sqlite3.Error as e:
            logger.error(f"Index rebuild failed: {e}")
            raise

        logger.info(f"Rebuilt full-text index ({indexed} articles)")
        return indexed

    @staticmethod
    def check_consistency(conn: sqlite3.Connection) -> IndexConsistency:
        """Compare article ids against index rowids."""
        article_count = conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0]
        index_count = conn.execute("SELECT COUNT(*) FROM articles_fts").fetchone()[0]

        missing = [
            row[0]
            for row in conn.execute(
                """
                SELECT a.id FROM articles a
                WHERE NOT EXISTS (SELECT 1 FROM articles_fts f WHERE f.rowid = a.id)
                ORDER BY a.id ASC
                """
            )
        ]
        orphaned = [
            row[0]
            for row in conn.execute(
                """
                SELECT f.rowid FROM articles_fts f
                WHERE NOT EXISTS (SELECT 1 FROM articles a WHERE a.id = f.rowid)
                ORDER BY f.rowid ASC
                """
            )
        ]

        return IndexConsistency(
            article_count=article_count,
            index_count=index_count,
            missing=missing,
            orphaned=orphaned,
        )
