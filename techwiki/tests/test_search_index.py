"""
Tests for full-text index synchronization.

Every article write must leave exactly one index row per article, and a
failing index hook must roll the article write back with it.
"""

import sqlite3
from unittest.mock import patch

import pytest

from techwiki.services import ArticleService, SearchIndex, SearchService


def _index_row(conn, article_id):
    return conn.execute(
        "SELECT title, body, category, topic, slug FROM articles_fts WHERE rowid = ?",
        (article_id,),
    ).fetchone()


class TestIndexHooks:
    """Tests for the insert/update/delete hooks driven by the article store."""

    def test_insert_creates_one_index_row(self, conn, make_article):
        """Test that creating an article indexes it under its id."""
        article = make_article("dsa", "graphs", "Graphs", "Vertices and edges.")

        row = _index_row(conn, article.id)
        assert row is not None
        assert row["title"] == "Graphs"
        assert row["topic"] == "Graphs"
        assert row["body"] == "Vertices and edges."
        assert row["category"] == "dsa"
        assert row["slug"] == "graphs"

    def test_update_replaces_postings(self, conn, make_article):
        """Test that an update drops old terms and indexes new ones."""
        article = make_article("dsa", "trees", "Trees", "An acyclic connected structure.")

        ArticleService.update_article(conn, article.id, markdown="Splay rotations.")

        assert [r.id for r in SearchService.search(conn, "splay")] == [article.id]
        assert SearchService.search(conn, "acyclic") == []
        assert conn.execute("SELECT COUNT(*) FROM articles_fts").fetchone()[0] == 1

    def test_delete_removes_index_row(self, conn, make_article):
        """Test that deleting an article removes its index row."""
        article = make_article("dsa", "heaps", "Heaps", "Binary heap.")

        assert ArticleService.delete_article(conn, article.id) is True

        assert _index_row(conn, article.id) is None
        assert SearchService.search(conn, "heap") == []

    def test_view_increment_leaves_index_alone(self, conn, make_article):
        """Test that a views-only update does not touch the index."""
        article = make_article("dsa", "heaps", "Heaps", "Binary heap.")

        with patch.object(SearchIndex, "on_article_updated") as hook:
            ArticleService.increment_views(conn, article.id)

        hook.assert_not_called()
        assert ArticleService.get_article_by_id(conn, article.id).views == 1

    def test_update_with_mismatched_ids_raises(self, conn, make_article):
        """Test that the update hook refuses records of different articles."""
        first = make_article("dsa", "graphs", "Graphs", "one")
        second = make_article("dsa", "trees", "Trees", "two")

        with pytest.raises(ValueError, match="id changed"):
            SearchIndex.on_article_updated(conn, first, second)


class TestAtomicWrites:
    """Tests that an index failure rolls back the article write."""

    def test_failed_insert_hook_rolls_back_article(self, conn):
        """Test that no article row survives when indexing fails."""
        with patch.object(
            SearchIndex, "on_article_inserted", side_effect=sqlite3.OperationalError("disk I/O error")
        ):
            with pytest.raises(sqlite3.OperationalError):
                ArticleService.create_article(conn, "dsa", "Graphs", "Vertices.", slug="graphs")

        assert ArticleService.get_article(conn, "dsa", "graphs") is None
        assert SearchIndex.check_consistency(conn).article_count == 0

    def test_failed_update_hook_rolls_back_article(self, conn, make_article):
        """Test that content and version are unchanged when reindexing fails."""
        article = make_article("dsa", "trees", "Trees", "Original body.")

        with patch.object(
            SearchIndex, "on_article_updated", side_effect=sqlite3.OperationalError("locked")
        ):
            with pytest.raises(sqlite3.OperationalError):
                ArticleService.update_article(conn, article.id, markdown="New body.")

        stored = ArticleService.get_article_by_id(conn, article.id)
        assert stored.markdown == "Original body."
        assert stored.version == 1
        assert [r.id for r in SearchService.search(conn, "original")] == [article.id]

    def test_failed_delete_hook_keeps_article(self, conn, make_article):
        """Test that the article survives when index removal fails."""
        article = make_article("dsa", "heaps", "Heaps", "Binary heap.")

        with patch.object(
            SearchIndex, "on_article_deleted", side_effect=sqlite3.OperationalError("locked")
        ):
            with pytest.raises(sqlite3.OperationalError):
                ArticleService.delete_article(conn, article.id)

        assert ArticleService.get_article_by_id(conn, article.id) is not None
        assert SearchIndex.check_consistency(conn).consistent is True

    def test_duplicate_key_leaves_index_untouched(self, conn, make_article):
        """Test that a rejected duplicate create adds no index row."""
        make_article("dsa", "graphs", "Graphs", "Vertices.")

        with pytest.raises(ValueError, match="already exists"):
            ArticleService.create_article(conn, "DSA", "Graphs", "Other.", slug="Graphs")

        report = SearchIndex.check_consistency(conn)
        assert report.article_count == 1
        assert report.index_count == 1


class TestConsistency:
    """Tests for check_consistency() and rebuild()."""

    def test_seeded_corpus_is_consistent(self, conn, seeded_articles):
        """Test that regular writes keep the index consistent."""
        report = SearchIndex.check_consistency(conn)

        assert report.article_count == len(seeded_articles)
        assert report.index_count == len(seeded_articles)
        assert report.missing == []
        assert report.orphaned == []
        assert report.consistent is True

    def test_detects_missing_and_orphaned_rows(self, conn, seeded_articles):
        """Test that drift between the tables is reported."""
        graphs_id = seeded_articles["graphs"].id
        with conn:
            conn.execute("DELETE FROM articles_fts WHERE rowid = ?", (graphs_id,))
            conn.execute(
                "INSERT INTO articles_fts (rowid, title, body, category, topic, slug) "
                "VALUES (999, 'x', 'x', 'x', 'x', 'x')"
            )

        report = SearchIndex.check_consistency(conn)

        assert report.missing == [graphs_id]
        assert report.orphaned == [999]
        assert report.consistent is False

    def test_rebuild_repairs_index(self, conn, seeded_articles):
        """Test that rebuild re-derives one row per article."""
        with conn:
            conn.execute("DELETE FROM articles_fts")
            conn.execute(
                "INSERT INTO articles_fts (rowid, title, body, category, topic, slug) "
                "VALUES (999, 'x', 'x', 'x', 'x', 'x')"
            )

        indexed = SearchIndex.rebuild(conn)

        assert indexed == len(seeded_articles)
        assert SearchIndex.check_consistency(conn).consistent is True
        assert [r.id for r in SearchService.search(conn, "acyclic")] == [
            seeded_articles["trees"].id
        ]
