"""
Tests for the ranking engine.
"""

import sqlite3
from unittest.mock import Mock

import pytest

from techwiki.services import SearchService
from techwiki.services.search_service import HIGHLIGHT_CLOSE, HIGHLIGHT_OPEN


class TestSearchBasics:
    """Tests for matching semantics."""

    @pytest.mark.parametrize("query", ["", "   ", None, "?!.,", "--"])
    def test_empty_query_skips_storage(self, query):
        """Test that a query without tokens returns [] and never touches the connection."""
        conn = Mock()

        assert SearchService.search(conn, query) == []
        conn.execute.assert_not_called()

    def test_prefix_matching(self, conn, seeded_articles):
        """Test that partial words match by prefix."""
        results = SearchService.search(conn, "trav")

        assert [r.id for r in results] == [seeded_articles["graphs"].id]

    def test_all_tokens_must_match(self, conn, seeded_articles):
        """Test AND semantics across tokens."""
        results = SearchService.search(conn, "graph acyclic")

        assert [r.id for r in results] == [seeded_articles["trees"].id]

    def test_no_match_returns_empty(self, conn, seeded_articles):  # noqa: ARG002
        """Test that an unmatched term returns no results."""
        assert SearchService.search(conn, "quaternion") == []

    def test_case_and_punctuation_insensitive(self, conn, seeded_articles):
        """Test that query casing and punctuation do not change results."""
        plain = [r.id for r in SearchService.search(conn, "graph traversal")]
        noisy = [r.id for r in SearchService.search(conn, "  GRAPH,  Traversal!! ")]

        assert plain == noisy
        assert plain == [seeded_articles["graphs"].id]

    def test_drafts_are_searchable(self, conn, seeded_articles):
        """Test that search does not filter by status."""
        results = SearchService.search(conn, "binary heaps")

        assert [r.id for r in results] == [seeded_articles["heaps"].id]

    def test_result_fields(self, conn, seeded_articles):
        """Test that results carry the article key, topic and timestamp."""
        result = SearchService.search(conn, "acyclic")[0]
        trees = seeded_articles["trees"]

        assert result.id == trees.id
        assert result.category == "dsa"
        assert result.slug == "trees"
        assert result.topic == "Trees"
        assert result.updated_at == trees.updated_at


class TestRanking:
    """Tests for ordering, caps and snippets."""

    def test_title_outranks_body(self, conn, make_article):
        """Test that a title hit beats a body-only hit."""
        body_hit = make_article(
            "dsa", "sorting", "Sorting", "Merge sort also shows up in graph problems."
        )
        title_hit = make_article("dsa", "graph-theory", "Graph Theory", "Vertices and edges.")

        results = SearchService.search(conn, "graph")

        assert [r.id for r in results] == [title_hit.id, body_hit.id]

    def test_ties_break_by_id(self, conn, make_article):
        """Test that equally ranked articles come back in id order."""
        ids = [
            make_article("notes", slug, "Heap Notes", "Heap invariants.").id
            for slug in ("notes-c", "notes-a", "notes-b")
        ]

        results = SearchService.search(conn, "heap")

        assert [r.id for r in results] == sorted(ids)

    def test_results_capped_at_25(self, conn, make_article):
        """Test that no more than 25 results are ever returned."""
        for i in range(30):
            make_article("dsa", f"tree-{i}", f"Tree {i}", "A rooted tree.")

        assert len(SearchService.search(conn, "tree")) == 25
        assert len(SearchService.search(conn, "tree", limit=100)) == 25
        assert len(SearchService.search(conn, "tree", limit=5)) == 5

    def test_output_is_deterministic(self, conn, seeded_articles):  # noqa: ARG002
        """Test that the same query on the same index gives the same output."""
        first = SearchService.search(conn, "graph")
        second = SearchService.search(conn, "graph")

        assert first == second

    def test_snippet_highlights_body_match(self, conn, seeded_articles):  # noqa: ARG002
        """Test that the body snippet marks matched terms."""
        result = SearchService.search(conn, "acyclic")[0]

        assert f"{HIGHLIGHT_OPEN}acyclic{HIGHLIGHT_CLOSE}" in result.snippet

    def test_title_only_match_has_string_snippet(self, conn, make_article):
        """Test that a match outside the body still yields a snippet string."""
        make_article("ml", "transformers", "Transformers", "Attention layers.")

        result = SearchService.search(conn, "transformers")[0]

        assert isinstance(result.snippet, str)
        assert HIGHLIGHT_OPEN not in result.snippet
        assert result.snippet.startswith("Attention")


class TestSearchLifecycle:
    """Tests tying search results to article writes."""

    def test_insert_then_delete_leaves_no_hit(self, conn, make_article):
        """Test that a deleted article is no longer searchable."""
        from techwiki.services import ArticleService

        article = make_article("ml", "embeddings", "Embeddings", "Dense vector space.")
        assert [r.id for r in SearchService.search(conn, "embeddings")] == [article.id]

        ArticleService.delete_article(conn, article.id)

        assert SearchService.search(conn, "embeddings") == []

    def test_storage_error_propagates(self):
        """Test that a storage failure is raised, not turned into []."""
        conn = Mock()
        conn.execute.side_effect = sqlite3.OperationalError("no such table: articles_fts")

        with pytest.raises(sqlite3.OperationalError):
            SearchService.search(conn, "graph")


class TestSearchResponse:
    """Tests for search_response()."""

    def test_wraps_results(self, conn, seeded_articles):  # noqa: ARG002
        """Test that the response echoes the query and counts results."""
        response = SearchService.search_response(conn, "graph", limit=10)

        assert response.query == "graph"
        assert response.total == len(response.results)
        assert response.execution_time_ms >= 0

    def test_none_query(self, conn):
        """Test that a missing query gives an empty response."""
        response = SearchService.search_response(conn, None)

        assert response.query == ""
        assert response.results == []
        assert response.total == 0
