"""
Pytest configuration and shared fixtures for TechWiki tests.
"""

import os
import tempfile
from pathlib import Path

# Must be set before techwiki is imported: settings and the rate limiter
# read them at import time.
os.environ.setdefault("TECHWIKI_DATABASE_PATH", str(Path(tempfile.mkdtemp()) / "techwiki.db"))
os.environ["TECHWIKI_RATE_LIMIT_ENABLED"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from techwiki.config import settings  # noqa: E402
from techwiki.db import create_schema, open_connection  # noqa: E402
from techwiki.db.connection import _manager  # noqa: E402
from techwiki.services import ArticleService  # noqa: E402


def _make_article(conn, category, slug, topic, markdown="", views=0, status="published"):
    """Create an article and pin its view counter."""
    record = ArticleService.create_article(
        conn, category=category, topic=topic, markdown=markdown, slug=slug, status=status
    )
    if views:
        with conn:
            conn.execute("UPDATE articles SET views = ? WHERE id = ?", (views, record.id))
    return ArticleService.get_article_by_id(conn, record.id)


@pytest.fixture
def test_db_path(tmp_path, monkeypatch):
    """Fresh database file, wired into settings for the app and services."""
    db_path = tmp_path / "techwiki.db"
    monkeypatch.setattr(settings, "database_path", str(db_path))
    _manager.close()
    yield str(db_path)
    _manager.close()


@pytest.fixture
def conn(test_db_path):
    """Open connection on an empty schema."""
    connection = open_connection(test_db_path)
    create_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def make_article(conn):
    """Factory creating articles on the test connection."""

    def factory(category, slug, topic, markdown="", views=0, status="published"):
        return _make_article(conn, category, slug, topic, markdown, views=views, status=status)

    return factory


@pytest.fixture
def seeded_articles(conn):
    """Small corpus with cross links, one draft, and a dangling link."""
    return {
        "graphs": _make_article(
            conn,
            "dsa",
            "graphs",
            "Graphs",
            "# Graphs\n\nA graph is a set of vertices joined by edges. "
            "Every [tree](/wiki/dsa/trees) is a graph, and graph traversal "
            "is covered in [BFS](/wiki/dsa/breadth-first-search).",
            views=30,
        ),
        "trees": _make_article(
            conn,
            "dsa",
            "trees",
            "Trees",
            "# Trees\n\nA tree is a connected acyclic structure. "
            "See also [graphs](/wiki/dsa/graphs) and [missing](/wiki/dsa/does-not-exist).",
            views=20,
        ),
        "python": _make_article(
            conn,
            "languages",
            "python",
            "Python",
            "# Python\n\nPython ships a heap module; see [heaps](/wiki/dsa/heaps).",
            views=10,
        ),
        "heaps": _make_article(
            conn,
            "dsa",
            "heaps",
            "Heaps",
            "# Heaps\n\nDraft notes on binary heaps and [trees](/wiki/dsa/trees).",
            status="draft",
        ),
    }


@pytest.fixture
def client(test_db_path):  # noqa: ARG001
    """Create FastAPI test client with an empty graph cache."""
    from techwiki.main import app

    app.state.graph_service.cache.clear()
    yield TestClient(app)
    app.state.graph_service.cache.clear()


@pytest.fixture
def seeded_client(seeded_articles, client):  # noqa: ARG001
    """Test client over the seeded corpus."""
    return client


@pytest.fixture
def invalid_article_key():
    """Non-existent (category, slug) for 404 tests."""
    return ("dsa", "nonexistent-article-12345")
