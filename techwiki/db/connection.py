"""
SQLite database connection management.

Provides singleton connection manager with dependency injection for FastAPI.
"""

import logging
import sqlite3
import threading
from collections.abc import Generator
from pathlib import Path

from techwiki.config import settings
from techwiki.db.schema import create_schema

logger = logging.getLogger(__name__)


def open_connection(db_path: str | Path) -> sqlite3.Connection:
    """
    Open a SQLite connection configured for the article store.

    Enables WAL mode and foreign key enforcement and returns rows as
    sqlite3.Row so columns can be read by name.
    """
    # FastAPI may resolve the dependency and run the handler on different
    # threadpool workers, so the connection must not be pinned to one thread.
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


class ConnectionManager:
    """
    Singleton connection manager for the SQLite article database.

    Creates the schema once per database path and hands out a new
    Connection per request so concurrent handlers never share one.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Implement singleton pattern."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize connection manager."""
        if self._initialized:
            return

        self._schema_ready: set[str] = set()
        self._initialized = True

    @property
    def db_path(self):
        """Get database path from settings (allows runtime override)."""
        return settings.database_path

    def _ensure_schema(self, db_path: Path) -> None:
        """Create the schema the first time a database path is opened."""
        key = str(db_path)
        if key in self._schema_ready:
            return

        with self._lock:
            if key in self._schema_ready:
                return

            if not db_path.parent.exists():
                raise FileNotFoundError(f"Database directory not found: {db_path.parent}")

            logger.info(f"Opening SQLite database: {db_path}")
            conn = open_connection(db_path)
            try:
                create_schema(conn)
            finally:
                conn.close()
            self._schema_ready.add(key)

    def get_connection(self) -> sqlite3.Connection:
        """
        Create a new SQLite connection for each request.

        Returns:
            Fresh sqlite3 Connection instance
        """
        db_path = Path(self.db_path)
        self._ensure_schema(db_path)
        logger.debug("Creating new SQLite connection for request")
        return open_connection(db_path)

    def close(self):
        """Forget initialized databases so the next request re-checks the schema."""
        if self._schema_ready:
            self._schema_ready.clear()
            logger.info("Closed SQLite connection manager")


# Global connection manager instance
_manager = ConnectionManager()


def get_db() -> Generator[sqlite3.Connection, None, None]:
    """
    FastAPI dependency for database connection.

    Creates a fresh connection per request so concurrent handlers
    do not share a single connection.

    Yields:
        Fresh sqlite3 Connection instance
    """
    conn = _manager.get_connection()
    try:
        yield conn
    except Exception as e:
        logger.error(f"Database error: {e}")
        raise
    finally:
        conn.close()
