"""Database connection management."""

from .connection import ConnectionManager, get_db, open_connection
from .schema import ARTICLE_STATUSES, create_schema

__all__ = ["get_db", "ConnectionManager", "open_connection", "create_schema", "ARTICLE_STATUSES"]
