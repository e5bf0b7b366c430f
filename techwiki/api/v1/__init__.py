"""Version 1 API routers."""

from . import articles, graph, search

__all__ = ["articles", "graph", "search"]
