"""Pydantic models for API requests and responses."""

from .article import (
    ArticleListResponse,
    ArticleRecord,
    ArticleSummary,
    CategoryInfo,
    CategoryListResponse,
    CorpusRow,
    IndexConsistency,
    Reference,
    StatsResponse,
)
from .common import ErrorResponse, HealthResponse
from .graph import CategoryNode, Edge, GraphPayload, GraphResponse, TopicNode
from .search import SearchResponse, SearchResult

__all__ = [
    "CategoryNode",
    "TopicNode",
    "Edge",
    "GraphPayload",
    "GraphResponse",
    "SearchResult",
    "SearchResponse",
    "ArticleRecord",
    "ArticleSummary",
    "ArticleListResponse",
    "CorpusRow",
    "CategoryInfo",
    "CategoryListResponse",
    "IndexConsistency",
    "Reference",
    "StatsResponse",
    "ErrorResponse",
    "HealthResponse",
]
