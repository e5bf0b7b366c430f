"""Business logic services."""

from .article_service import ArticleService
from .graph_service import GraphCache, GraphService
from .link_extractor import InternalLink, extract_links
from .search_index import SearchIndex
from .search_service import SearchService
from .tokenizer import tokenize_query

__all__ = [
    "ArticleService",
    "GraphCache",
    "GraphService",
    "InternalLink",
    "SearchIndex",
    "SearchService",
    "extract_links",
    "tokenize_query",
]
