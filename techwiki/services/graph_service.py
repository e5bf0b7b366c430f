"""
Graph service for TechWiki.

Builds the category/topic/cross-reference graph from the article corpus
and keeps the last build in a single-slot, time-bounded cache.
"""

import json
import logging
import sqlite3
import time
from collections.abc import Callable
from dataclasses import dataclass

from techwiki.config import settings
from techwiki.models.article import CorpusRow
from techwiki.models.graph import CategoryNode, Edge, GraphPayload, TopicNode
from techwiki.services.article_service import ArticleService
from techwiki.services.link_extractor import LinkExtractor, extract_links
from techwiki.services.slug_utils import title_from_slug

logger = logging.getLogger(__name__)

GRAPH_MODES = ("basic", "linked")

CorpusReader = Callable[..., list[CorpusRow]]


@dataclass
class CacheEntry:
    """Cached graph payload and its expiry (epoch milliseconds)."""

    key: str
    expires_at: float
    payload: GraphPayload


class GraphCache:
    """
    Single-slot graph cache.

    Holds at most one entry; storing a payload for any key replaces the
    previous one. Entries expire on wall-clock time only.
    """

    def __init__(self):
        self._entry: CacheEntry | None = None

    def get(self, key: str, now_ms: float) -> GraphPayload | None:
        entry = self._entry
        if entry is not None and entry.key == key and now_ms < entry.expires_at:
            return entry.payload
        return None

    def put(self, key: str, payload: GraphPayload, expires_at: float) -> None:
        self._entry = CacheEntry(key=key, expires_at=expires_at, payload=payload)

    def clear(self) -> None:
        self._entry = None

    @property
    def entry(self) -> CacheEntry | None:
        return self._entry


def category_node_id(category: str) -> str:
    return f"cat:{category}"


def topic_node_id(category: str, slug: str) -> str:
    return f"topic:{category}:{slug}"


class GraphService:
    """Service for graph construction."""

    def __init__(
        self,
        cache: GraphCache | None = None,
        link_extractor: LinkExtractor = extract_links,
        corpus_reader: CorpusReader = ArticleService.read_corpus,
        clock: Callable[[], float] = time.time,
    ):
        self.cache = cache if cache is not None else GraphCache()
        self.link_extractor = link_extractor
        self.corpus_reader = corpus_reader
        self.clock = clock

    @staticmethod
    def cache_key(mode: str, max_cross_edges: int, limit: int | None) -> str:
        """Deterministic key over every parameter that shapes the output."""
        return json.dumps(
            {"mode": mode, "max_cross_edges": max_cross_edges, "limit": limit},
            sort_keys=True,
        )

    def _now_ms(self) -> float:
        return self.clock() * 1000

    def build_graph(
        self,
        conn: sqlite3.Connection,
        mode: str = "linked",
        max_cross_edges: int | None = None,
        limit: int | None = None,
        cache_ms: int | None = None,
    ) -> GraphPayload:
        """
        Return the knowledge graph, rebuilding it on a cache miss.

        Args:
            conn: SQLite connection
            mode: "basic" (category edges only) or "linked" (adds cross edges)
            max_cross_edges: Global cross-edge budget (default from settings)
            limit: Optional cap on corpus rows, highest priority first
            cache_ms: How long a fresh build stays cached (default from settings)

        Returns:
            GraphPayload; on a cache hit the very same object as the last build

        Raises:
            ValueError: If parameters are out of range
            sqlite3.Error: If the corpus cannot be read
        """
        if mode not in GRAPH_MODES:
            raise ValueError(f"mode must be one of {', '.join(GRAPH_MODES)}, got {mode}")
        if max_cross_edges is None:
            max_cross_edges = settings.graph_max_cross_edges
        if max_cross_edges < 0:
            raise ValueError(f"max_cross_edges must be >= 0, got {max_cross_edges}")
        if limit is not None and limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        if cache_ms is None:
            cache_ms = settings.graph_cache_ms

        key = self.cache_key(mode, max_cross_edges, limit)

        cached = self.cache.get(key, self._now_ms())
        if cached is not None:
            logger.debug(f"Graph cache hit for {key}")
            return cached

        start_time = time.time()

        rows = self.corpus_reader(conn, include_markdown=(mode == "linked"), limit=limit)
        payload = self._assemble(rows, mode, max_cross_edges)

        self.cache.put(key, payload, expires_at=self._now_ms() + cache_ms)

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Built {mode} graph: {len(payload.nodes)} nodes, {len(payload.edges)} edges "
            f"from {len(rows)} articles in {elapsed_ms:.1f}ms"
        )
        return payload

    def _assemble(
        self,
        rows: list[CorpusRow],
        mode: str,
        max_cross_edges: int,
    ) -> GraphPayload:
        """Turn corpus rows into nodes and edges, preserving insertion order."""
        nodes: list[CategoryNode | TopicNode] = []
        edges: list[Edge] = []
        category_nodes: dict[str, CategoryNode] = {}
        topic_nodes: dict[str, TopicNode] = {}
        edge_set: set[tuple[str, str, str]] = set()

        for row in rows:
            category = row.category.lower()
            slug = row.slug.lower()

            category_node = category_nodes.get(category)
            if category_node is None:
                category_node = CategoryNode(
                    id=category_node_id(category),
                    label=title_from_slug(category),
                    category_key=category,
                )
                category_nodes[category] = category_node
                nodes.append(category_node)

            topic_key = f"{category}:{slug}"
            topic_node = topic_nodes.get(topic_key)
            if topic_node is None:
                topic_node = TopicNode(
                    id=topic_node_id(category, slug),
                    label=row.topic,
                    category_key=category,
                    topic_key=topic_key,
                    article_id=row.id,
                )
                topic_nodes[topic_key] = topic_node
                nodes.append(topic_node)

            edge_key = (category_node.id, topic_node.id, "category")
            if edge_key not in edge_set:
                edge_set.add(edge_key)
                edges.append(Edge(source=category_node.id, target=topic_node.id, kind="category"))

        if mode == "linked":
            cross_count = 0
            for row in rows:
                if cross_count >= max_cross_edges:
                    break

                source_node = topic_nodes.get(f"{row.category.lower()}:{row.slug.lower()}")
                if source_node is None:
                    continue

                for link in self.link_extractor(row.markdown or ""):
                    if cross_count >= max_cross_edges:
                        break

                    target_node = topic_nodes.get(link.key)
                    # Dangling links and self references are dropped.
                    if target_node is None or target_node.id == source_node.id:
                        continue

                    edge_key = (source_node.id, target_node.id, "cross")
                    if edge_key in edge_set:
                        continue

                    edge_set.add(edge_key)
                    edges.append(Edge(source=source_node.id, target=target_node.id, kind="cross"))
                    cross_count += 1

        return GraphPayload(nodes=nodes, edges=edges)
