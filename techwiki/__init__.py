"""TechWiki full-text search and knowledge graph backend."""

__version__ = "1.0.0"
