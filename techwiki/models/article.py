"""Article-related models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, computed_field

ArticleStatus = Literal["draft", "approved", "published"]


class Reference(BaseModel):
    """External reference cited by an article."""

    title: str = Field(..., description="Reference title")
    url: str = Field(..., description="Reference URL")


class ArticleRecord(BaseModel):
    """Full article row as stored in the article table."""

    id: int = Field(..., description="Article ID")
    category: str = Field(..., description="Normalized category key")
    slug: str = Field(..., description="Normalized slug")
    topic: str = Field(..., description="Display title")
    markdown: str = Field(..., description="Markdown body")
    references: list[Reference] | None = Field(None, description="Cited references")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    version: int = Field(1, description="Content version")
    views: int = Field(0, description="View counter")
    status: ArticleStatus = Field("published", description="Publication status")


class ArticleSummary(BaseModel):
    """Article listing entry."""

    id: int = Field(..., description="Article ID")
    category: str = Field(..., description="Category key")
    slug: str = Field(..., description="Slug")
    topic: str = Field(..., description="Display title")
    updated_at: datetime = Field(..., description="Last update timestamp")
    views: int = Field(0, description="View counter")


class ArticleListResponse(BaseModel):
    """Response for article listing endpoints."""

    results: list[ArticleSummary] = Field(..., description="Articles")
    total: int = Field(..., description="Number of articles returned")


class CorpusRow(BaseModel):
    """Article row read for graph construction."""

    id: int
    category: str
    slug: str
    topic: str
    markdown: str | None = None


class CategoryInfo(BaseModel):
    """Category information."""

    name: str = Field(..., description="Category name")
    article_count: int = Field(..., description="Number of articles")


class CategoryListResponse(BaseModel):
    """Response for categories endpoint."""

    categories: list[CategoryInfo] = Field(..., description="List of categories")
    total: int = Field(..., description="Total number of categories")


class IndexConsistency(BaseModel):
    """Comparison of the article table against the full-text index."""

    article_count: int = Field(..., description="Rows in the article table")
    index_count: int = Field(..., description="Rows in the full-text index")
    missing: list[int] = Field(default_factory=list, description="Article ids with no index row")
    orphaned: list[int] = Field(default_factory=list, description="Index rows with no article")

    @computed_field
    @property
    def consistent(self) -> bool:
        return not self.missing and not self.orphaned


class StatsResponse(BaseModel):
    """Response for stats endpoint."""

    articles: dict = Field(..., description="Article statistics")
    index: IndexConsistency = Field(..., description="Full-text index health")
    database: dict = Field(..., description="Database information")
