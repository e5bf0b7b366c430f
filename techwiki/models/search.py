"""Search-related models."""

from datetime import datetime

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """Single search result."""

    id: int = Field(..., description="Article ID")
    category: str = Field(..., description="Article category")
    slug: str = Field(..., description="Article slug")
    topic: str = Field(..., description="Article topic")
    updated_at: datetime = Field(..., description="Last update timestamp")
    snippet: str = Field("", description="Highlighted body fragment")


class SearchResponse(BaseModel):
    """Response for full-text search endpoint."""

    query: str = Field(..., description="Search query")
    results: list[SearchResult] = Field(..., description="Search results")
    total: int = Field(..., description="Total number of results")
    execution_time_ms: float = Field(..., description="Query execution time in milliseconds")
