"""Graph data models."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

GraphMode = Literal["basic", "linked"]


class CategoryNode(BaseModel):
    """Graph node representing a category."""

    model_config = {"frozen": True}

    kind: Literal["category"] = "category"
    id: str = Field(..., description="Node ID (cat:<category>)")
    label: str = Field(..., description="Display label")
    category_key: str = Field(..., description="Normalized category key")


class TopicNode(BaseModel):
    """Graph node representing an article."""

    model_config = {"frozen": True}

    kind: Literal["topic"] = "topic"
    id: str = Field(..., description="Node ID (topic:<category>:<slug>)")
    label: str = Field(..., description="Article topic")
    category_key: str = Field(..., description="Normalized category key")
    topic_key: str = Field(..., description="Normalized <category>:<slug> key")
    article_id: int = Field(..., description="Article ID")


GraphNode = Annotated[CategoryNode | TopicNode, Field(discriminator="kind")]


class Edge(BaseModel):
    """Graph edge between two nodes, serialized as {from, to, kind}."""

    model_config = {"frozen": True, "populate_by_name": True}

    source: str = Field(..., alias="from", description="Source node ID")
    target: str = Field(..., alias="to", description="Target node ID")
    kind: Literal["category", "cross"] = Field(..., description="Edge type")


class GraphPayload(BaseModel):
    """
    Nodes and edges in first-insertion order.

    Immutable: the graph cache hands the same instance to every caller.
    """

    model_config = {"frozen": True}

    nodes: tuple[GraphNode, ...] = Field(default=(), description="Graph nodes")
    edges: tuple[Edge, ...] = Field(default=(), description="Graph edges")


class GraphResponse(BaseModel):
    """Response for graph data endpoint."""

    mode: GraphMode = Field(..., description="Build mode")
    nodes: list[GraphNode] = Field(..., description="Graph nodes")
    edges: list[Edge] = Field(..., description="Graph edges")
    total_nodes: int = Field(..., description="Total number of nodes")
    total_edges: int = Field(..., description="Total number of edges")
    execution_time_ms: float = Field(..., description="Build time in milliseconds")
