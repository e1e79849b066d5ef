"""Request/response models for the graph API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GraphNode(BaseModel):
    id: int
    kind: str
    label: str


class GraphEdge(BaseModel):
    source: int
    target: int
    kind: str


class GraphResponse(BaseModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    node_count: int = 0
    edge_count: int = 0


class NodeListResponse(BaseModel):
    node_id: int
    nodes: list[GraphNode] = Field(default_factory=list)
