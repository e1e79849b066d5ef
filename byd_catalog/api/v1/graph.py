"""Graph API endpoints: inspect, traverse and export the knowledge graph."""

from __future__ import annotations

import json
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from byd_catalog.api.dependencies import get_query_engine
from byd_catalog.api.graph_image import render_graph_image
from byd_catalog.api.v1.schemas.graph import (
    GraphEdge,
    GraphNode,
    GraphResponse,
    NodeListResponse,
)
from byd_catalog.graph_db.knowledge_graph import EdgeKind
from byd_catalog.services.query_engine import QueryEngine
from byd_catalog.utils.exceptions import NotFoundError
from byd_catalog.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/graph", tags=["graph"])


@router.get("", response_model=GraphResponse)
async def get_graph(engine: QueryEngine = Depends(get_query_engine)) -> GraphResponse:
    """The whole knowledge graph as JSON (D3-compatible)."""
    view = engine.graph_view()
    nodes = [GraphNode(**n) for n in view["nodes"]]
    edges = [GraphEdge(**e) for e in view["edges"]]
    return GraphResponse(
        nodes=nodes,
        edges=edges,
        node_count=len(nodes),
        edge_count=len(edges),
    )


@router.get("/export")
async def export_graph(
    format: Literal["json", "graphml", "png", "jpeg"] = "json",
    engine: QueryEngine = Depends(get_query_engine),
) -> Response:
    """Export the knowledge graph as JSON, GraphML or a rendered image."""
    graph_data = await get_graph(engine)

    if format == "json":
        content = json.dumps(graph_data.model_dump(), indent=2, ensure_ascii=False)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": "attachment; filename=knowledge_graph.json"},
        )

    if format in ("png", "jpeg"):
        try:
            image = render_graph_image(graph_data, format=format)
        except Exception as exc:
            logger.error("graph_render_failed", format=format, error=str(exc))
            raise HTTPException(status_code=500, detail="Graph rendering failed")
        return Response(content=image, media_type=f"image/{format}")

    return Response(
        content=to_graphml(graph_data),
        media_type="application/xml",
        headers={"Content-Disposition": "attachment; filename=knowledge_graph.graphml"},
    )


@router.get("/nodes/{node_id}/neighbors", response_model=NodeListResponse)
async def get_neighbors(
    node_id: int,
    edge_kind: EdgeKind | None = None,
    engine: QueryEngine = Depends(get_query_engine),
) -> NodeListResponse:
    nodes = engine.neighbors(node_id, edge_kind)
    if nodes is None:
        raise NotFoundError(f"graph node {node_id} not found")
    return NodeListResponse(node_id=node_id, nodes=[GraphNode(**n) for n in nodes])


@router.get("/nodes/{node_id}/traverse", response_model=NodeListResponse)
async def traverse(
    node_id: int,
    order: Literal["bfs", "dfs"] = "bfs",
    engine: QueryEngine = Depends(get_query_engine),
) -> NodeListResponse:
    nodes = engine.traverse(node_id, order)
    if nodes is None:
        raise NotFoundError(f"graph node {node_id} not found")
    return NodeListResponse(node_id=node_id, nodes=[GraphNode(**n) for n in nodes])


def to_graphml(graph: GraphResponse) -> str:
    """Convert graph response to GraphML XML format."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">',
        '  <key id="label" for="node" attr.name="label" attr.type="string"/>',
        '  <key id="kind" for="node" attr.name="kind" attr.type="string"/>',
        '  <key id="relation" for="edge" attr.name="relation" attr.type="string"/>',
        '  <graph id="G" edgedefault="directed">',
    ]

    for node in graph.nodes:
        lines.append(f'    <node id="n{node.id}">')
        lines.append(f'      <data key="label">{_xml_escape(node.label)}</data>')
        lines.append(f'      <data key="kind">{node.kind}</data>')
        lines.append("    </node>")

    for i, edge in enumerate(graph.edges):
        lines.append(f'    <edge id="e{i}" source="n{edge.source}" target="n{edge.target}">')
        lines.append(f'      <data key="relation">{edge.kind}</data>')
        lines.append("    </edge>")

    lines.append("  </graph>")
    lines.append("</graphml>")
    return "\n".join(lines)


def _xml_escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")
