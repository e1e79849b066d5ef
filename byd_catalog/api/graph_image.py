"""Render the knowledge graph to PNG/JPEG image bytes."""

from __future__ import annotations

import io
from typing import Literal

from byd_catalog.api.v1.schemas.graph import GraphResponse
from byd_catalog.utils.text_processing import truncate_display

ImageFormat = Literal["png", "jpeg", "jpg"]

# Brand on the left, then series, models and techs in successive columns.
_LAYERS = {"brand": 0, "series": 1, "model": 2, "tech": 3}
_NODE_COLORS = {"brand": "#c0392b", "series": "#4a90d9", "model": "#27ae60", "tech": "#f39c12"}
_EDGE_STYLES = {
    "has_series": ("#c0392b", "solid"),
    "belongs_to": ("#4a90d9", "solid"),
    "uses_tech": ("#999999", "dashed"),
}
_LABEL_WIDTH = 16


def render_graph_image(
    graph: GraphResponse,
    format: ImageFormat = "png",
    dpi: int = 100,
    figsize: tuple[float, float] = (14, 9),
) -> bytes:
    """Render the graph to image bytes using NetworkX + Matplotlib.

    Nodes are laid out in one column per node kind so the brand, series,
    model and tech layers read left to right. Edges to ids that are not in
    `graph.nodes` are dropped.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    import networkx as nx
    from matplotlib.patches import Patch

    if not graph.nodes:
        return _placeholder_image(format, dpi)

    G = nx.DiGraph()
    for node in graph.nodes:
        G.add_node(node.id, layer=_LAYERS.get(node.kind, len(_LAYERS)), kind=node.kind)
    for edge in graph.edges:
        if edge.source in G and edge.target in G:
            G.add_edge(edge.source, edge.target, kind=edge.kind)

    pos = nx.multipartite_layout(G, subset_key="layer")
    labels = {
        node.id: truncate_display(node.label, _LABEL_WIDTH) or str(node.id)
        for node in graph.nodes
    }

    fig, ax = plt.subplots(figsize=figsize, dpi=dpi)
    fig.patch.set_facecolor("white")

    nx.draw_networkx_nodes(
        G,
        pos,
        node_color=[_NODE_COLORS.get(G.nodes[n]["kind"], "#999999") for n in G.nodes],
        node_size=700,
        alpha=0.9,
        ax=ax,
    )
    for kind, (color, style) in _EDGE_STYLES.items():
        edgelist = [(u, v) for u, v, k in G.edges(data="kind") if k == kind]
        if edgelist:
            nx.draw_networkx_edges(
                G, pos, edgelist=edgelist, edge_color=color, style=style,
                arrows=True, arrowsize=10, alpha=0.6, ax=ax,
            )
    nx.draw_networkx_labels(G, pos, labels=labels, font_size=8, ax=ax)

    ax.legend(
        handles=[Patch(color=color, label=kind) for kind, color in _NODE_COLORS.items()],
        loc="lower left",
        fontsize=8,
        frameon=False,
    )
    ax.axis("off")
    plt.tight_layout(pad=0.5)
    return _figure_bytes(fig, format, dpi)


def _placeholder_image(format: ImageFormat, dpi: int) -> bytes:
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(4, 2), dpi=dpi)
    ax.text(0.5, 0.5, "Catalog is empty", ha="center", va="center", fontsize=12)
    ax.axis("off")
    return _figure_bytes(fig, format, dpi)


def _figure_bytes(fig, format: ImageFormat, dpi: int) -> bytes:
    import matplotlib.pyplot as plt

    buf = io.BytesIO()
    save_fmt = "jpg" if format in ("jpeg", "jpg") else "png"
    fig.savefig(buf, format=save_fmt, bbox_inches="tight", facecolor="white", dpi=dpi)
    plt.close(fig)
    return buf.getvalue()
