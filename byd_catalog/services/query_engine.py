"""Read-side projections over the catalog store."""

from __future__ import annotations

from typing import Any, Literal

from byd_catalog.graph_db.knowledge_graph import EdgeKind, GraphNode, KnowledgeGraph
from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.graph_db.tables import EntityTables
from byd_catalog.models.schemas import (
    CarModel,
    CatalogStats,
    ModelDetail,
    SeriesSummary,
    Tech,
)

EV_ENERGY_TYPE = "EV"


class QueryEngine:
    """Joins table rows with graph relationships.

    Each public method takes the store lock once and builds its whole result
    inside it, so a concurrent reload is never observed half-applied.
    """

    def __init__(self, store: CatalogStore) -> None:
        self._store = store

    # -- models --------------------------------------------------------

    def list_models(
        self, series_id: int | None = None, energy_type: str | None = None
    ) -> list[ModelDetail]:
        """Models matching the optional exact filters, cheapest first.

        `sorted` is stable, so equal prices keep table insertion order.
        """
        with self._store.locked() as store:
            tables, graph = store.tables, store.graph
            details = [
                _detail(model, tables, graph)
                for model in tables.all_models()
                if (series_id is None or model.series_id == series_id)
                and (not energy_type or model.energy_type == energy_type)
            ]
        return sorted(details, key=lambda d: d.price)

    def get_model_detail(self, model_id: int) -> ModelDetail | None:
        with self._store.locked() as store:
            model = store.tables.get_model(model_id)
            if model is None:
                return None
            return _detail(model, store.tables, store.graph)

    def search_models(self, keyword: str) -> list[ModelDetail]:
        """Case-sensitive substring match on model, series or tech names."""
        results: list[ModelDetail] = []
        with self._store.locked() as store:
            tables, graph = store.tables, store.graph
            for model in tables.all_models():
                detail = _detail(model, tables, graph)
                if (
                    keyword in detail.model_name
                    or keyword in detail.series_name
                    or any(keyword in name for name in detail.techs)
                ):
                    results.append(detail)
        return results

    def model_tech_ids(self, model_id: int) -> list[int]:
        with self._store.locked() as store:
            return store.graph.neighbors_by_type(model_id, EdgeKind.USES_TECH)

    # -- series and techs ----------------------------------------------

    def list_series(self) -> list[SeriesSummary]:
        with self._store.locked() as store:
            graph = store.graph
            return [
                SeriesSummary(
                    **series.model_dump(),
                    model_count=len(
                        graph.predecessors_by_type(series.series_id, EdgeKind.BELONGS_TO)
                    ),
                )
                for series in store.tables.all_series()
            ]

    def series_models(self, series_id: int) -> list[ModelDetail]:
        """Models of one series, found through incoming BELONGS_TO edges."""
        with self._store.locked() as store:
            tables, graph = store.tables, store.graph
            return [
                _detail(model, tables, graph)
                for model_id in graph.predecessors_by_type(series_id, EdgeKind.BELONGS_TO)
                if (model := tables.get_model(model_id)) is not None
            ]

    def list_techs(self) -> list[Tech]:
        with self._store.locked() as store:
            return list(store.tables.all_techs())

    # -- aggregates ----------------------------------------------------

    def stats(self) -> CatalogStats:
        with self._store.locked() as store:
            tables, graph = store.tables, store.graph
            models = list(tables.all_models())

            energy_breakdown: dict[str, int] = {}
            for model in models:
                energy_breakdown[model.energy_type] = energy_breakdown.get(model.energy_type, 0) + 1
            ev_count = energy_breakdown.get(EV_ENERGY_TYPE, 0)

            prices = [model.price for model in models]
            return CatalogStats(
                series_count=len(tables.series),
                model_count=len(models),
                tech_count=len(tables.techs),
                ev_count=ev_count,
                phev_count=len(models) - ev_count,
                min_price=min(prices) if prices else None,
                max_price=max(prices) if prices else None,
                node_count=graph.node_count,
                edge_count=graph.edge_count,
                energy_breakdown=energy_breakdown,
                models_per_series={
                    series.series_name: len(
                        graph.predecessors_by_type(series.series_id, EdgeKind.BELONGS_TO)
                    )
                    for series in tables.all_series()
                },
            )

    # -- graph ---------------------------------------------------------

    def graph_view(self) -> dict[str, Any]:
        """Every node and edge, for rendering and export."""
        with self._store.locked() as store:
            graph = store.graph
            return {
                "nodes": [_node_dict(node) for node in graph.nodes()],
                "edges": [
                    {"source": e.source, "target": e.target, "kind": e.kind.value}
                    for e in graph.edges()
                ],
            }

    def neighbors(
        self, node_id: int, edge_kind: EdgeKind | None = None
    ) -> list[dict[str, Any]] | None:
        """Neighbor nodes of `node_id`, or None when the node does not exist."""
        with self._store.locked() as store:
            graph = store.graph
            if not graph.has_node(node_id):
                return None
            ids = (
                graph.neighbors(node_id)
                if edge_kind is None
                else graph.neighbors_by_type(node_id, edge_kind)
            )
            return _resolve(graph, ids)

    def traverse(
        self, start_id: int, order: Literal["bfs", "dfs"] = "bfs"
    ) -> list[dict[str, Any]] | None:
        with self._store.locked() as store:
            graph = store.graph
            if not graph.has_node(start_id):
                return None
            if order == "dfs":
                ids = graph.traverse_depth_first(start_id)
            else:
                ids = graph.traverse_breadth_first(start_id)
            return _resolve(graph, ids)


def _detail(model: CarModel, tables: EntityTables, graph: KnowledgeGraph) -> ModelDetail:
    series = tables.get_series(model.series_id)
    tech_names = [
        tech.tech_name
        for tech_id in graph.neighbors_by_type(model.model_id, EdgeKind.USES_TECH)
        if (tech := tables.get_tech(tech_id)) is not None
    ]
    return ModelDetail(
        **model.model_dump(),
        series_name=series.series_name if series else "",
        techs=tech_names,
    )


def _node_dict(node: GraphNode) -> dict[str, Any]:
    return {"id": node.id, "kind": node.kind.value, "label": node.label}


def _resolve(graph: KnowledgeGraph, ids: list[int]) -> list[dict[str, Any]]:
    return [_node_dict(node) for node_id in ids if (node := graph.get_node(node_id)) is not None]
