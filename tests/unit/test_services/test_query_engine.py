"""Unit tests for the read-side query engine."""

from __future__ import annotations

import pytest

from byd_catalog.graph_db.knowledge_graph import BRAND_NODE_ID, EdgeKind
from byd_catalog.models.schemas import Series
from byd_catalog.services.query_engine import QueryEngine


@pytest.fixture
def engine(seeded_store) -> QueryEngine:
    return QueryEngine(seeded_store)


def test_list_models_sorted_by_price(engine):
    models = engine.list_models()
    assert [m.model_id for m in models] == [1001, 2001, 1002]


def test_list_models_filters(engine):
    assert [m.model_id for m in engine.list_models(series_id=1)] == [1001, 1002]
    assert [m.model_id for m in engine.list_models(energy_type="EV")] == [2001, 1002]
    assert [m.model_id for m in engine.list_models(series_id=2, energy_type="PHEV")] == []
    assert len(engine.list_models(energy_type="")) == 3


def test_equal_prices_keep_insertion_order(store, model_factory):
    store.insert_series(Series(series_id=1, series_name="王朝"))
    for model_id, name in [(3, "c"), (1, "a"), (2, "b")]:
        store.insert_model(model_factory(model_id + 100, name, price=10.0))
    assert [m.model_name for m in QueryEngine(store).list_models()] == ["c", "a", "b"]


def test_model_detail_joins_series_and_techs(engine):
    detail = engine.get_model_detail(1001)
    assert detail.series_name == "王朝"
    assert detail.techs == ["DM-i混动", "刀片电池"]
    assert engine.get_model_detail(4242) is None


def test_search_matches_model_series_and_tech(engine):
    assert [m.model_id for m in engine.search_models("汉")] == [1002]
    assert [m.model_id for m in engine.search_models("海洋")] == [2001]
    assert [m.model_id for m in engine.search_models("刀片")] == [1001, 1002, 2001]
    assert engine.search_models("nothing") == []


def test_search_is_case_sensitive(engine):
    assert [m.model_id for m in engine.search_models("DM-i")] == [1001]
    assert engine.search_models("dm-i") == []


def test_model_tech_ids(engine):
    assert engine.model_tech_ids(2001) == [103, 102]
    assert engine.model_tech_ids(4242) == []


def test_list_series_counts_models(engine):
    summary = {s.series_name: s.model_count for s in engine.list_series()}
    assert summary == {"王朝": 2, "海洋": 1}


def test_series_models(engine):
    assert [m.model_id for m in engine.series_models(1)] == [1001, 1002]
    assert engine.series_models(99) == []


def test_stats(engine):
    stats = engine.stats()
    assert stats.series_count == 2
    assert stats.model_count == 3
    assert stats.tech_count == 3
    assert stats.ev_count == 2
    assert stats.phev_count == 1
    assert stats.min_price == 7.98
    assert stats.max_price == 20.98
    assert stats.node_count == 9
    assert stats.edge_count == 10
    assert stats.energy_breakdown == {"PHEV": 1, "EV": 2}
    assert stats.models_per_series == {"王朝": 2, "海洋": 1}


def test_stats_counts_other_energy_types_as_phev(seeded_store, model_factory):
    seeded_store.insert_model(model_factory(1003, "唐", energy_type="HEV"), [101])
    stats = QueryEngine(seeded_store).stats()
    assert stats.ev_count == 2
    assert stats.phev_count == 2
    assert stats.energy_breakdown["HEV"] == 1


def test_stats_on_empty_store(store):
    stats = QueryEngine(store).stats()
    assert stats.model_count == 0
    assert stats.min_price is None
    assert stats.max_price is None
    assert stats.node_count == 1


def test_graph_view(engine):
    view = engine.graph_view()
    assert len(view["nodes"]) == 9
    assert len(view["edges"]) == 10
    assert view["nodes"][0] == {"id": BRAND_NODE_ID, "kind": "brand", "label": "BYD 比亚迪"}
    assert {"source": 1001, "target": 101, "kind": "uses_tech"} in view["edges"]


def test_neighbors(engine):
    labels = [n["label"] for n in engine.neighbors(1001)]
    assert labels == ["王朝", "DM-i混动", "刀片电池"]
    techs = engine.neighbors(1001, EdgeKind.USES_TECH)
    assert [n["id"] for n in techs] == [101, 102]
    assert engine.neighbors(4242) is None


def test_traverse(engine):
    bfs = [n["id"] for n in engine.traverse(BRAND_NODE_ID, "bfs")]
    assert bfs == [BRAND_NODE_ID, 1, 2]
    dfs = [n["id"] for n in engine.traverse(1001, "dfs")]
    assert dfs == [1001, 1, 101, 102]
    assert engine.traverse(4242) is None
