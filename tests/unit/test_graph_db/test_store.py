"""Unit tests for the catalog store: tables and graph kept in lockstep."""

from __future__ import annotations

import threading

import pytest

from byd_catalog.graph_db.knowledge_graph import BRAND_NODE_ID, EdgeKind, NodeKind
from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.models.schemas import CatalogSnapshot, ModelTech, Series, Tech
from byd_catalog.services.query_engine import QueryEngine
from byd_catalog.utils.exceptions import (
    BusinessRuleViolationError,
    CheckFailedError,
    ConstraintKind,
    ForeignKeyMissingError,
    UniqueViolationError,
)


def assert_consistent(store: CatalogStore) -> None:
    counts = store.counts()
    assert counts["nodes"] == counts["series"] + counts["techs"] + counts["models"] + 1
    assert counts["edges"] == counts["series"] + counts["models"] + counts["associations"]


def test_empty_store_has_brand_node(store):
    node = store.graph.get_node(BRAND_NODE_ID)
    assert node.kind is NodeKind.BRAND
    assert node.label == "BYD 比亚迪"
    assert store.counts()["nodes"] == 1
    assert_consistent(store)


def test_inserts_mirror_into_graph(seeded_store):
    graph = seeded_store.graph
    assert graph.neighbors_by_type(BRAND_NODE_ID, EdgeKind.HAS_SERIES) == [1, 2]
    assert graph.neighbors_by_type(1001, EdgeKind.BELONGS_TO) == [1]
    assert graph.neighbors_by_type(1001, EdgeKind.USES_TECH) == [101, 102]
    assert graph.neighbors_by_type(2001, EdgeKind.USES_TECH) == [103, 102]
    assert_consistent(seeded_store)


def test_worked_example(store, model_factory):
    store.insert_series(Series(series_id=1, series_name="王朝"))
    store.insert_tech(Tech(tech_id=100, tech_name="刀片电池"))
    store.insert_model(model_factory(9001, "汉", price=20.0), [100])

    engine = QueryEngine(store)
    assert store.graph.neighbors_by_type(9001, EdgeKind.USES_TECH) == [100]
    assert engine.stats().model_count == 1

    with pytest.raises(UniqueViolationError):
        store.insert_model(model_factory(9002, "汉", price=18.0), [100])
    assert engine.stats().model_count == 1
    assert not store.graph.has_node(9002)


def test_rejected_model_leaves_store_untouched(seeded_store, model_factory):
    before = seeded_store.counts()
    with pytest.raises(ForeignKeyMissingError):
        seeded_store.insert_model(model_factory(1003, "唐", price=28.98), [101, 999])
    with pytest.raises(CheckFailedError):
        seeded_store.insert_model(model_factory(1003, "唐", price=0.0), [101])
    assert seeded_store.counts() == before
    assert seeded_store.tables.get_model(1003) is None
    assert not seeded_store.graph.has_node(1003)


def test_strict_insert_rejects_empty_tech_list(seeded_store, model_factory):
    with pytest.raises(BusinessRuleViolationError) as exc_info:
        seeded_store.insert_model(model_factory(1003, "唐"), [])
    assert exc_info.value.kind is ConstraintKind.BUSINESS_RULE_VIOLATION


def test_deferred_insert_then_associate(seeded_store, model_factory):
    seeded_store.insert_model(model_factory(1003, "唐"))
    assert seeded_store.graph.neighbors_by_type(1003, EdgeKind.USES_TECH) == []

    assert seeded_store.insert_model_association(1003, 101) is True
    assert seeded_store.graph.neighbors_by_type(1003, EdgeKind.USES_TECH) == [101]
    assert_consistent(seeded_store)


def test_association_is_idempotent(seeded_store):
    before = seeded_store.counts()
    assert seeded_store.insert_model_association(1001, 101) is False
    assert seeded_store.counts() == before


def test_association_requires_existing_rows(seeded_store):
    with pytest.raises(ForeignKeyMissingError):
        seeded_store.insert_model_association(7777, 101)
    with pytest.raises(ForeignKeyMissingError):
        seeded_store.insert_model_association(1001, 7777)


def test_duplicate_tech_ids_collapse(seeded_store, model_factory):
    seeded_store.insert_model(model_factory(1003, "唐"), [101, 101, 102])
    assert seeded_store.tables.tech_ids_for_model(1003) == [101, 102]
    assert_consistent(seeded_store)


def test_snapshot_copies_rows(seeded_store):
    snapshot = seeded_store.snapshot()
    assert [s.series_id for s in snapshot.series] == [1, 2]
    assert len(snapshot.models) == 3
    assert len(snapshot.associations) == 5


def test_replace_all_rebuilds_graph(seeded_store, model_factory):
    snapshot = CatalogSnapshot(
        series=[Series(series_id=5, series_name="方程豹")],
        techs=[Tech(tech_id=107, tech_name="DM-p混动")],
        models=[model_factory(5001, "豹5", series_id=5, energy_type="PHEV")],
        associations=[ModelTech(id=1, model_id=5001, tech_id=107)],
    )
    seeded_store.replace_all(snapshot)

    assert seeded_store.counts() == {
        "series": 1,
        "techs": 1,
        "models": 1,
        "associations": 1,
        "nodes": 4,
        "edges": 3,
    }
    assert not seeded_store.graph.has_node(1001)
    assert seeded_store.graph.neighbors(5001) == [5, 107]


def test_replace_all_is_all_or_nothing(seeded_store, model_factory):
    before = seeded_store.snapshot()
    bad = CatalogSnapshot(
        series=[Series(series_id=5, series_name="方程豹")],
        models=[
            model_factory(5001, "豹5", series_id=5),
            model_factory(5002, "豹8", series_id=6),
        ],
    )
    with pytest.raises(ForeignKeyMissingError):
        seeded_store.replace_all(bad)
    assert seeded_store.snapshot() == before


def test_replace_all_allows_techless_models(store, model_factory):
    store.replace_all(
        CatalogSnapshot(
            series=[Series(series_id=1, series_name="王朝")],
            models=[model_factory(1001, "汉")],
        )
    )
    assert store.counts()["models"] == 1


def test_clear_all_keeps_brand(seeded_store):
    seeded_store.clear_all()
    counts = seeded_store.counts()
    assert counts["models"] == 0
    assert counts["nodes"] == 1
    assert counts["edges"] == 0


def test_id_in_use(seeded_store):
    assert seeded_store.id_in_use(BRAND_NODE_ID)
    assert seeded_store.id_in_use(101)
    assert not seeded_store.id_in_use(4242)


def test_concurrent_inserts_keep_names_unique(store, model_factory):
    store.insert_series(Series(series_id=1, series_name="王朝"))
    store.insert_tech(Tech(tech_id=100, tech_name="刀片电池"))
    errors: list[Exception] = []

    def worker(model_id: int) -> None:
        try:
            store.insert_model(model_factory(model_id, "汉"), [100])
        except UniqueViolationError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(2000 + i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.counts()["models"] == 1
    assert len(errors) == 7
    assert_consistent(store)


def test_nan_price_is_rejected(seeded_store, model_factory):
    with pytest.raises(CheckFailedError):
        seeded_store.insert_model(model_factory(1003, "唐", price=float("nan")), [101])
    assert seeded_store.tables.get_model(1003) is None
    assert all(m.price > 0 for m in seeded_store.tables.all_models())


def test_replace_all_rejects_nan_price(seeded_store, model_factory):
    snapshot = CatalogSnapshot(
        series=[Series(series_id=1, series_name="王朝")],
        models=[model_factory(1001, "汉", price=float("nan"))],
    )
    with pytest.raises(CheckFailedError):
        seeded_store.replace_all(snapshot)
    assert seeded_store.counts()["models"] == 3
