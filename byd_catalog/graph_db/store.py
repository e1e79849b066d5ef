"""The catalog store: entity tables and their knowledge graph behind one lock."""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from byd_catalog.graph_db.knowledge_graph import (
    BRAND_NODE_ID,
    EdgeKind,
    KnowledgeGraph,
    NodeKind,
)
from byd_catalog.graph_db.tables import EntityTables
from byd_catalog.graph_db.validator import ConstraintValidator
from byd_catalog.models.schemas import CarModel, CatalogSnapshot, Series, Tech
from byd_catalog.utils.exceptions import ConstraintError
from byd_catalog.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BRAND_LABEL = "BYD 比亚迪"


def build_graph(tables: EntityTables, brand_label: str = DEFAULT_BRAND_LABEL) -> KnowledgeGraph:
    """Derive the knowledge graph for every row currently in `tables`."""
    graph = KnowledgeGraph()
    graph.add_node(BRAND_NODE_ID, NodeKind.BRAND, brand_label)

    for series in tables.all_series():
        graph.add_node(series.series_id, NodeKind.SERIES, series.series_name)
        graph.add_edge(BRAND_NODE_ID, series.series_id, EdgeKind.HAS_SERIES)

    for tech in tables.all_techs():
        graph.add_node(tech.tech_id, NodeKind.TECH, tech.tech_name)

    for model in tables.all_models():
        graph.add_node(model.model_id, NodeKind.MODEL, model.model_name)
        graph.add_edge(model.model_id, model.series_id, EdgeKind.BELONGS_TO)

    for row in tables.all_associations():
        graph.add_edge(row.model_id, row.tech_id, EdgeKind.USES_TECH)

    return graph


class CatalogStore:
    """Constraint-checked relational store paired with a derived graph.

    Every public operation holds the store lock for its whole duration, so a
    validated mutation lands in the tables and the graph together or not at
    all. The lock is re-entrant: callers that need several operations to be
    atomic (id allocation followed by an insert, multi-step reads) wrap them
    in `locked()`.

    Integrity failures are raised as `ConstraintError` subclasses and leave
    the store untouched.
    """

    def __init__(self, brand_label: str = DEFAULT_BRAND_LABEL) -> None:
        self._brand_label = brand_label
        self._lock = threading.RLock()
        self._tables = EntityTables()
        self._graph = build_graph(self._tables, brand_label)
        self._validator = ConstraintValidator(self._tables)

    @contextmanager
    def locked(self) -> Iterator[CatalogStore]:
        with self._lock:
            yield self

    @property
    def tables(self) -> EntityTables:
        """Live tables. Hold `locked()` while reading them."""
        return self._tables

    @property
    def graph(self) -> KnowledgeGraph:
        """Live graph. Hold `locked()` while reading it."""
        return self._graph

    @property
    def brand_label(self) -> str:
        return self._brand_label

    # -- mutations -----------------------------------------------------

    def insert_series(self, series: Series) -> Series:
        with self._lock:
            try:
                self._validator.check_series(series)
            except ConstraintError as exc:
                self._log_rejection("insert_series", exc, series_id=series.series_id)
                raise
            self._tables.put_series(series)
            self._graph.add_node(series.series_id, NodeKind.SERIES, series.series_name)
            self._graph.add_edge(BRAND_NODE_ID, series.series_id, EdgeKind.HAS_SERIES)

        logger.info("series_inserted", series_id=series.series_id, name=series.series_name)
        return series

    def insert_tech(self, tech: Tech) -> Tech:
        with self._lock:
            try:
                self._validator.check_tech(tech)
            except ConstraintError as exc:
                self._log_rejection("insert_tech", exc, tech_id=tech.tech_id)
                raise
            self._tables.put_tech(tech)
            self._graph.add_node(tech.tech_id, NodeKind.TECH, tech.tech_name)

        logger.info("tech_inserted", tech_id=tech.tech_id, name=tech.tech_name)
        return tech

    def insert_model(self, model: CarModel, tech_ids: Sequence[int] | None = None) -> CarModel:
        """Insert a model and its technology associations.

        Passing `tech_ids` (even an empty list) selects the strict path, which
        requires at least one technology. Omitting it selects the deferred
        path; associations are then added with `insert_model_association`.
        Duplicate ids in `tech_ids` collapse into one association.
        """
        strict = tech_ids is not None
        unique_tech_ids = list(dict.fromkeys(tech_ids or ()))

        with self._lock:
            try:
                self._validator.check_model(model, unique_tech_ids, strict=strict)
            except ConstraintError as exc:
                self._log_rejection("insert_model", exc, model_id=model.model_id)
                raise
            self._tables.put_model(model)
            self._graph.add_node(model.model_id, NodeKind.MODEL, model.model_name)
            self._graph.add_edge(model.model_id, model.series_id, EdgeKind.BELONGS_TO)
            for tech_id in unique_tech_ids:
                if self._tables.put_association(model.model_id, tech_id) is not None:
                    self._graph.add_edge(model.model_id, tech_id, EdgeKind.USES_TECH)

        logger.info(
            "model_inserted",
            model_id=model.model_id,
            name=model.model_name,
            tech_count=len(unique_tech_ids),
            strict=strict,
        )
        return model

    def insert_model_association(self, model_id: int, tech_id: int) -> bool:
        """Bind a technology to an existing model.

        Idempotent: returns True when a new association was stored and False
        when the pair already existed.
        """
        with self._lock:
            try:
                self._validator.check_association(model_id, tech_id)
            except ConstraintError as exc:
                self._log_rejection("insert_model_association", exc, model_id=model_id)
                raise
            if self._tables.put_association(model_id, tech_id) is None:
                return False
            self._graph.add_edge(model_id, tech_id, EdgeKind.USES_TECH)

        logger.info("model_tech_associated", model_id=model_id, tech_id=tech_id)
        return True

    def clear_all(self) -> None:
        with self._lock:
            self._tables.clear_all()
            self._graph = build_graph(self._tables, self._brand_label)
        logger.info("catalog_cleared")

    def replace_all(self, snapshot: CatalogSnapshot) -> None:
        """Atomically replace every table and the whole graph.

        The snapshot is validated row by row into a fresh table set first;
        the swap only happens when every row passes, so a failing reload
        leaves the current contents in place.
        """
        tables = EntityTables()
        validator = ConstraintValidator(tables)
        try:
            for series in snapshot.series:
                validator.check_series(series)
                tables.put_series(series)
            for tech in snapshot.techs:
                validator.check_tech(tech)
                tables.put_tech(tech)
            for model in snapshot.models:
                validator.check_model(model, strict=False)
                tables.put_model(model)
            for row in snapshot.associations:
                validator.check_association(row.model_id, row.tech_id)
                tables.put_association(row.model_id, row.tech_id)
        except ConstraintError as exc:
            self._log_rejection("replace_all", exc)
            raise

        graph = build_graph(tables, self._brand_label)
        with self._lock:
            self._tables = tables
            self._validator = validator
            self._graph = graph

        logger.info("catalog_replaced", **tables.counts())

    # -- reads ---------------------------------------------------------

    def snapshot(self) -> CatalogSnapshot:
        with self._lock:
            return CatalogSnapshot(
                series=list(self._tables.all_series()),
                techs=list(self._tables.all_techs()),
                models=list(self._tables.all_models()),
                associations=list(self._tables.all_associations()),
            )

    def id_in_use(self, row_id: int) -> bool:
        with self._lock:
            return row_id == BRAND_NODE_ID or self._tables.id_in_use(row_id)

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {
                **self._tables.counts(),
                "nodes": self._graph.node_count,
                "edges": self._graph.edge_count,
            }

    @staticmethod
    def _log_rejection(operation: str, exc: ConstraintError, **context: object) -> None:
        logger.info(
            "constraint_violation",
            operation=operation,
            kind=exc.kind.value,
            error=exc.message,
            **context,
        )
