"""Ordered integrity checks run before any catalog mutation commits.

Rules run in a fixed order and the first failing rule raises, so callers
always receive one specific diagnosis. Checks only read the tables.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from byd_catalog.graph_db.knowledge_graph import BRAND_NODE_ID
from byd_catalog.graph_db.tables import EntityKind, EntityTables
from byd_catalog.models.schemas import CarModel, Series, Tech
from byd_catalog.utils.exceptions import (
    BusinessRuleViolationError,
    CheckFailedError,
    ForeignKeyMissingError,
    NotNullError,
    PrimaryKeyExistsError,
    UniqueViolationError,
)


class ConstraintValidator:
    def __init__(self, tables: EntityTables) -> None:
        self._tables = tables

    def check_series(self, series: Series) -> None:
        self._require_text(series.series_name, "series_name")
        self._require_new_id(series.series_id, "series_id", self._tables.series)
        self._require_unique_name(EntityKind.SERIES, series.series_name, "series_name")

    def check_tech(self, tech: Tech) -> None:
        self._require_text(tech.tech_name, "tech_name")
        self._require_new_id(tech.tech_id, "tech_id", self._tables.techs)
        self._require_unique_name(EntityKind.TECH, tech.tech_name, "tech_name")

    def check_model(
        self, model: CarModel, tech_ids: Sequence[int] | None = None, *, strict: bool = True
    ) -> None:
        """Validate a model row and the techs it will be bound to.

        `strict` enforces the at-least-one-technology rule; the deferred path
        (strict=False) lets associations be attached later.
        """
        self._require_text(model.model_name, "model_name")
        self._require_text(model.energy_type, "energy_type")
        self._require_new_id(model.model_id, "model_id", self._tables.models)
        self._require_unique_name(EntityKind.MODEL, model.model_name, "model_name")

        if self._tables.get_series(model.series_id) is None:
            raise ForeignKeyMissingError(
                f"FOREIGN KEY constraint failed: series_id {model.series_id} "
                "does not exist in series"
            )

        if not (math.isfinite(model.price) and model.price > 0):
            raise CheckFailedError(
                "CHECK constraint failed: price must be a finite number greater than 0"
            )

        if strict and not tech_ids:
            raise BusinessRuleViolationError(
                "business rule failed: a model must use at least one technology"
            )

        for tech_id in tech_ids or ():
            self._require_tech(tech_id)

    def check_association(self, model_id: int, tech_id: int) -> None:
        if self._tables.get_model(model_id) is None:
            raise ForeignKeyMissingError(
                f"FOREIGN KEY constraint failed: model_id {model_id} does not exist in models"
            )
        self._require_tech(tech_id)

    # -- rules ---------------------------------------------------------

    @staticmethod
    def _require_text(value: str, field: str) -> None:
        if not value:
            raise NotNullError(f"NOT NULL constraint failed: {field} must not be empty")

    def _require_new_id(self, row_id: int, field: str, table: dict) -> None:
        if row_id in table:
            raise PrimaryKeyExistsError(
                f"PRIMARY KEY constraint failed: {field} {row_id} already exists"
            )
        # Graph nodes of every kind share one id space.
        if row_id == BRAND_NODE_ID or self._tables.id_in_use(row_id):
            raise PrimaryKeyExistsError(
                f"PRIMARY KEY constraint failed: {field} {row_id} is already used by another node"
            )

    def _require_unique_name(self, kind: EntityKind, name: str, field: str) -> None:
        if self._tables.exists_name(kind, name):
            raise UniqueViolationError(f"UNIQUE constraint failed: {field} '{name}' already exists")

    def _require_tech(self, tech_id: int) -> None:
        if self._tables.get_tech(tech_id) is None:
            raise ForeignKeyMissingError(
                f"FOREIGN KEY constraint failed: tech_id {tech_id} does not exist in techs"
            )
