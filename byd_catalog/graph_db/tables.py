"""Keyed in-memory tables for series, techs, models and model-tech associations.

The tables perform no validation; `ConstraintValidator` gates every write
made through `CatalogStore`.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator

from byd_catalog.models.schemas import CarModel, ModelTech, Series, Tech


class EntityKind(str, Enum):
    SERIES = "series"
    TECH = "tech"
    MODEL = "model"


class EntityTables:
    """One dict per entity keyed by id, plus name and pair indexes."""

    def __init__(self) -> None:
        self.series: dict[int, Series] = {}
        self.techs: dict[int, Tech] = {}
        self.models: dict[int, CarModel] = {}
        self.associations: list[ModelTech] = []

        self._names: dict[EntityKind, set[str]] = {kind: set() for kind in EntityKind}
        self._pairs: set[tuple[int, int]] = set()
        self._techs_by_model: dict[int, list[int]] = {}
        self._next_association_id = 1

    # -- writes --------------------------------------------------------

    def put_series(self, series: Series) -> None:
        self.series[series.series_id] = series
        self._names[EntityKind.SERIES].add(series.series_name)

    def put_tech(self, tech: Tech) -> None:
        self.techs[tech.tech_id] = tech
        self._names[EntityKind.TECH].add(tech.tech_name)

    def put_model(self, model: CarModel) -> None:
        self.models[model.model_id] = model
        self._names[EntityKind.MODEL].add(model.model_name)

    def put_association(self, model_id: int, tech_id: int) -> ModelTech | None:
        """Insert the pair unless it already exists; returns the new row or None."""
        if (model_id, tech_id) in self._pairs:
            return None
        row = ModelTech(id=self._next_association_id, model_id=model_id, tech_id=tech_id)
        self._next_association_id += 1
        self.associations.append(row)
        self._pairs.add((model_id, tech_id))
        self._techs_by_model.setdefault(model_id, []).append(tech_id)
        return row

    def clear_all(self) -> None:
        self.series.clear()
        self.techs.clear()
        self.models.clear()
        self.associations.clear()
        for names in self._names.values():
            names.clear()
        self._pairs.clear()
        self._techs_by_model.clear()
        self._next_association_id = 1

    # -- reads ---------------------------------------------------------

    def get_series(self, series_id: int) -> Series | None:
        return self.series.get(series_id)

    def get_tech(self, tech_id: int) -> Tech | None:
        return self.techs.get(tech_id)

    def get_model(self, model_id: int) -> CarModel | None:
        return self.models.get(model_id)

    def all_series(self) -> Iterator[Series]:
        return iter(self.series.values())

    def all_techs(self) -> Iterator[Tech]:
        return iter(self.techs.values())

    def all_models(self) -> Iterator[CarModel]:
        return iter(self.models.values())

    def all_associations(self) -> Iterator[ModelTech]:
        return iter(self.associations)

    def exists_name(self, kind: EntityKind, name: str) -> bool:
        return name in self._names[kind]

    def has_association(self, model_id: int, tech_id: int) -> bool:
        return (model_id, tech_id) in self._pairs

    def tech_ids_for_model(self, model_id: int) -> list[int]:
        return list(self._techs_by_model.get(model_id, ()))

    def id_in_use(self, row_id: int) -> bool:
        return row_id in self.series or row_id in self.techs or row_id in self.models

    def counts(self) -> dict[str, int]:
        return {
            "series": len(self.series),
            "techs": len(self.techs),
            "models": len(self.models),
            "associations": len(self.associations),
        }
