"""Row types of the catalog tables and the read-side projections built on them."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# ── Table rows ───────────────────────────────────────────────────────


class Series(BaseModel):
    model_config = ConfigDict(frozen=True)

    series_id: int
    series_name: str
    intro: str = ""


class Tech(BaseModel):
    model_config = ConfigDict(frozen=True)

    tech_id: int
    tech_name: str
    intro: str = ""


class CarModel(BaseModel):
    """A vehicle row. `series_id` references `Series.series_id`."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: int
    model_name: str
    series_id: int
    price: float = Field(description="Guide price in units of 10k CNY, must be > 0")
    range_km: float = 0.0
    energy_type: str
    body_type: str = ""
    seats: int = 0
    launch_year: str = ""


class ModelTech(BaseModel):
    """Association row between a model and a technology."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: int
    model_id: int
    tech_id: int


# ── Projections ──────────────────────────────────────────────────────


class ModelDetail(CarModel):
    series_name: str = ""
    techs: list[str] = Field(default_factory=list)


class SeriesSummary(Series):
    model_count: int = 0


class CatalogStats(BaseModel):
    series_count: int = 0
    model_count: int = 0
    tech_count: int = 0
    ev_count: int = 0
    # Everything that is not "EV" lands here, including HEV or any other value.
    phev_count: int = 0
    min_price: float | None = None
    max_price: float | None = None
    node_count: int = 0
    edge_count: int = 0
    energy_breakdown: dict[str, int] = Field(default_factory=dict)
    models_per_series: dict[str, int] = Field(default_factory=dict)


class CatalogSnapshot(BaseModel):
    """Complete copy of every table, as exchanged with the data file."""

    series: list[Series] = Field(default_factory=list)
    techs: list[Tech] = Field(default_factory=list)
    models: list[CarModel] = Field(default_factory=list)
    associations: list[ModelTech] = Field(default_factory=list)
