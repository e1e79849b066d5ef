"""Request/response models for the catalog API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SeriesCreate(BaseModel):
    series_id: int | None = Field(default=None, description="Allocated when omitted")
    series_name: str = Field(..., examples=["王朝"])
    intro: str = ""


class TechCreate(BaseModel):
    tech_id: int | None = Field(default=None, description="Allocated when omitted")
    tech_name: str = Field(..., examples=["刀片电池"])
    intro: str = ""


class ModelCreate(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: int | None = Field(default=None, description="Allocated when omitted")
    model_name: str = Field(..., examples=["汉"])
    series_id: int
    price: float = Field(..., description="Guide price in units of 10k CNY")
    range_km: float = 0.0
    energy_type: str = Field(..., examples=["EV", "PHEV"])
    body_type: str = ""
    seats: int = 5
    launch_year: str = ""
    tech_ids: list[int] | None = Field(
        default=None,
        description="Technologies to bind. Omit to attach them later; an empty list is rejected.",
    )

    def row_fields(self) -> dict:
        return self.model_dump(exclude={"model_id", "tech_ids"})


class AssociationResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: int
    tech_id: int
    created: bool


class ReloadResponse(BaseModel):
    loaded: bool
    counts: dict[str, int] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    detail: str
    kind: str
