"""Catalog API endpoints: series, techs, models, search and stats."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from byd_catalog.api.dependencies import get_catalog_service, get_query_engine, get_store
from byd_catalog.api.v1.schemas.catalog import (
    AssociationResponse,
    ModelCreate,
    ReloadResponse,
    SeriesCreate,
    TechCreate,
)
from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.models.schemas import (
    CatalogStats,
    ModelDetail,
    Series,
    SeriesSummary,
    Tech,
)
from byd_catalog.services.catalog_service import CatalogService
from byd_catalog.services.query_engine import QueryEngine
from byd_catalog.utils.exceptions import NotFoundError
from byd_catalog.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["catalog"])


# ── Series ───────────────────────────────────────────────────────────


@router.get("/series", response_model=list[SeriesSummary])
async def list_series(engine: QueryEngine = Depends(get_query_engine)) -> list[SeriesSummary]:
    return engine.list_series()


@router.get("/series/{series_id}/models", response_model=list[ModelDetail])
async def list_series_models(
    series_id: int,
    engine: QueryEngine = Depends(get_query_engine),
) -> list[ModelDetail]:
    return engine.series_models(series_id)


@router.post("/series", response_model=Series, status_code=201)
async def create_series(
    request: SeriesCreate,
    service: CatalogService = Depends(get_catalog_service),
) -> Series:
    return await service.add_series(
        request.series_name, request.intro, series_id=request.series_id
    )


# ── Techs ────────────────────────────────────────────────────────────


@router.get("/techs", response_model=list[Tech])
async def list_techs(engine: QueryEngine = Depends(get_query_engine)) -> list[Tech]:
    return engine.list_techs()


@router.post("/techs", response_model=Tech, status_code=201)
async def create_tech(
    request: TechCreate,
    service: CatalogService = Depends(get_catalog_service),
) -> Tech:
    return await service.add_tech(request.tech_name, request.intro, tech_id=request.tech_id)


# ── Models ───────────────────────────────────────────────────────────


@router.get("/models", response_model=list[ModelDetail])
async def list_models(
    series_id: int | None = None,
    energy_type: str | None = None,
    engine: QueryEngine = Depends(get_query_engine),
) -> list[ModelDetail]:
    """All models, cheapest first, optionally filtered by series and energy type."""
    return engine.list_models(series_id=series_id, energy_type=energy_type)


@router.get("/models/search", response_model=list[ModelDetail])
async def search_models(
    q: str = Query(..., min_length=1, description="Substring of a model, series or tech name"),
    engine: QueryEngine = Depends(get_query_engine),
) -> list[ModelDetail]:
    return engine.search_models(q)


@router.get("/models/{model_id}", response_model=ModelDetail)
async def get_model(
    model_id: int,
    engine: QueryEngine = Depends(get_query_engine),
) -> ModelDetail:
    detail = engine.get_model_detail(model_id)
    if detail is None:
        raise NotFoundError(f"model {model_id} not found")
    return detail


@router.post("/models", response_model=ModelDetail, status_code=201)
async def create_model(
    request: ModelCreate,
    service: CatalogService = Depends(get_catalog_service),
    engine: QueryEngine = Depends(get_query_engine),
) -> ModelDetail:
    model = await service.add_model(
        request.row_fields(), tech_ids=request.tech_ids, model_id=request.model_id
    )
    detail = engine.get_model_detail(model.model_id)
    if detail is None:
        # Only possible if a reload replaced the catalog in between.
        raise HTTPException(status_code=409, detail="Model was replaced by a concurrent reload")
    return detail


@router.put("/models/{model_id}/techs/{tech_id}", response_model=AssociationResponse)
async def bind_model_tech(
    model_id: int,
    tech_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> AssociationResponse:
    created = await service.add_model_tech(model_id, tech_id)
    return AssociationResponse(model_id=model_id, tech_id=tech_id, created=created)


# ── Aggregates and maintenance ───────────────────────────────────────


@router.get("/stats", response_model=CatalogStats)
async def stats(engine: QueryEngine = Depends(get_query_engine)) -> CatalogStats:
    return engine.stats()


@router.post("/reload", response_model=ReloadResponse)
async def reload_catalog(
    service: CatalogService = Depends(get_catalog_service),
    store: CatalogStore = Depends(get_store),
) -> ReloadResponse:
    """Re-read the data file, replacing the whole catalog atomically."""
    loaded = await service.load()
    logger.info("catalog_reload_requested", loaded=loaded)
    return ReloadResponse(loaded=loaded, counts=store.counts())
