"""Health and readiness check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from byd_catalog.api.dependencies import get_store
from byd_catalog.graph_db.store import CatalogStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(store: CatalogStore = Depends(get_store)) -> dict:
    counts = store.counts()
    status = "ready" if counts["series"] or counts["models"] else "empty"
    return {"status": status, "counts": counts}
