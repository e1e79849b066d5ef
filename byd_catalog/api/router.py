"""Top-level API router aggregating all v1 sub-routers."""

from __future__ import annotations

from fastapi import APIRouter

from byd_catalog.api.v1.catalog import router as catalog_router
from byd_catalog.api.v1.graph import router as graph_router
from byd_catalog.api.v1.health import router as health_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(catalog_router)
api_router.include_router(graph_router)
