"""Shared FastAPI dependency injection."""

from __future__ import annotations

from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.services.catalog_service import CatalogService
from byd_catalog.services.query_engine import QueryEngine

_store: CatalogStore | None = None
_catalog_service: CatalogService | None = None


def set_store(store: CatalogStore) -> None:
    global _store
    _store = store


def set_catalog_service(service: CatalogService) -> None:
    global _catalog_service
    _catalog_service = service


def get_store() -> CatalogStore:
    if _store is None:
        raise RuntimeError("Catalog store not initialized")
    return _store


def get_catalog_service() -> CatalogService:
    if _catalog_service is None:
        raise RuntimeError("Catalog service not initialized")
    return _catalog_service


def get_query_engine() -> QueryEngine:
    return QueryEngine(get_store())
