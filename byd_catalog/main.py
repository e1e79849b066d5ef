"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from byd_catalog.api.dependencies import set_catalog_service, set_store
from byd_catalog.api.router import api_router
from byd_catalog.config import get_settings
from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.services.catalog_service import CatalogService
from byd_catalog.utils.exceptions import (
    ConstraintError,
    ConstraintKind,
    DataFileError,
    NotFoundError,
)
from byd_catalog.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

_CONFLICT_KINDS = frozenset({ConstraintKind.PRIMARY_KEY_EXISTS, ConstraintKind.UNIQUE_VIOLATION})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store from the data file on startup."""
    settings = get_settings()
    configure_logging(settings)

    store = CatalogStore(brand_label=settings.BRAND_NODE_LABEL)
    service = CatalogService(store, settings)
    await service.load()
    set_store(store)
    set_catalog_service(service)

    logger.info("app_started", **store.counts())
    yield

    logger.info("app_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    application = FastAPI(
        title="BYD Catalog",
        description="Constraint-checked vehicle catalog with a knowledge graph view",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(ConstraintError)
    async def constraint_error_handler(request: Request, exc: ConstraintError) -> JSONResponse:
        status_code = 409 if exc.kind in _CONFLICT_KINDS else 422
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "kind": exc.kind.value},
        )

    @application.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc), "kind": "NotFound"})

    @application.exception_handler(DataFileError)
    async def data_file_error_handler(request: Request, exc: DataFileError) -> JSONResponse:
        logger.error("data_file_invalid", error=str(exc), path=request.url.path)
        return JSONResponse(status_code=500, content={"detail": str(exc), "kind": "DataFile"})

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )

    return application


app = create_app()
