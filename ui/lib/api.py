"""API client for the BYD catalog backend."""

from __future__ import annotations

from typing import Any

import requests


class ApiError(Exception):
    """The backend rejected a request; `kind` names the violated constraint."""

    def __init__(self, message: str, kind: str = "", status_code: int = 0) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


def get_base_url() -> str:
    """Backend API base URL (no trailing slash)."""
    import os
    return (os.environ.get("BYD_CATALOG_API_URL") or "http://localhost:8000").rstrip("/")


def _url(path: str) -> str:
    return f"{get_base_url()}/api/v1{path}"


def _check(r: requests.Response) -> Any:
    if r.status_code >= 400:
        try:
            body = r.json()
        except ValueError:
            body = {}
        detail = body.get("detail", r.text)
        if not isinstance(detail, str):
            detail = str(detail)
        raise ApiError(detail, kind=body.get("kind", ""), status_code=r.status_code)
    return r.json()


def list_series() -> list[dict[str, Any]]:
    """GET /series: series with their model counts."""
    return _check(requests.get(_url("/series"), timeout=10))


def list_techs() -> list[dict[str, Any]]:
    """GET /techs."""
    return _check(requests.get(_url("/techs"), timeout=10))


def list_models(series_id: int | None = None, energy_type: str | None = None) -> list[dict[str, Any]]:
    """GET /models: cheapest first, optional exact filters."""
    params: dict[str, Any] = {}
    if series_id is not None:
        params["series_id"] = series_id
    if energy_type:
        params["energy_type"] = energy_type
    return _check(requests.get(_url("/models"), params=params, timeout=10))


def get_model(model_id: int) -> dict[str, Any]:
    """GET /models/{id}: raises ApiError(status_code=404) when missing."""
    return _check(requests.get(_url(f"/models/{model_id}"), timeout=10))


def search_models(keyword: str) -> list[dict[str, Any]]:
    """GET /models/search?q=..."""
    return _check(requests.get(_url("/models/search"), params={"q": keyword}, timeout=10))


def add_model(payload: dict[str, Any]) -> dict[str, Any]:
    """POST /models: returns the created model detail."""
    return _check(requests.post(_url("/models"), json=payload, timeout=30))


def add_tech(tech_name: str, intro: str = "") -> dict[str, Any]:
    """POST /techs: the backend allocates the id."""
    return _check(
        requests.post(_url("/techs"), json={"tech_name": tech_name, "intro": intro}, timeout=30)
    )


def stats() -> dict[str, Any]:
    """GET /stats."""
    return _check(requests.get(_url("/stats"), timeout=10))


def get_graph() -> dict[str, Any]:
    """GET /graph: nodes, edges and counts."""
    return _check(requests.get(_url("/graph"), timeout=30))


def get_graph_image(format: str = "png") -> bytes:
    """GET /graph/export?format=png|jpeg: rendered graph image bytes."""
    r = requests.get(_url("/graph/export"), params={"format": format}, timeout=60)
    r.raise_for_status()
    return r.content


def ready() -> dict[str, Any]:
    """GET /ready."""
    return _check(requests.get(_url("/ready"), timeout=5))
