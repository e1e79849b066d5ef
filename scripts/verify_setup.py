"""Verify the data file loads cleanly and, optionally, that the API answers."""

from __future__ import annotations

import asyncio
import os
import sys

import httpx

from byd_catalog.config import get_settings
from byd_catalog.graph_db.data_file import load_catalog
from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.utils.exceptions import CatalogError
from byd_catalog.utils.logging import configure_logging


def check_data_file() -> bool:
    settings = get_settings()
    try:
        snapshot = load_catalog(settings.DATA_FILE)
    except FileNotFoundError:
        print(f"[FAIL] Data file: {settings.DATA_FILE} not found")
        return False
    except CatalogError as exc:
        print(f"[FAIL] Data file: {exc}")
        return False
    print(
        f"[OK] Data file parsed: {len(snapshot.series)} series, {len(snapshot.techs)} techs, "
        f"{len(snapshot.models)} models, {len(snapshot.associations)} associations"
    )

    store = CatalogStore(brand_label=settings.BRAND_NODE_LABEL)
    try:
        store.replace_all(snapshot)
    except CatalogError as exc:
        print(f"[FAIL] Integrity: {exc}")
        return False
    print("[OK] All rows pass the integrity constraints")

    counts = store.counts()
    expected_nodes = counts["series"] + counts["techs"] + counts["models"] + 1
    expected_edges = counts["series"] + counts["models"] + counts["associations"]
    if counts["nodes"] != expected_nodes or counts["edges"] != expected_edges:
        print(f"[FAIL] Graph out of sync with tables: {counts}")
        return False
    print(f"[OK] Graph consistent: {counts['nodes']} nodes, {counts['edges']} edges")

    techless = [
        m.model_name
        for m in store.tables.all_models()
        if not store.tables.tech_ids_for_model(m.model_id)
    ]
    if techless:
        print(f"  [WARN] Models without technologies: {', '.join(techless)}")
    return True


async def check_api() -> bool:
    base_url = os.getenv("BYD_CATALOG_API_URL", "")
    if not base_url:
        print("[SKIP] API: BYD_CATALOG_API_URL not set (optional)")
        return True
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.get(f"{base_url.rstrip('/')}/api/v1/ready", timeout=10)
            resp.raise_for_status()
        print(f"[OK] API ready: {resp.json().get('status')}")
        return True
    except Exception as exc:
        print(f"[FAIL] API: {exc}")
        return False


async def main() -> None:
    configure_logging(get_settings(), stream=sys.stderr)
    print("=" * 50)
    print("BYD Catalog - Setup Verification")
    print("=" * 50)

    results = [check_data_file(), await check_api()]

    print("=" * 50)
    passed = sum(results)
    total = len(results)
    print(f"Results: {passed}/{total} checks passed")
    if not all(results):
        print("Some checks failed. Review output above.")
        sys.exit(1)
    print("All checks passed.")


if __name__ == "__main__":
    asyncio.run(main())
