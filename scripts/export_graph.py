"""Export the knowledge graph built from the catalog data file to JSON."""

from __future__ import annotations

import asyncio
import json
import sys

from byd_catalog.config import get_settings
from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.services.catalog_service import CatalogService
from byd_catalog.services.query_engine import QueryEngine
from byd_catalog.utils.logging import setup_logging


async def main() -> None:
    setup_logging(log_level="INFO", log_format="console", stream=sys.stderr)
    settings = get_settings()

    store = CatalogStore(brand_label=settings.BRAND_NODE_LABEL)
    service = CatalogService(store, settings)
    if not await service.load():
        print(f"Data file not found: {service.data_file}")
        sys.exit(1)

    output = QueryEngine(store).graph_view()
    filename = sys.argv[1] if len(sys.argv) > 1 else "graph_export.json"
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(output, f, indent=2, ensure_ascii=False)
    print(f"Graph exported to {filename}")
    print(f"  Nodes: {len(output['nodes'])}")
    print(f"  Edges: {len(output['edges'])}")


if __name__ == "__main__":
    asyncio.run(main())
