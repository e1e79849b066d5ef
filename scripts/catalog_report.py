"""Print catalog reports in the terminal: model list, search, model tree and stats.

Usage:
    python scripts/catalog_report.py models [--series-id 1] [--energy EV]
    python scripts/catalog_report.py series
    python scripts/catalog_report.py techs
    python scripts/catalog_report.py search 刀片
    python scripts/catalog_report.py detail 1002
    python scripts/catalog_report.py stats
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from byd_catalog.config import get_settings
from byd_catalog.graph_db.knowledge_graph import BRAND_NODE_ID
from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.models.schemas import ModelDetail
from byd_catalog.services.catalog_service import CatalogService
from byd_catalog.services.query_engine import QueryEngine
from byd_catalog.utils.logging import setup_logging
from byd_catalog.utils.text_processing import pad_right, render_table, truncate_display

_MODEL_HEADERS = ["ID", "Model", "Series", "Price (10k)", "Range km", "Energy", "Body", "Seats"]


def _model_rows(models: list[ModelDetail]) -> list[list[str]]:
    return [
        [
            str(m.model_id),
            m.model_name,
            m.series_name,
            f"{m.price:.2f}",
            str(int(m.range_km)),
            m.energy_type,
            m.body_type,
            str(m.seats),
        ]
        for m in models
    ]


def print_models(engine: QueryEngine, series_id: int | None, energy: str | None) -> None:
    models = engine.list_models(series_id=series_id, energy_type=energy)
    print(render_table(_MODEL_HEADERS, _model_rows(models)))
    print(f"\n{len(models)} models")


def print_series(engine: QueryEngine) -> None:
    rows = [
        [str(s.series_id), s.series_name, str(s.model_count), truncate_display(s.intro, 40)]
        for s in engine.list_series()
    ]
    print(render_table(["ID", "Series", "Models", "Intro"], rows))


def print_techs(engine: QueryEngine) -> None:
    rows = [[str(t.tech_id), t.tech_name, truncate_display(t.intro, 40)] for t in engine.list_techs()]
    print(render_table(["ID", "Tech", "Intro"], rows))
    print(f"\n{len(rows)} technologies")


def print_search(engine: QueryEngine, keyword: str) -> None:
    models = engine.search_models(keyword)
    if not models:
        print("No matching models")
        return
    print(render_table(_MODEL_HEADERS, _model_rows(models)))
    print(f"\n{len(models)} matches")


def print_detail(engine: QueryEngine, model_id: int) -> bool:
    detail = engine.get_model_detail(model_id)
    if detail is None:
        print(f"No model with id {model_id}")
        return False

    rows = [
        ["Model", detail.model_name],
        ["Series", detail.series_name],
        ["Price", f"{detail.price:.2f} (10k CNY)"],
        ["Range", f"{int(detail.range_km)} km"],
        ["Energy", detail.energy_type],
        ["Body", detail.body_type],
        ["Seats", str(detail.seats)],
        ["Launch year", detail.launch_year],
    ]
    print(render_table(["Field", "Value"], rows))

    print("\nRelation tree (BFS from model node):")
    for node in engine.traverse(model_id, "bfs") or []:
        indent = "  " if node["id"] == model_id else "    └─ "
        print(f"{indent}[{node['kind']}] {node['label']}")
    return True


def print_stats(engine: QueryEngine) -> None:
    s = engine.stats()
    price_range = (
        f"{s.min_price:.2f} - {s.max_price:.2f}" if s.min_price is not None else "n/a"
    )
    rows = [
        ["Series", str(s.series_count)],
        ["Models", str(s.model_count)],
        ["Technologies", str(s.tech_count)],
        ["EV models", str(s.ev_count)],
        ["Hybrid models", str(s.phev_count)],
        ["Price range (10k)", price_range],
        ["Graph nodes", str(s.node_count)],
        ["Graph edges", str(s.edge_count)],
    ]
    print(render_table(["Metric", "Value"], rows))

    print("\nModels per series:\n")
    for name, count in s.models_per_series.items():
        print(f"  {pad_right(name, 14)} |{'█' * count} {count}")

    root = engine.neighbors(BRAND_NODE_ID)
    if root is not None:
        print(f"\nBrand node reaches {len(root)} series directly")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Terminal reports over the BYD catalog")
    parser.add_argument("--data-file", help="Catalog data file (default: DATA_FILE setting)")
    sub = parser.add_subparsers(dest="command", required=True)

    models = sub.add_parser("models", help="List models, cheapest first")
    models.add_argument("--series-id", type=int, default=None)
    models.add_argument("--energy", default=None, help="Exact energy type, e.g. EV or PHEV")
    sub.add_parser("series", help="List series with model counts")
    sub.add_parser("techs", help="List technologies")
    search = sub.add_parser("search", help="Search model, series and tech names")
    search.add_argument("keyword")
    detail = sub.add_parser("detail", help="Show one model and its relations")
    detail.add_argument("model_id", type=int)
    sub.add_parser("stats", help="Catalog and graph statistics")
    args = parser.parse_args()

    setup_logging(log_level="WARNING", log_format="console", stream=sys.stderr)
    settings = get_settings()
    if args.data_file:
        settings.DATA_FILE = args.data_file

    store = CatalogStore(brand_label=settings.BRAND_NODE_LABEL)
    service = CatalogService(store, settings)
    if not await service.load():
        print(f"Data file not found: {service.data_file}", file=sys.stderr)
        sys.exit(1)
    engine = QueryEngine(store)

    if args.command == "models":
        print_models(engine, args.series_id, args.energy)
    elif args.command == "series":
        print_series(engine)
    elif args.command == "techs":
        print_techs(engine)
    elif args.command == "search":
        print_search(engine, args.keyword)
    elif args.command == "detail":
        if not print_detail(engine, args.model_id):
            sys.exit(1)
    elif args.command == "stats":
        print_stats(engine)


if __name__ == "__main__":
    asyncio.run(main())
