"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.models.schemas import CarModel, Series, Tech

SAMPLE_DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "byd_catalog.txt"


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch, tmp_path):
    """Point the settings at a throwaway data file."""
    monkeypatch.setenv("DATA_FILE", str(tmp_path / "catalog.txt"))
    monkeypatch.setenv("SAVE_ON_MUTATION", "true")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_FORMAT", "console")


@pytest.fixture
def settings():
    from byd_catalog.config import Settings

    return Settings()


@pytest.fixture
def store() -> CatalogStore:
    return CatalogStore()


@pytest.fixture
def seeded_store(store: CatalogStore) -> CatalogStore:
    """Two series, three techs and three models with their bindings."""
    store.insert_series(Series(series_id=1, series_name="王朝", intro="dynasty line"))
    store.insert_series(Series(series_id=2, series_name="海洋", intro="ocean line"))
    store.insert_tech(Tech(tech_id=101, tech_name="DM-i混动"))
    store.insert_tech(Tech(tech_id=102, tech_name="刀片电池"))
    store.insert_tech(Tech(tech_id=103, tech_name="e平台3.0"))
    store.insert_model(
        make_model(1001, "秦PLUS DM-i", series_id=1, price=7.98, energy_type="PHEV"),
        [101, 102],
    )
    store.insert_model(make_model(1002, "汉EV", series_id=1, price=20.98), [102])
    store.insert_model(make_model(2001, "海豚", series_id=2, price=11.68), [103, 102])
    return store


def make_model(model_id: int, name: str, **overrides) -> CarModel:
    fields = {
        "model_id": model_id,
        "model_name": name,
        "series_id": 1,
        "price": 10.0,
        "range_km": 400.0,
        "energy_type": "EV",
        "body_type": "轿车",
        "seats": 5,
        "launch_year": "2023",
    }
    fields.update(overrides)
    return CarModel(**fields)


@pytest.fixture
def model_factory():
    return make_model


@pytest.fixture
def sample_data_file() -> Path:
    return SAMPLE_DATA_FILE
