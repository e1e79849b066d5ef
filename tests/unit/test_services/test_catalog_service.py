"""Unit tests for the catalog write service."""

from __future__ import annotations

import shutil
from unittest.mock import patch

import pytest

from byd_catalog.graph_db.data_file import load_catalog
from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.services.catalog_service import CatalogService
from byd_catalog.utils.exceptions import BusinessRuleViolationError, UniqueViolationError

MODEL_FIELDS = {
    "model_name": "唐DM-p",
    "series_id": 1,
    "price": 28.98,
    "range_km": 215.0,
    "energy_type": "PHEV",
    "body_type": "SUV",
    "seats": 6,
    "launch_year": "2023",
}


@pytest.fixture
def service(seeded_store, settings) -> CatalogService:
    return CatalogService(seeded_store, settings)


@pytest.mark.asyncio
async def test_load_missing_file_keeps_store(settings):
    store = CatalogStore()
    service = CatalogService(store, settings)
    assert await service.load() is False
    assert store.counts()["nodes"] == 1


@pytest.mark.asyncio
async def test_load_sample_file(settings, sample_data_file):
    shutil.copy(sample_data_file, settings.DATA_FILE)
    store = CatalogStore()
    assert await CatalogService(store, settings).load() is True
    counts = store.counts()
    assert counts["models"] == 12
    assert counts["nodes"] == 5 + 8 + 12 + 1
    assert counts["edges"] == 5 + 12 + 25


@pytest.mark.asyncio
async def test_add_model_allocates_id_and_saves(service, settings):
    model = await service.add_model(MODEL_FIELDS, tech_ids=[101])
    assert model.model_id == settings.MODEL_ID_START

    saved = load_catalog(service.data_file)
    assert [m.model_id for m in saved.models][-1] == model.model_id
    assert (model.model_id, 101) in {(a.model_id, a.tech_id) for a in saved.associations}


@pytest.mark.asyncio
async def test_allocation_skips_ids_in_use(service, monkeypatch):
    monkeypatch.setattr(service._settings, "TECH_ID_START", 101)
    tech = await service.add_tech("DiPilot")
    assert tech.tech_id == 104


@pytest.mark.asyncio
async def test_add_series_with_explicit_id(service):
    series = await service.add_series("腾势", "premium", series_id=3)
    assert series.series_id == 3
    assert series.intro == "premium"


@pytest.mark.asyncio
async def test_rejected_write_does_not_save(service):
    with pytest.raises(BusinessRuleViolationError):
        await service.add_model(MODEL_FIELDS, tech_ids=[])
    with pytest.raises(UniqueViolationError):
        await service.add_series("王朝")
    assert not service.data_file.exists()


@pytest.mark.asyncio
async def test_add_model_tech_saves_only_new_pairs(service):
    assert await service.add_model_tech(1001, 101) is False
    assert not service.data_file.exists()
    assert await service.add_model_tech(1002, 101) is True
    assert service.data_file.exists()


@pytest.mark.asyncio
async def test_save_disabled(seeded_store, monkeypatch):
    monkeypatch.setenv("SAVE_ON_MUTATION", "false")
    from byd_catalog.config import Settings

    service = CatalogService(seeded_store, Settings())
    await service.add_tech("DiPilot")
    assert not service.data_file.exists()


@pytest.mark.asyncio
async def test_saved_file_reloads_into_same_catalog(service, settings):
    await service.add_model(MODEL_FIELDS, tech_ids=[101, 102])
    expected = service._store.snapshot()

    store = CatalogStore()
    assert await CatalogService(store, settings).load() is True
    reloaded = store.snapshot()
    assert reloaded.series == expected.series
    assert reloaded.models == expected.models
    assert [(a.model_id, a.tech_id) for a in reloaded.associations] == [
        (a.model_id, a.tech_id) for a in expected.associations
    ]


@pytest.mark.asyncio
async def test_each_successful_mutation_saves_once(service):
    with patch("byd_catalog.services.catalog_service.save_catalog") as mock_save:
        await service.add_tech("DiPilot")
        with pytest.raises(UniqueViolationError):
            await service.add_tech("DiPilot")
        await service.add_model_tech(1001, 101)

    mock_save.assert_called_once()
    path, snapshot = mock_save.call_args.args
    assert path == service.data_file
    assert "DiPilot" in [t.tech_name for t in snapshot.techs]


@pytest.mark.asyncio
async def test_written_file_with_padded_names_loads_on_restart(service, settings):
    await service.add_model({**MODEL_FIELDS, "model_name": "汉EV "}, tech_ids=[101])
    await service.add_series("海洋 ", "ocean line\nsecond line")

    store = CatalogStore()
    assert await CatalogService(store, settings).load() is True
    assert store.snapshot() == service._store.snapshot()
