"""Catalog write orchestration: id allocation, store mutation, persistence."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from byd_catalog.config import Settings
from byd_catalog.graph_db.data_file import load_catalog, save_catalog
from byd_catalog.graph_db.store import CatalogStore
from byd_catalog.models.schemas import CarModel, CatalogSnapshot, Series, Tech
from byd_catalog.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogService:
    """Applies writes to the store and mirrors them to the data file.

    Store mutations run under the store lock; the file write happens after
    the lock is released. Saves are serialized and each one snapshots the
    store when it starts writing, so the newest state is what ends up on disk.
    """

    def __init__(self, store: CatalogStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings
        self._data_file = Path(settings.DATA_FILE)
        self._save_lock = asyncio.Lock()

    @property
    def data_file(self) -> Path:
        return self._data_file

    async def load(self) -> bool:
        """Replace the store contents with the data file.

        A missing file is not an error: the store keeps its current (usually
        empty) contents and False is returned.
        """
        try:
            snapshot = await asyncio.to_thread(load_catalog, self._data_file)
        except FileNotFoundError:
            logger.warning("data_file_missing", path=str(self._data_file))
            return False
        self._store.replace_all(snapshot)
        logger.info("catalog_loaded", path=str(self._data_file), **self._store.counts())
        return True

    async def save(self) -> None:
        async with self._save_lock:
            snapshot = self._store.snapshot()
            await asyncio.to_thread(save_catalog, self._data_file, snapshot)

    async def add_series(
        self, series_name: str, intro: str = "", series_id: int | None = None
    ) -> Series:
        with self._store.locked():
            if series_id is None:
                series_id = self._allocate_id(self._settings.SERIES_ID_START)
            series = self._store.insert_series(
                Series(series_id=series_id, series_name=series_name, intro=intro)
            )
        await self._after_mutation()
        return series

    async def add_tech(self, tech_name: str, intro: str = "", tech_id: int | None = None) -> Tech:
        with self._store.locked():
            if tech_id is None:
                tech_id = self._allocate_id(self._settings.TECH_ID_START)
            tech = self._store.insert_tech(Tech(tech_id=tech_id, tech_name=tech_name, intro=intro))
        await self._after_mutation()
        return tech

    async def add_model(
        self,
        fields: dict[str, Any],
        tech_ids: list[int] | None = None,
        model_id: int | None = None,
    ) -> CarModel:
        """Create a model from its column values.

        `tech_ids=None` defers the technology bindings (see
        `CatalogStore.insert_model`).
        """
        with self._store.locked():
            if model_id is None:
                model_id = self._allocate_id(self._settings.MODEL_ID_START)
            model = self._store.insert_model(CarModel(model_id=model_id, **fields), tech_ids)
        await self._after_mutation()
        return model

    async def add_model_tech(self, model_id: int, tech_id: int) -> bool:
        created = self._store.insert_model_association(model_id, tech_id)
        if created:
            await self._after_mutation()
        return created

    async def replace(self, snapshot: CatalogSnapshot) -> None:
        self._store.replace_all(snapshot)
        await self._after_mutation()

    def _allocate_id(self, start: int) -> int:
        """First id at or above `start` not used by any node. Caller holds the lock."""
        candidate = start
        while self._store.id_in_use(candidate):
            candidate += 1
        return candidate

    async def _after_mutation(self) -> None:
        if self._settings.SAVE_ON_MUTATION:
            await self.save()
