"""Typed access to dataset, curve, model, and storage records.

Documents:
- "datasets": {"datasets": [DatasetRecord, ...]}
- "bonding_curves": {"curves": {title: CurveRecord}}
- "models": {"models": {file_id: ModelInfo}}
- "storage": {"vault_id": str}
"""

import asyncio
from typing import Any

from datacurve.curve.models import CurveReference
from datacurve.exceptions import DatasetError, DatasetNotFound
from datacurve.logging import get_logger
from datacurve.records.models import CurveRecord, DatasetRecord
from datacurve.records.store import RecordStore

logger = get_logger(__name__)

_DATASETS = "datasets"
_CURVES = "bonding_curves"
_MODELS = "models"
_STORAGE = "storage"


class DatasetRegistry:
    """Dataset metadata and the curve references owned by each dataset.

    Writers read a whole document and store it back; the lock keeps
    concurrent requests from interleaving between the read and the write.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._lock = asyncio.Lock()

    async def add_dataset(self, dataset: DatasetRecord) -> None:
        """Append a dataset. Titles are unique since curves are keyed by title."""
        async with self._lock:
            document = await self._store.get(_DATASETS, {"datasets": []})
            if any(d["title"] == dataset.title for d in document["datasets"]):
                raise DatasetError(f'A dataset titled "{dataset.title}" already exists')
            document["datasets"].append(dataset.to_dict())
            await self._store.set(_DATASETS, document)
        logger.info("dataset_saved", title=dataset.title, file_id=dataset.file_id)

    async def list_datasets(self) -> list[dict[str, Any]]:
        """All datasets, each with its ``bonding_curve`` record or None."""
        datasets = (await self._store.get(_DATASETS, {"datasets": []}))["datasets"]
        curves = (await self._store.get(_CURVES, {"curves": {}}))["curves"]
        return [{**d, "bonding_curve": curves.get(d["title"])} for d in datasets]

    async def find_dataset(self, title: str) -> DatasetRecord:
        datasets = (await self._store.get(_DATASETS, {"datasets": []}))["datasets"]
        for data in datasets:
            if data["title"] == title:
                return DatasetRecord.from_dict(data)
        raise DatasetNotFound(f'Dataset with title "{title}" not found')

    async def save_curve(self, title: str, curve: CurveRecord) -> None:
        async with self._lock:
            document = await self._store.get(_CURVES, {"curves": {}})
            document["curves"][title] = curve.to_dict()
            await self._store.set(_CURVES, document)
        logger.info("curve_record_saved", title=title, address=curve.address)

    async def get_curve(self, title: str) -> CurveRecord | None:
        curves = (await self._store.get(_CURVES, {"curves": {}}))["curves"]
        data = curves.get(title)
        return CurveRecord.from_dict(data) if data else None

    async def get_curve_reference(self, title: str) -> CurveReference | None:
        curve = await self.get_curve(title)
        return curve.reference if curve else None

    async def save_model_info(self, file_id: str, info: dict[str, Any]) -> None:
        async with self._lock:
            document = await self._store.get(_MODELS, {"models": {}})
            document["models"][file_id] = info
            await self._store.set(_MODELS, document)

    async def get_model_info(self, file_id: str) -> dict[str, Any] | None:
        return (await self._store.get(_MODELS, {"models": {}}))["models"].get(file_id)

    async def get_vault_id(self) -> str | None:
        return (await self._store.get(_STORAGE, {})).get("vault_id")

    async def set_vault_id(self, vault_id: str) -> None:
        async with self._lock:
            document = await self._store.get(_STORAGE, {})
            document["vault_id"] = vault_id
            await self._store.set(_STORAGE, document)
