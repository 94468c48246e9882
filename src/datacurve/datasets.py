"""Dataset lifecycle: upload to blob storage, curve creation, training.

Wires the blob store, record registry, trainer, and curve engine together
for the dataset routes. Curve creation on upload and the purchase after a
good prediction are the only places the dataset flow touches the ledger.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from datacurve.config import CurveSettings
from datacurve.curve.engine import BondingCurveEngine
from datacurve.curve.models import CurveReference, TradeResult
from datacurve.exceptions import DataCurveError, DatasetError, DatasetNotFound
from datacurve.logging import get_logger
from datacurve.records.models import CurveRecord, DatasetRecord
from datacurve.records.registry import DatasetRegistry
from datacurve.storage.client import BlobStore
from datacurve.training.models import Hyperparameters, ModelInfo, PredictionResult
from datacurve.training.trainer import DecisionTreeTrainer

logger = get_logger(__name__)


@dataclass
class DatasetMetadata:
    """Caller-supplied description of an upload."""

    title: str
    description: str = ""
    format: str = ""
    categories: list[str] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> DatasetMetadata:
        if not isinstance(data, dict):
            raise DatasetError("Invalid metadata format")
        title = str(data.get("title") or "").strip()
        if not title:
            raise DatasetError("Metadata must include a title")
        categories = data.get("categories") or []
        if not isinstance(categories, list):
            categories = [str(categories)]
        return cls(
            title=title,
            description=str(data.get("description") or ""),
            format=str(data.get("format") or ""),
            categories=[str(c) for c in categories],
        )


@dataclass
class RegisteredDataset:
    dataset: DatasetRecord
    curve: CurveRecord
    warning: str | None = None


@dataclass
class TrainingOutcome:
    dataset: DatasetRecord
    model: ModelInfo
    prediction: PredictionResult | None
    desired_accuracy: float
    purchase: TradeResult | None = None

    @property
    def good_prediction(self) -> bool:
        accuracy = self.prediction.accuracy if self.prediction else None
        return accuracy is not None and accuracy >= self.desired_accuracy

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": self.good_prediction,
            "good_prediction": self.good_prediction,
            "dataset": {
                "title": self.dataset.title,
                "file_id": self.dataset.file_id,
                "size": self.dataset.size,
            },
            "model": self.model.to_dict(),
            "predictions": self.prediction.to_dict() if self.prediction else None,
        }
        if self.purchase is not None:
            body["purchase"] = self.purchase.to_response("purchasedTokens")
        return body


class DatasetService:
    """Dataset operations behind the /datasets routes."""

    def __init__(
        self,
        blob_store: BlobStore,
        registry: DatasetRegistry,
        trainer: DecisionTreeTrainer,
        engine: BondingCurveEngine,
        settings: CurveSettings,
    ) -> None:
        self._blob_store = blob_store
        self._registry = registry
        self._trainer = trainer
        self._engine = engine
        self._settings = settings
        # Held from the duplicate-title check until the dataset is recorded
        self._registration_lock = asyncio.Lock()

    async def register(
        self,
        metadata: DatasetMetadata,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> RegisteredDataset:
        """Upload a dataset, create its curve, and persist both records.

        A curve that cannot be created does not fail the upload: the curve
        record is saved without an address and a warning is returned.

        Registrations run one at a time up to the dataset record, so two
        uploads with the same title cannot both reach blob storage.
        """
        async with self._registration_lock:
            dataset = await self._store_dataset(metadata, filename, content, mime_type)

        reference, warning = await self._create_curve(metadata.title)
        curve = CurveRecord.for_dataset(metadata.title, self._settings.chain_id, reference)
        await self._registry.save_curve(metadata.title, curve)

        return RegisteredDataset(dataset=dataset, curve=curve, warning=warning)

    async def _store_dataset(
        self,
        metadata: DatasetMetadata,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> DatasetRecord:
        try:
            await self._registry.find_dataset(metadata.title)
        except DatasetNotFound:
            pass
        else:
            raise DatasetError(f'A dataset titled "{metadata.title}" already exists')

        known_vault_id = await self._registry.get_vault_id()
        vault_id = await self._blob_store.ensure_vault(known_vault_id)
        if vault_id != known_vault_id:
            await self._registry.set_vault_id(vault_id)

        file_id = await self._blob_store.upload(vault_id, filename, content, mime_type)
        stored = await self._blob_store.get_file(file_id)

        dataset = DatasetRecord(
            title=metadata.title,
            description=metadata.description,
            format=metadata.format,
            categories=metadata.categories or [],
            size=len(content),
            chain_id=self._settings.chain_id,
            file_id=file_id,
            blob_id=stored.blob_id,
            blob_object_id=stored.blob_object_id,
            original_filename=filename,
            upload_date=datetime.now(timezone.utc).isoformat(),
        )
        await self._registry.add_dataset(dataset)
        return dataset

    async def list_datasets(self) -> list[dict[str, Any]]:
        return await self._registry.list_datasets()

    async def train(
        self,
        title: str,
        hyperparameters: Hyperparameters,
        desired_accuracy: float,
        test_rows: list[dict[str, Any]] | None = None,
        validation_csv: bytes | None = None,
    ) -> TrainingOutcome:
        """Train on a stored dataset, evaluate, and buy on a good prediction.

        Evaluation uses ``validation_csv`` when given, else ``test_rows``.
        The purchase runs only when the prediction meets
        ``desired_accuracy``, CURVE_AUTO_BUY_PAYMENT_AMOUNT is positive, and
        the dataset has a curve.
        """
        dataset = await self._registry.find_dataset(title)
        content = await self._blob_store.download(dataset.file_id)

        model = await asyncio.to_thread(
            self._trainer.fit, dataset.file_id, content, hyperparameters
        )
        await self._registry.save_model_info(dataset.file_id, model.to_dict())

        prediction: PredictionResult | None = None
        if validation_csv:
            prediction = await asyncio.to_thread(
                self._trainer.predict_csv, dataset.file_id, validation_csv
            )
        elif test_rows:
            prediction = await asyncio.to_thread(
                self._trainer.predict, dataset.file_id, test_rows
            )

        outcome = TrainingOutcome(
            dataset=dataset,
            model=model,
            prediction=prediction,
            desired_accuracy=desired_accuracy,
        )
        logger.info(
            "dataset_evaluated",
            title=title,
            accuracy=prediction.accuracy if prediction else None,
            desired_accuracy=desired_accuracy,
            good_prediction=outcome.good_prediction,
        )

        payment = self._settings.auto_buy_payment_amount
        if outcome.good_prediction and payment > 0:
            reference = await self._registry.get_curve_reference(title)
            if reference is None:
                logger.warning("auto_buy_skipped_no_curve", title=title)
            else:
                outcome.purchase = await self._engine.buy(reference.curve_object_id, payment)

        return outcome

    async def _create_curve(self, title: str) -> tuple[CurveReference | None, str | None]:
        if not self._engine.can_submit:
            logger.warning("curve_creation_skipped", title=title, reason="ledger not configured")
            return None, "Ledger not configured for submission; no bonding curve was created"
        try:
            return await self._engine.create_curve(), None
        except DataCurveError as e:
            logger.error("curve_creation_failed", title=title, error=str(e))
            return None, f"Bonding curve creation failed: {e}"
