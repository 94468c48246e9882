"""Dataset upload, listing, and training endpoints (multipart forms)."""

from __future__ import annotations

import json
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from datacurve.datasets import DatasetMetadata, DatasetService
from datacurve.exceptions import DatasetError
from datacurve.training.models import Hyperparameters

log = structlog.get_logger(__name__)

router = APIRouter()

ALLOWED_MIME_TYPES = frozenset({"text/csv", "application/json", "application/octet-stream"})


def _service(request: Request) -> DatasetService:
    return request.app.state.dataset_service


async def _read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise DatasetError(f"File exceeds the {max_bytes} byte upload limit")
    return content


def _form_int(form: Any, name: str, default: int) -> int:
    val = form.get(name, "")
    if not val or not str(val).strip():
        return default
    try:
        return int(str(val).strip())
    except ValueError as e:
        raise DatasetError(f"{name} must be an integer") from e


def _form_float(form: Any, name: str, default: float) -> float:
    val = form.get(name, "")
    if not val or not str(val).strip():
        return default
    try:
        return float(str(val).strip())
    except ValueError as e:
        raise DatasetError(f"{name} must be a number") from e


def _parse_test_data(raw: Any) -> list[dict[str, Any]] | None:
    if not raw or not str(raw).strip():
        return None
    try:
        data = json.loads(str(raw))
    except ValueError as e:
        raise DatasetError("Invalid test data format. Must be a valid JSON string.") from e
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise DatasetError("Test data must be a JSON object or a list of objects")
    return data


@router.post("")
async def upload_dataset(request: Request) -> JSONResponse:
    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise DatasetError("No file uploaded")
    if upload.content_type not in ALLOWED_MIME_TYPES:
        raise DatasetError(f"Unsupported file type: {upload.content_type}")

    try:
        metadata = DatasetMetadata.from_dict(json.loads(str(form.get("metadata") or "")))
    except ValueError as e:
        raise DatasetError("Invalid metadata format") from e

    content = await _read_upload(upload, request.app.state.max_upload_bytes)
    structlog.contextvars.bind_contextvars(dataset_title=metadata.title)
    try:
        registered = await _service(request).register(
            metadata,
            filename=upload.filename or "dataset",
            content=content,
            mime_type=upload.content_type or "application/octet-stream",
        )
    finally:
        structlog.contextvars.unbind_contextvars("dataset_title")

    body: dict[str, Any] = {
        "success": True,
        "message": "Dataset uploaded successfully",
        "dataset": {
            "id": registered.dataset.file_id,
            "title": registered.dataset.title,
            "upload_date": registered.dataset.upload_date,
        },
        "bonding_curve": registered.curve.to_dict(),
    }
    if registered.warning:
        body["warning"] = registered.warning
    return JSONResponse(status_code=201, content=body)


@router.get("")
async def list_datasets(request: Request) -> JSONResponse:
    datasets = await _service(request).list_datasets()
    return JSONResponse(content={"datasets": datasets})


@router.post("/{title}/train")
async def train_dataset(title: str, request: Request) -> JSONResponse:
    form = await request.form()

    hyperparameters = Hyperparameters(
        max_depth=_form_int(form, "max_depth", 5),
        min_samples_leaf=_form_int(form, "min_samples_leaf", 1),
        min_samples_split=_form_int(form, "min_samples_split", 2),
        criterion=str(form.get("criterion") or "gini"),  # type: ignore[arg-type]
    )
    desired_accuracy = _form_float(form, "desired_accuracy", 1.0)
    test_rows = _parse_test_data(form.get("test_data"))

    validation_csv: bytes | None = None
    validation = form.get("validation_dataset")
    if isinstance(validation, UploadFile):
        validation_csv = await _read_upload(validation, request.app.state.max_upload_bytes)

    outcome = await _service(request).train(
        title,
        hyperparameters,
        desired_accuracy,
        test_rows=test_rows,
        validation_csv=validation_csv,
    )
    log.info("dataset_trained_via_api", title=title, good_prediction=outcome.good_prediction)
    return JSONResponse(content=outcome.to_response())
