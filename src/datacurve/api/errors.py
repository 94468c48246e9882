"""Mapping of datacurve exceptions to HTTP responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from datacurve.exceptions import (
    ConfigurationMissing,
    DataCurveError,
    DatasetError,
    DatasetNotFound,
    InsufficientSupply,
    InvalidAmount,
    LedgerError,
    LedgerReadFailure,
    LedgerTransactionFailure,
    StorageError,
    TrainingError,
)

log = structlog.get_logger(__name__)

# Most specific first; the first isinstance match wins.
_STATUS_CODES: list[tuple[type[DataCurveError], int]] = [
    (DatasetNotFound, 404),
    (DatasetError, 400),
    (InvalidAmount, 400),
    (InsufficientSupply, 400),
    (TrainingError, 422),
    (ConfigurationMissing, 503),
    (LedgerReadFailure, 502),
    (LedgerTransactionFailure, 502),
    (LedgerError, 502),
    (StorageError, 502),
]


def status_for(exc: DataCurveError) -> int:
    for exc_type, status in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status
    return 500


async def _handle_datacurve_error(request: Request, exc: DataCurveError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        log.error(
            "request_failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
    else:
        log.info(
            "request_rejected",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
    return JSONResponse(status_code=status, content={"success": False, "message": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DataCurveError, _handle_datacurve_error)  # type: ignore[arg-type]
