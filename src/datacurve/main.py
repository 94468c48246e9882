"""Entry point for the datacurve service.

Wires all components together and serves the FastAPI application with
uvicorn. The process owns every client's lifecycle: clients are
constructed here, connected in the lifespan, and injected into the engine
and dataset service. Nothing below holds a global client handle.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. SuiLedgerClient (object reads, transaction submission)
4. CurveStateReader (state accessor with retry)
5. BondingCurveEngine (quotes and trades)
6. TuskyBlobStore (dataset files)
7. RecordDatabase / RecordStore / DatasetRegistry (records)
8. DecisionTreeTrainer
9. DatasetService
"""

import asyncio
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from datacurve.api.app import create_app
from datacurve.config import AppSettings
from datacurve.curve.engine import BondingCurveEngine
from datacurve.curve.state import CurveStateReader
from datacurve.datasets import DatasetService
from datacurve.ledger.sui_client import SuiLedgerClient
from datacurve.logging import get_logger, setup_logging
from datacurve.records.database import RecordDatabase
from datacurve.records.registry import DatasetRegistry
from datacurve.records.store import RecordStore
from datacurve.storage.tusky_client import TuskyBlobStore
from datacurve.training.trainer import DecisionTreeTrainer


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all components from settings.

    Does NOT open any connection -- that happens in the lifespan.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    logger = get_logger("datacurve.main")

    ledger = SuiLedgerClient(settings.ledger)
    if not ledger.configured_for_submission:
        logger.warning(
            "no_signing_key_configured",
            note="Quotes will work. Buy, sell, and curve creation will fail.",
        )

    reader = CurveStateReader(
        ledger,
        max_attempts=settings.curve.read_max_attempts,
        retry_delay=settings.curve.read_retry_delay,
    )
    engine = BondingCurveEngine(ledger, reader, settings.ledger)

    blob_store = TuskyBlobStore(settings.storage)

    database = RecordDatabase(settings.records.db_path)
    registry = DatasetRegistry(RecordStore(database))

    trainer = DecisionTreeTrainer()

    dataset_service = DatasetService(
        blob_store=blob_store,
        registry=registry,
        trainer=trainer,
        engine=engine,
        settings=settings.curve,
    )

    return {
        "ledger": ledger,
        "reader": reader,
        "engine": engine,
        "blob_store": blob_store,
        "database": database,
        "registry": registry,
        "trainer": trainer,
        "dataset_service": dataset_service,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect clients on startup, attach services, and close on shutdown."""
    logger = get_logger("datacurve.main")
    components = app.state.components

    async with AsyncExitStack() as stack:
        # Closed in reverse order, including when a later connect() fails
        for name in ("database", "ledger", "blob_store"):
            await components[name].connect()
            stack.push_async_callback(components[name].close)

        app.state.engine = components["engine"]
        app.state.dataset_service = components["dataset_service"]

        logger.info("lifespan_started", can_submit=components["engine"].can_submit)
        yield

    logger.info("datacurve_stopped")


async def run() -> None:
    """Run the datacurve HTTP service."""
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("datacurve.main")

    components = _build_components(settings)

    app = create_app(settings.api, lifespan=lifespan)
    app.state.settings = settings
    app.state.components = components

    logger.info("starting_server", host=settings.api.host, port=settings.api.port)

    config = uvicorn.Config(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
