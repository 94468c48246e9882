"""FastAPI application factory."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from datacurve.api.errors import register_error_handlers
from datacurve.api.routes import curve, datasets
from datacurve.config import ApiSettings


def create_app(settings: ApiSettings | None = None, lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: HTTP settings; defaults are used when omitted.
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic and to
                  attach the engine and dataset service to app.state.

    Returns:
        Configured FastAPI application with CORS, error handlers, and routes.
    """
    settings = settings or ApiSettings()

    app = FastAPI(title="Datacurve", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.state.max_upload_bytes = settings.max_upload_bytes

    # Wired by main.py lifespan
    app.state.engine = None
    app.state.dataset_service = None

    register_error_handlers(app)

    app.include_router(curve.router, prefix="/bonding-curve")
    app.include_router(datasets.router, prefix="/datasets")

    return app
