"""HTTP API -- FastAPI application, routes, and error mapping."""

from datacurve.api.app import create_app

__all__ = ["create_app"]
