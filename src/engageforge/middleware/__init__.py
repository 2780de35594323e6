"""Middleware registration."""

from fastapi import FastAPI

from engageforge.config import Settings
from engageforge.middleware.error_handler import setup_error_handlers
from engageforge.middleware.logging import setup_logging
from engageforge.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure logging, error handlers and request-id propagation."""
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
