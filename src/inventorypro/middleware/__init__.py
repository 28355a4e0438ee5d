"""HTTP middleware and app-wide handlers."""

from fastapi import FastAPI

from inventorypro.config import Settings
from inventorypro.middleware.cors import setup_cors
from inventorypro.middleware.error_handler import setup_error_handlers
from inventorypro.middleware.logging import setup_logging
from inventorypro.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Logging first, then handlers and middleware.

    The last middleware added is the outermost, so CORS headers also land
    on error responses and on requests rejected before routing.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
