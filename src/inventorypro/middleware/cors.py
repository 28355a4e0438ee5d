"""CORS for the InventoryPro web client."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inventorypro.config import Settings

ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-User-Id", "X-Request-Id"]


def allowed_origins(settings: Settings) -> list[str]:
    """Configured origins plus the app's own base URL, de-duplicated."""
    origins = [o.rstrip("/") for o in settings.cors_origins]
    base = settings.app_base_url.rstrip("/")
    if base and base not in origins:
        origins.append(base)
    return origins


def setup_cors(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=ALLOWED_HEADERS,
        expose_headers=["X-Request-Id"],
    )
