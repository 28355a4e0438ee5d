"""Global error handlers: every error leaves the API as JSON ``{"detail": ...}``."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 with the field errors; ``ctx`` may hold exceptions, hence the encoder."""
    errors = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
    logger.info("request_validation_failed", path=request.url.path, error_count=len(errors))
    return JSONResponse(status_code=422, content={"detail": "Validation error", "errors": errors})


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    """Log with traceback, answer without internals."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""
    app.add_exception_handler(StarletteHTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error)
