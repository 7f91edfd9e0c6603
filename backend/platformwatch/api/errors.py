"""
Maps platformwatch errors onto HTTP responses so routes stay thin.
First matching rule wins; add new error types here rather than in routes.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from platformwatch.core.errors import PlatformWatchError, StorageFailure, UpstreamUnavailable, ValidationError

logger = logging.getLogger(__name__)

STATUS_BAD_REQUEST = 400
STATUS_INTERNAL_ERROR = 500
STATUS_SERVICE_UNAVAILABLE = 503

ERROR_RULES: list[tuple[type[PlatformWatchError], int, str]] = [
    (ValidationError, STATUS_BAD_REQUEST, "{msg}"),
    (UpstreamUnavailable, STATUS_SERVICE_UNAVAILABLE, "Live departure board unavailable"),
    (StorageFailure, STATUS_INTERNAL_ERROR, "Snapshot storage unavailable"),
]


def error_to_response(exc: PlatformWatchError) -> JSONResponse:
    for exc_type, status_code, detail in ERROR_RULES:
        if isinstance(exc, exc_type):
            return JSONResponse(status_code=status_code, content={"error": detail.format(msg=str(exc))})
    return JSONResponse(status_code=STATUS_INTERNAL_ERROR, content={"error": str(exc)})


async def _handle(request: Request, exc: PlatformWatchError) -> JSONResponse:
    if isinstance(exc, StorageFailure):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    elif isinstance(exc, UpstreamUnavailable):
        logger.warning("Upstream unavailable on %s: %s", request.url.path, exc)
    return error_to_response(exc)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PlatformWatchError, _handle)
