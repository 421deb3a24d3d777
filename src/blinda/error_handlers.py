"""Render taxonomy errors as `{message, error}` JSON responses."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import BlindaError, InvalidInput, UpstreamUnavailable, status_for_error
from .schemas.commands import ErrorResponse

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = "Request failed"
_LOCATION_ROOTS = ("body", "query", "path", "header")


def error_context(message: str):
    """Dependency factory naming the operation for error responses."""

    def _set_context(request: Request) -> None:
        request.state.error_context = message

    return _set_context


def _render(request: Request, exc: Exception, error: str) -> JSONResponse:
    status_code = status_for_error(exc)
    body = ErrorResponse(
        message=getattr(request.state, "error_context", DEFAULT_CONTEXT),
        error=error,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def describe_validation_errors(errors: Sequence[Any]) -> str:
    """Flatten pydantic validation errors into one readable line."""

    parts: list[str] = []
    for error in errors:
        if not isinstance(error, dict):
            parts.append(str(error))
            continue
        loc = list(error.get("loc", ()))
        if loc and loc[0] in _LOCATION_ROOTS:
            loc = loc[1:]
        if error.get("type") == "json_invalid":
            loc = []
        location = ".".join(str(part) for part in loc)
        message = str(error.get("msg") or "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request."


async def blinda_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, BlindaError):
        return await unexpected_error_handler(request, exc)
    if isinstance(exc, InvalidInput):
        logger.info("Rejected request to %s: %s", request.url.path, exc.message)
    elif isinstance(exc, UpstreamUnavailable):
        logger.error(
            "%s handling %s (provider=%s, upstream status=%s): %s",
            exc.error_type,
            request.url.path,
            exc.provider,
            exc.upstream_status,
            exc.message,
        )
    else:
        logger.error(
            "%s handling %s: %s", exc.error_type, request.url.path, exc.message
        )
    return _render(request, exc, exc.message)


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    detail = describe_validation_errors(errors)
    logger.info("Rejected malformed request to %s: %s", request.url.path, detail)
    return _render(request, exc, detail)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error handling %s", request.url.path)
    return _render(request, exc, str(exc) or exc.__class__.__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(BlindaError, blinda_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)


__all__ = [
    "blinda_error_handler",
    "describe_validation_errors",
    "error_context",
    "register_error_handlers",
    "unexpected_error_handler",
    "validation_error_handler",
]
