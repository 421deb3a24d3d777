"""Error taxonomy shared by the adapters, the orchestrator and the routers."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import status
from fastapi.exceptions import RequestValidationError


class BlindaError(Exception):
    """Base class for failures surfaced to API callers."""

    error_type = "internal_error"

    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidInput(BlindaError):
    """A required field (text, audio, task) is missing or empty."""

    error_type = "invalid_input"


class UpstreamUnavailable(BlindaError):
    """An external provider call failed, errored or timed out."""

    error_type = "upstream_unavailable"

    def __init__(
        self,
        provider: str,
        detail: Any,
        *,
        status_code: Optional[int] = None,
        timed_out: bool = False,
    ):
        super().__init__(f"{provider} request failed: {detail}", detail)
        self.provider = provider
        self.upstream_status = status_code
        self.timed_out = timed_out


class SessionExpired(UpstreamUnavailable):
    """The browser provider rejected a supplied session identifier."""

    error_type = "session_expired"

    def __init__(self, session_id: str, detail: Any = None):
        super().__init__(
            "Hyperbrowser",
            detail or f"session {session_id} is no longer available",
            status_code=None,
        )
        self.session_id = session_id


def status_for_error(exc: BaseException) -> int:
    """Map an exception onto the HTTP status returned to clients."""

    if isinstance(exc, (InvalidInput, RequestValidationError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, SessionExpired):
        return status.HTTP_410_GONE
    if isinstance(exc, UpstreamUnavailable):
        if exc.timed_out:
            return status.HTTP_504_GATEWAY_TIMEOUT
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


__all__ = [
    "BlindaError",
    "InvalidInput",
    "SessionExpired",
    "UpstreamUnavailable",
    "status_for_error",
]
