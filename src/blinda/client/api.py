"""HTTP client for the orchestration backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

SESSION_HEADER = "x-session-id"


class BackendError(Exception):
    """A failed backend call, carrying the `{message, error}` body when present."""

    def __init__(self, status_code: Optional[int], message: str, error: str = ""):
        super().__init__(f"{message}: {error}" if error else message)
        self.status_code = status_code
        self.message = message
        self.error = error

    @property
    def session_expired(self) -> bool:
        return self.status_code == 410


def _json_object(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise BackendError(
            response.status_code, "Malformed backend response", str(exc)
        ) from exc
    if not isinstance(body, dict):
        raise BackendError(
            response.status_code,
            "Malformed backend response",
            f"expected a JSON object, got {type(body).__name__}",
        )
    return body


@dataclass(frozen=True)
class CommandReply:
    audio: bytes
    media_type: str
    session_id: Optional[str]


class BackendClient:
    def __init__(
        self,
        server_url: str,
        *,
        timeout: float = 300.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10.0)
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def check_health(self) -> dict[str, Any]:
        response = await self._send("GET", "/health")
        return _json_object(response)

    async def transcribe(self, wav_audio: bytes) -> str:
        response = await self._send(
            "POST",
            "/api/transcribe",
            files={"audio": ("recording.wav", wav_audio, "audio/wav")},
        )
        body = _json_object(response)
        return str(body.get("text") or "").strip()

    async def process_command(
        self, transcribed_text: str, session_id: Optional[str]
    ) -> CommandReply:
        response = await self._send(
            "POST",
            "/api/process-command",
            json={"transcribedText": transcribed_text, "sessionId": session_id},
        )
        audio = response.content
        if not audio:
            raise BackendError(response.status_code, "Empty audio response")
        return CommandReply(
            audio=audio,
            media_type=response.headers.get("content-type", "audio/mpeg"),
            session_id=response.headers.get(SESSION_HEADER) or None,
        )

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(
                method, f"{self.server_url}{path}", **kwargs
            )
        except httpx.TimeoutException as exc:
            raise BackendError(None, "Request timed out", str(exc)) from exc
        except httpx.HTTPError as exc:
            raise BackendError(None, "Cannot reach backend", str(exc)) from exc

        if response.status_code >= 400:
            message, error = f"HTTP {response.status_code}", ""
            try:
                body = response.json()
            except ValueError:
                error = response.text
            else:
                if isinstance(body, dict):
                    message = str(body.get("message") or message)
                    error = str(body.get("error") or body.get("detail") or "")
            logger.debug("Backend %s %s failed: %s %s", method, path, message, error)
            raise BackendError(response.status_code, message, error)
        return response


__all__ = ["BackendClient", "BackendError", "CommandReply", "SESSION_HEADER"]
