"""OpenRouter chat-completion client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Sequence

import httpx

from .config import Settings
from .errors import UpstreamUnavailable
from .provider_errors import error_detail

logger = logging.getLogger(__name__)

PROVIDER = "OpenRouter"


class OpenRouterClient:
    """Client responsible for one-shot chat completions from OpenRouter."""

    _client_lock: asyncio.Lock = asyncio.Lock()
    _client_pool: dict[tuple[str, float], httpx.AsyncClient] = {}

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings
        self._http_client = http_client
        self._owns_client = http_client is None

    def _client_key(self) -> tuple[str, float]:
        return (self._base_url, float(self._settings.request_timeout))

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client

        key = self._client_key()
        client = self.__class__._client_pool.get(key)
        if client is not None:
            return client

        async with self.__class__._client_lock:
            client = self.__class__._client_pool.get(key)
            if client is None:
                timeout = httpx.Timeout(self._settings.request_timeout, connect=10.0)
                limits = httpx.Limits(
                    max_connections=50,
                    max_keepalive_connections=20,
                )
                client = httpx.AsyncClient(
                    timeout=timeout,
                    limits=limits,
                    http2=True,
                )
                self.__class__._client_pool[key] = client
        return client

    @property
    def _headers(self) -> dict[str, str]:
        api_key = self._settings.openrouter_api_key
        if api_key is None or not api_key.get_secret_value():
            raise UpstreamUnavailable(PROVIDER, "OPENROUTER_API_KEY is not configured")
        headers = {
            "Authorization": f"Bearer {api_key.get_secret_value()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._settings.openrouter_app_url:
            referer = str(self._settings.openrouter_app_url)
            headers["HTTP-Referer"] = referer
            headers["Referer"] = referer
        if self._settings.openrouter_app_name:
            headers["X-Title"] = self._settings.openrouter_app_name
        return headers

    @property
    def _base_url(self) -> str:
        """Return the OpenRouter API base URL without a trailing slash."""

        return str(self._settings.openrouter_base_url).rstrip("/")

    async def complete_chat(
        self,
        messages: Sequence[Mapping[str, Any]],
        *,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Request a single non-streaming completion and return its text.

        An empty string is returned when the model produced no content; callers
        decide how to treat that.
        """

        payload: dict[str, Any] = {
            "model": model or self._settings.default_model,
            "stream": False,
            "messages": [dict(message) for message in messages],
        }
        if temperature is not None:
            payload["temperature"] = temperature

        headers = self._headers
        client = await self._get_http_client()
        try:
            response = await client.post(
                f"{self._base_url}/chat/completions",
                headers=headers,
                json=payload,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailable(PROVIDER, str(exc) or "request timed out", timed_out=True) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(PROVIDER, str(exc)) from exc

        if response.status_code >= 400:
            detail = error_detail(response.content)
            raise UpstreamUnavailable(
                PROVIDER, detail, status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as exc:  # pragma: no cover - unexpected payload
            raise UpstreamUnavailable(PROVIDER, str(exc)) from exc

        text = self._extract_message_text(body)
        logger.debug("OpenRouter completion returned %d chars", len(text))
        return text

    @staticmethod
    def _extract_message_text(payload: Mapping[str, Any]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, Sequence) or not choices:
            raise UpstreamUnavailable(PROVIDER, "Completion response missing choices")
        message_container = choices[0]
        if not isinstance(message_container, Mapping):
            raise UpstreamUnavailable(PROVIDER, "Completion response missing message")
        message = message_container.get("message")
        if not isinstance(message, Mapping):
            raise UpstreamUnavailable(PROVIDER, "Completion response missing message")
        content = message.get("content")
        if isinstance(content, str):
            return content.strip()
        if isinstance(content, Sequence):
            fragments: list[str] = []
            for item in content:
                if not isinstance(item, Mapping):
                    continue
                if item.get("type") == "text" and isinstance(item.get("text"), str):
                    fragments.append(item["text"])
            return "".join(fragments).strip()
        return ""

    async def aclose(self) -> None:
        if not self._owns_client:
            return
        await self.__class__.aclose_shared()

    @classmethod
    async def aclose_shared(cls) -> None:
        async with cls._client_lock:
            clients = list(cls._client_pool.values())
            cls._client_pool.clear()
        for client in clients:
            try:
                await client.aclose()
            except Exception as exc:  # pragma: no cover - best effort cleanup
                logger.debug("Ignoring error while closing OpenRouter client: %s", exc)


__all__ = ["OpenRouterClient"]
