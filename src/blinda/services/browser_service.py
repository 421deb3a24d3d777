"""Hyperbrowser computer-use agent adapter."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..config import Settings
from ..errors import InvalidInput, SessionExpired, UpstreamUnavailable
from ..provider_errors import error_detail

logger = logging.getLogger(__name__)

PROVIDER = "Hyperbrowser"

_TERMINAL_STATUSES = {"completed", "failed", "stopped"}
_SESSION_REJECTION_MARKERS = (
    "not found",
    "closed",
    "expired",
    "stopped",
    "invalid session",
    "no longer",
)


@dataclass(frozen=True)
class BrowserTaskResult:
    """Opaque page state reported by the agent plus the effective session id."""

    page_state: dict[str, Any]
    session_id: str

    def as_payload(self) -> dict[str, Any]:
        return {**self.page_state, "sessionId": self.session_id}


def _is_session_rejection(status_code: Optional[int], detail: Any) -> bool:
    if status_code == 404:
        return True
    text = str(detail).lower()
    if "session" not in text:
        return False
    return any(marker in text for marker in _SESSION_REJECTION_MARKERS)


class BrowserSessionService:
    """Create or reuse a remote browser session and run one task against it."""

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def _base_url(self) -> str:
        return str(self._settings.hyperbrowser_base_url).rstrip("/")

    @property
    def _headers(self) -> dict[str, str]:
        api_key = self._settings.hyperbrowser_api_key
        if api_key is None or not api_key.get_secret_value():
            raise UpstreamUnavailable(PROVIDER, "HYPERBROWSER_API_KEY is not configured")
        return {
            "x-api-key": api_key.get_secret_value(),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0)
            )
            logger.info("Created httpx.AsyncClient for Hyperbrowser")
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def execute(
        self, task: str, session_id: Optional[str] = None
    ) -> BrowserTaskResult:
        """Run `task` in the given session, creating one when `session_id` is empty."""

        if not task or not task.strip():
            raise InvalidInput("No task description provided.")

        try:
            return await asyncio.wait_for(
                self._execute(task, session_id or None),
                timeout=self._settings.browser_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailable(
                PROVIDER,
                f"task did not finish within {self._settings.browser_timeout:g}s",
                timed_out=True,
            ) from exc

    async def _execute(
        self, task: str, session_id: Optional[str]
    ) -> BrowserTaskResult:
        if session_id is None:
            logger.info("No session ID provided, creating a new Hyperbrowser session.")
            session_id = await self.create_session()
            logger.info("New session created with ID: %s", session_id)
            reused = False
        else:
            logger.info("Reusing session with ID: %s", session_id)
            reused = True

        job = await self._request(
            "POST",
            "/task/cua",
            json={
                "task": task,
                "sessionId": session_id,
                "keepBrowserOpen": True,
            },
            session_id=session_id if reused else None,
        )
        job_id = job.get("jobId") or job.get("id")
        if not job_id:
            raise UpstreamUnavailable(PROVIDER, "task start response missing jobId")

        await self._wait_for_job(str(job_id))
        result = await self._request("GET", f"/task/cua/{job_id}")

        if result.get("status") == "failed":
            detail = result.get("error") or "task failed"
            if reused and _is_session_rejection(None, detail):
                raise SessionExpired(session_id, detail)
            raise UpstreamUnavailable(PROVIDER, detail)

        effective = result.get("sessionId") or session_id
        logger.info("Task %s finished with status %s", job_id, result.get("status"))
        return BrowserTaskResult(page_state=result, session_id=str(effective))

    async def create_session(self) -> str:
        """Create a session with CAPTCHA solving and stealth mode enabled."""

        session = await self._request(
            "POST",
            "/session",
            json={"solveCaptchas": True, "useStealth": True},
        )
        new_id = session.get("id")
        if not new_id:
            raise UpstreamUnavailable(PROVIDER, "session create response missing id")
        return str(new_id)

    async def _wait_for_job(self, job_id: str) -> None:
        while True:
            status_payload = await self._request("GET", f"/task/cua/{job_id}/status")
            status = str(status_payload.get("status") or "").lower()
            if status in _TERMINAL_STATUSES:
                return
            logger.debug("Task %s status: %s", job_id, status or "unknown")
            await asyncio.sleep(self._settings.browser_poll_interval)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> dict[str, Any]:
        headers = self._headers
        client = self._get_http_client()
        try:
            response = await client.request(
                method, f"{self._base_url}{path}", headers=headers, json=json
            )
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailable(
                PROVIDER, f"{method} {path} timed out", timed_out=True
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(PROVIDER, str(exc)) from exc

        if response.status_code >= 400:
            detail = error_detail(response.content)
            if session_id is not None and _is_session_rejection(
                response.status_code, detail
            ):
                raise SessionExpired(session_id, detail)
            raise UpstreamUnavailable(
                PROVIDER, detail, status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(PROVIDER, "response was not JSON") from exc
        if not isinstance(body, dict):
            raise UpstreamUnavailable(PROVIDER, "unexpected response shape")
        return body


__all__ = ["BrowserSessionService", "BrowserTaskResult"]
