from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from blinda.config import Settings
from blinda.errors import SessionExpired, UpstreamUnavailable
from blinda.services.browser_service import BrowserSessionService


class FakeHyperbrowser:
    """Minimal stand-in for the Hyperbrowser REST API."""

    def __init__(self, statuses: list[str] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.statuses = list(statuses or ["running", "completed"])
        self.task_response: Callable[[dict[str, Any]], httpx.Response] | None = None
        self.result: dict[str, Any] = {
            "jobId": "job-1",
            "status": "completed",
            "data": {"finalResult": "Opened the page", "steps": []},
        }

    def paths(self) -> list[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]

    def bodies(self, path: str) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path == "/api/session":
            return httpx.Response(200, json={"id": "sess-new", "status": "active"})
        if request.method == "POST" and path == "/api/task/cua":
            if self.task_response is not None:
                return self.task_response(json.loads(request.content))
            return httpx.Response(200, json={"jobId": "job-1"})
        if path == "/api/task/cua/job-1/status":
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            return httpx.Response(200, json={"status": status})
        if path == "/api/task/cua/job-1":
            return httpx.Response(200, json=self.result)
        return httpx.Response(404, json={"message": "unknown route"})


def make_service(settings: Settings, handler) -> BrowserSessionService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BrowserSessionService(settings, http_client=client)


@pytest.mark.asyncio
async def test_creates_session_when_none_supplied(settings: Settings) -> None:
    api = FakeHyperbrowser()
    service = make_service(settings, api)

    result = await service.execute("Navigate to https://example.com/", None)

    assert result.session_id == "sess-new"
    assert result.page_state["data"]["finalResult"] == "Opened the page"
    assert result.as_payload()["sessionId"] == "sess-new"
    assert api.paths()[:2] == ["POST /api/session", "POST /api/task/cua"]
    assert api.bodies("/api/session") == [{"solveCaptchas": True, "useStealth": True}]
    assert api.bodies("/api/task/cua") == [
        {
            "task": "Navigate to https://example.com/",
            "sessionId": "sess-new",
            "keepBrowserOpen": True,
        }
    ]
    assert all(r.headers["x-api-key"] == "hb-key" for r in api.requests)


@pytest.mark.asyncio
async def test_reuses_supplied_session(settings: Settings) -> None:
    api = FakeHyperbrowser(statuses=["pending", "running", "completed"])
    service = make_service(settings, api)

    result = await service.execute("click the login button", "sess-123")

    assert result.session_id == "sess-123"
    assert "POST /api/session" not in api.paths()
    assert api.bodies("/api/task/cua")[0]["sessionId"] == "sess-123"
    assert api.paths().count("GET /api/task/cua/job-1/status") == 3


@pytest.mark.asyncio
async def test_provider_issued_session_id_wins(settings: Settings) -> None:
    api = FakeHyperbrowser()
    api.result["sessionId"] = "sess-successor"
    service = make_service(settings, api)

    result = await service.execute("scroll down", "sess-123")

    assert result.session_id == "sess-successor"


@pytest.mark.asyncio
async def test_rejected_session_raises_session_expired(settings: Settings) -> None:
    api = FakeHyperbrowser()
    api.task_response = lambda body: httpx.Response(
        404, json={"message": f"Session {body['sessionId']} not found"}
    )
    service = make_service(settings, api)

    with pytest.raises(SessionExpired) as exc_info:
        await service.execute("scroll down", "sess-old")

    assert exc_info.value.session_id == "sess-old"
    assert "POST /api/session" not in api.paths()


@pytest.mark.asyncio
async def test_failed_task_on_closed_session_raises_session_expired(
    settings: Settings,
) -> None:
    api = FakeHyperbrowser()
    api.result = {"jobId": "job-1", "status": "failed", "error": "Session is closed"}
    service = make_service(settings, api)

    with pytest.raises(SessionExpired):
        await service.execute("scroll down", "sess-old")


@pytest.mark.asyncio
async def test_server_error_is_upstream_unavailable(settings: Settings) -> None:
    api = FakeHyperbrowser()
    api.task_response = lambda body: httpx.Response(500, json={"message": "internal"})
    service = make_service(settings, api)

    with pytest.raises(UpstreamUnavailable) as exc_info:
        await service.execute("scroll down", "sess-123")

    assert not isinstance(exc_info.value, SessionExpired)
    assert exc_info.value.upstream_status == 500


@pytest.mark.asyncio
async def test_failed_task_is_upstream_unavailable(settings: Settings) -> None:
    api = FakeHyperbrowser()
    api.result = {"jobId": "job-1", "status": "failed", "error": "Agent gave up"}
    service = make_service(settings, api)

    with pytest.raises(UpstreamUnavailable) as exc_info:
        await service.execute("scroll down", None)

    assert not isinstance(exc_info.value, SessionExpired)


@pytest.mark.asyncio
async def test_transport_timeout_is_marked(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    service = make_service(settings, handler)

    with pytest.raises(UpstreamUnavailable) as exc_info:
        await service.execute("scroll down", None)

    assert exc_info.value.timed_out


@pytest.mark.asyncio
async def test_overall_deadline_is_enforced(settings: Settings) -> None:
    api = FakeHyperbrowser(statuses=["running"])
    slow = settings.model_copy(update={"browser_timeout": 0.05})
    service = make_service(slow, api)

    with pytest.raises(UpstreamUnavailable) as exc_info:
        await service.execute("scroll down", "sess-123")

    assert exc_info.value.timed_out


@pytest.mark.asyncio
async def test_missing_api_key_fails_on_use(settings: Settings) -> None:
    api = FakeHyperbrowser()
    unconfigured = settings.model_copy(update={"hyperbrowser_api_key": None})
    service = make_service(unconfigured, api)

    with pytest.raises(UpstreamUnavailable, match="HYPERBROWSER_API_KEY"):
        await service.execute("scroll down", None)

    assert api.requests == []
