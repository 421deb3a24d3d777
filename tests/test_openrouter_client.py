import json

import httpx
import pytest
from pydantic import AnyHttpUrl

from blinda.config import Settings
from blinda.errors import UpstreamUnavailable
from blinda.openrouter import OpenRouterClient
from blinda.services.narration_service import NarrationService


def make_client(settings: Settings, handler) -> OpenRouterClient:
    configured = settings.model_copy(
        update={"openrouter_base_url": AnyHttpUrl("https://example.com/api/v1")}
    )
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenRouterClient(configured, http_client=http_client)


def completion(content) -> httpx.Response:
    return httpx.Response(
        200, json={"choices": [{"message": {"role": "assistant", "content": content}}]}
    )


def test_headers_include_referer_and_title(settings: Settings) -> None:
    configured = settings.model_copy(
        update={"openrouter_app_url": AnyHttpUrl("https://app.example.com")}
    )
    client = OpenRouterClient(configured)

    headers = client._headers  # type: ignore[attr-defined]
    assert headers["Authorization"] == "Bearer or-key"
    assert headers["HTTP-Referer"].rstrip("/") == "https://app.example.com"
    assert headers["X-Title"] == "Blinda"


@pytest.mark.asyncio
async def test_narration_sends_role_tagged_messages(settings: Settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return completion("  The page has a search box. What would you like to do?  ")

    narrator = NarrationService(make_client(settings, handler))
    text = await narrator.summarize("system rules", "page state here")

    assert text == "The page has a search box. What would you like to do?"
    request = seen[0]
    assert request.url.path == "/api/v1/chat/completions"
    payload = json.loads(request.content)
    assert payload["stream"] is False
    assert payload["model"] == "openai/gpt-4o-mini"
    assert payload["messages"] == [
        {"role": "system", "content": "system rules"},
        {"role": "user", "content": "page state here"},
    ]


@pytest.mark.asyncio
async def test_structured_and_missing_content(settings: Settings) -> None:
    responses = [
        completion([{"type": "text", "text": "Two "}, {"type": "text", "text": "links."}]),
        completion(None),
    ]
    client = make_client(settings, lambda request: responses.pop(0))

    assert await client.complete_chat([{"role": "user", "content": "x"}]) == "Two links."
    assert await client.complete_chat([{"role": "user", "content": "x"}]) == ""


@pytest.mark.asyncio
async def test_error_status_is_upstream_unavailable(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(402, json={"error": {"message": "Insufficient credits"}})

    client = make_client(settings, handler)

    with pytest.raises(UpstreamUnavailable) as exc_info:
        await client.complete_chat([{"role": "user", "content": "x"}])

    assert exc_info.value.detail == "Insufficient credits"
    assert exc_info.value.upstream_status == 402


@pytest.mark.asyncio
async def test_timeout_is_upstream_unavailable(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("no route", request=request)

    client = make_client(settings, handler)

    with pytest.raises(UpstreamUnavailable) as exc_info:
        await client.complete_chat([{"role": "user", "content": "x"}])

    assert exc_info.value.timed_out


@pytest.mark.asyncio
async def test_missing_choices_is_upstream_unavailable(settings: Settings) -> None:
    client = make_client(settings, lambda request: httpx.Response(200, json={}))

    with pytest.raises(UpstreamUnavailable, match="missing choices"):
        await client.complete_chat([{"role": "user", "content": "x"}])


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open(settings: Settings) -> None:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: completion("ok"))
    )
    client = OpenRouterClient(settings, http_client=http_client)

    await client.aclose()

    assert not http_client.is_closed
    await http_client.aclose()
