"""Tests for HTTP-based adapters."""

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest

from dining_assistant.adapters.menu_portal_client import HttpxMenuPortalClient
from dining_assistant.adapters.openai_text_client import OpenAITextClient


class _FakeCompletions:
    def __init__(self, content: str | None) -> None:
        self.content = content
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class _FakeOpenAI:
    def __init__(self, content: str | None) -> None:
        self.chat = SimpleNamespace(completions=_FakeCompletions(content))
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_portal_client_returns_page_text() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text="<html>menu</html>")

    client = HttpxMenuPortalClient(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )

    html = asyncio.run(client.fetch_html("https://portal.example/pickmenu.aspx?x=1"))

    assert html == "<html>menu</html>"
    assert seen == ["https://portal.example/pickmenu.aspx?x=1"]
    asyncio.run(client.close())


def test_portal_client_raises_on_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    client = HttpxMenuPortalClient(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.fetch_html("https://portal.example/pickmenu.aspx"))


def test_text_client_returns_completion() -> None:
    fake = _FakeOpenAI("Try the salmon.")
    client = OpenAITextClient(_clients={"key-1": fake})

    text = asyncio.run(
        client.complete(
            messages=[{"role": "user", "content": "Dinner?"}],
            model="gemini-2.0-flash",
            api_key="key-1",
            max_tokens=100,
        )
    )

    assert text == "Try the salmon."
    payload = fake.chat.completions.last_payload
    assert payload["model"] == "gemini-2.0-flash"
    assert payload["max_tokens"] == 100
    assert payload["temperature"] == 0.7


def test_text_client_rejects_empty_completion() -> None:
    client = OpenAITextClient(_clients={"key-1": _FakeOpenAI("")})

    with pytest.raises(RuntimeError, match="empty response"):
        asyncio.run(
            client.complete(messages=[], model="m", api_key="key-1", max_tokens=10)
        )


def test_text_client_parses_structured_output() -> None:
    fake = _FakeOpenAI(json.dumps({"calories": 500}))
    client = OpenAITextClient(_clients={"key-1": fake})

    result = asyncio.run(
        client.complete_json(
            prompt="Analyze toast",
            schema={"type": "object"},
            model="m",
            api_key="key-1",
            max_tokens=10,
        )
    )

    assert result == {"calories": 500}
    response_format = fake.chat.completions.last_payload["response_format"]
    assert response_format["type"] == "json_schema"
    assert response_format["json_schema"]["schema"] == {"type": "object"}


def test_text_client_keeps_one_client_per_key_and_closes_them() -> None:
    first = _FakeOpenAI("a")
    second = _FakeOpenAI("b")
    client = OpenAITextClient(_clients={"key-1": first, "key-2": second})

    asyncio.run(client.close())

    assert first.closed and second.closed
    assert client._clients == {}
