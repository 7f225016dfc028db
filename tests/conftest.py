from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.main import app
from app.observability.metrics import reset_metrics
from app.relay.client import set_http_client
from app.services.symbol_cache import set_symbol_cache

SHEET_URL = "https://sheets.example.test/macros/s/sheet/exec"
PIF_URL = "https://pif.example.test/macros/s/pif/exec"


class FakeUpstream:
    """Scripted Apps Script stand-in: replies are consumed in order, requests are recorded."""

    def __init__(self) -> None:
        self.replies: list[httpx.Response | Exception] = []
        self.requests: list[httpx.Request] = []

    def reply(self, status_code: int, text: str = "", **kwargs: Any) -> "FakeUpstream":
        self.replies.append(httpx.Response(status_code, text=text, **kwargs))
        return self

    def reply_json(self, payload: Any, status_code: int = 200) -> "FakeUpstream":
        self.replies.append(httpx.Response(status_code, json=payload))
        return self

    def fail(self, exc: Exception) -> "FakeUpstream":
        self.replies.append(exc)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError(f"unexpected upstream call: {request.method} {request.url}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def json_bodies(self) -> list[Any]:
        return [json.loads(req.content) for req in self.requests]


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GOOGLE_SCRIPT_URL", SHEET_URL)
    monkeypatch.setenv("PIF_APPS_SCRIPT", PIF_URL)
    get_settings.cache_clear()
    set_symbol_cache(None)
    reset_metrics()

    yield

    set_http_client(None)
    set_symbol_cache(None)
    get_settings.cache_clear()


@pytest.fixture
async def upstream() -> AsyncIterator[FakeUpstream]:
    fake = FakeUpstream()
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(fake.handler),
        follow_redirects=get_settings().follow_redirects,
    )
    set_http_client(client)
    yield fake
    await client.aclose()


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
