from __future__ import annotations

import httpx

from app.config import get_settings

_client: httpx.AsyncClient | None = None


def set_http_client(client: httpx.AsyncClient | None) -> None:
    global _client
    _client = client


def get_http_client() -> httpx.AsyncClient:
    """Shared outbound client for every Apps Script call (one connection pool per process)."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = httpx.AsyncClient(
            follow_redirects=settings.follow_redirects,
            timeout=settings.forward_timeout_s,
        )
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
