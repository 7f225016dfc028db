from __future__ import annotations

from time import perf_counter
from typing import Awaitable, Callable

import httpx
import structlog

from app.observability.metrics import get_metrics


def _short_url(url: str, keep: int = 50) -> str:
    return url if len(url) <= keep else url[:keep] + "..."


async def instrument_upstream_call(
    *,
    operation: str,
    url: str,
    fn: Callable[[], Awaitable[httpx.Response]],
) -> httpx.Response:
    """Time an outbound call, update metrics, and emit a structured log event."""

    log = structlog.get_logger("upstream")
    start = perf_counter()
    try:
        resp = await fn()
    except Exception:
        elapsed_ms = (perf_counter() - start) * 1000.0
        get_metrics().observe_upstream_call(elapsed_ms=elapsed_ms, failed=True)
        log.warning(
            "upstream_call_failed",
            operation=operation,
            target=_short_url(url),
            elapsed_ms=round(elapsed_ms, 2),
            exc_info=True,
        )
        raise

    elapsed_ms = (perf_counter() - start) * 1000.0
    get_metrics().observe_upstream_call(elapsed_ms=elapsed_ms, failed=resp.status_code >= 400)
    log.info(
        "upstream_call",
        operation=operation,
        target=_short_url(url),
        status_code=resp.status_code,
        elapsed_ms=round(elapsed_ms, 2),
    )
    return resp
