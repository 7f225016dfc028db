from __future__ import annotations

import logging

import httpx

from app.config import get_settings
from app.models.schemas import PifResponse
from app.observability.upstream import instrument_upstream_call
from app.relay.client import get_http_client
from app.relay.policy import is_transient_status
from app.services.errors import PermanentUpstreamFailure, TransientUpstreamFailure, UpstreamFailure

logger = logging.getLogger(__name__)

PIF_ACTION = "fetchPIF"
_GENERIC_FAILURE = "Failed to fetch PIF data"


async def _load_envelope(client: httpx.AsyncClient, url: str, timeout_s: float) -> dict:
    try:
        resp = await instrument_upstream_call(
            operation="fetch_pif",
            url=url,
            fn=lambda: client.get(url, params={"action": PIF_ACTION}, timeout=timeout_s),
        )
    except httpx.RequestError as exc:
        raise TransientUpstreamFailure(str(exc) or type(exc).__name__) from exc

    if not resp.is_success:
        failure = TransientUpstreamFailure if is_transient_status(resp.status_code) else PermanentUpstreamFailure
        raise failure(f"PIF Apps Script returned {resp.status_code}", status=resp.status_code, body=resp.text)

    try:
        envelope = resp.json()
    except ValueError as exc:
        raise PermanentUpstreamFailure(
            f"PIF Apps Script returned invalid JSON: {exc}", status=resp.status_code, body=resp.text
        ) from exc

    if not isinstance(envelope, dict):
        raise PermanentUpstreamFailure(_GENERIC_FAILURE, status=resp.status_code, body=resp.text)
    return envelope


async def fetch_pif(client: httpx.AsyncClient | None = None) -> PifResponse:
    """Read the PIF list straight from its Apps Script. No caching, no retry."""
    settings = get_settings()
    url = settings.pif_apps_script
    http = client or get_http_client()

    try:
        envelope = await _load_envelope(http, url, settings.forward_timeout_s)
    except UpstreamFailure as exc:
        logger.error("PIF fetch error: %s", exc)
        return PifResponse(success=False, error=str(exc))

    if not envelope.get("success"):
        logger.error("PIF fetch failed: %s", envelope)
        return PifResponse(success=False, error=_GENERIC_FAILURE)

    data = envelope.get("data")
    if not isinstance(data, list):
        data = []
    logger.info("Fetched %d PIF entries", len(data))
    return PifResponse(success=True, data=data)
