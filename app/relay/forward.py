from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Awaitable, Callable

import httpx

from app.config import get_settings
from app.models.schemas import ForwardEnvelope, ForwardRequest, RelayResponse
from app.observability.metrics import get_metrics
from app.observability.upstream import instrument_upstream_call
from app.relay.client import get_http_client
from app.relay.policy import forward_retry_policy
from app.relay.retry import PermanentFailure, Success, TransientFailure, attempt
from app.services.errors import InvalidPayload

logger = logging.getLogger(__name__)

_NO_DESTINATION = "No script URL configured."
_INVALID_VALUES = "Missing or invalid 'values' array in payload."


@dataclass(frozen=True)
class RelayResult:
    status_code: int
    response: RelayResponse

    def content(self) -> dict[str, Any]:
        return self.response.model_dump(by_alias=True, exclude_none=True)


def format_elapsed(start: float) -> str:
    return f"{int((perf_counter() - start) * 1000)}ms"


def parse_forward_request(body: Any) -> ForwardRequest:
    if not isinstance(body, dict):
        raise InvalidPayload("Request body must be a JSON object.")
    return ForwardRequest.model_validate(body)


def resolve_destination(request: ForwardRequest, default_url: str | None) -> str:
    destination = request.destination_override or (default_url or "").strip()
    if not destination:
        raise InvalidPayload(_NO_DESTINATION)
    try:
        httpx.URL(destination)
    except httpx.InvalidURL as exc:
        raise InvalidPayload(f"Invalid script URL: {exc}") from exc
    return destination


def build_envelope(request: ForwardRequest) -> ForwardEnvelope:
    if not isinstance(request.values, list):
        raise InvalidPayload(_INVALID_VALUES)
    return ForwardEnvelope(sheet_name=request.sheet_name, values=request.values)


async def forward_rows(
    body: Any,
    *,
    client: httpx.AsyncClient | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> RelayResult:
    """Validate an upload payload and relay ``{sheetName, values}`` to the sheet Apps Script.

    Validation failures are answered with 400 before any network call. Network
    errors and 5xx answers are retried once after a fixed backoff; any other
    non-success status is answered immediately with 502. 302 counts as success.
    """
    start = perf_counter()
    settings = get_settings()

    try:
        request = parse_forward_request(body)
        destination = resolve_destination(request, settings.google_script_url)
        envelope = build_envelope(request)
    except InvalidPayload as exc:
        logger.warning("Rejected upload payload: %s", exc)
        return RelayResult(400, RelayResponse(ok=False, error=str(exc), elapsed=format_elapsed(start)))

    logger.info(
        "Forwarding %d rows to sheet %r via %s...",
        len(envelope.values),
        envelope.sheet_name,
        destination[:50],
    )

    http = client or get_http_client()
    payload = envelope.model_dump(by_alias=True)

    async def _post() -> httpx.Response:
        return await instrument_upstream_call(
            operation="forward",
            url=destination,
            fn=lambda: http.post(destination, json=payload, timeout=settings.forward_timeout_s),
        )

    def _on_retry(attempt_no: int, failure: TransientFailure) -> None:
        get_metrics().observe_retry()
        logger.warning(
            "Attempt %d/%d failed (%s); retrying in %dms",
            attempt_no,
            settings.forward_max_attempts,
            failure.detail,
            settings.forward_retry_backoff_ms,
        )

    policy = forward_retry_policy(
        max_attempts=settings.forward_max_attempts,
        backoff_s=settings.forward_retry_backoff_s,
    )
    result = await attempt(_post, policy, on_retry=_on_retry, sleep=sleep)

    outcome = result.outcome
    elapsed = format_elapsed(start)

    if isinstance(outcome, Success):
        logger.info("Upload forwarded with status %d after %d attempt(s) (%s)", outcome.status, result.attempts, elapsed)
        return RelayResult(
            200,
            RelayResponse(ok=True, forwarded=True, status=outcome.status, text=outcome.body, elapsed=elapsed),
        )

    if isinstance(outcome, PermanentFailure):
        logger.error("Forward failed with status %d (%s)", outcome.status, elapsed)
        return RelayResult(
            502,
            RelayResponse(
                ok=False,
                error=f"Forward failed {outcome.status}",
                status=outcome.status,
                gas_response=outcome.body,
                elapsed=elapsed,
            ),
        )

    logger.error("Upload failed after %d attempts (%s): %s", result.attempts, elapsed, outcome.detail)
    return RelayResult(
        502,
        RelayResponse(
            ok=False,
            error="Forward failed after retry",
            details=outcome.detail,
            status=outcome.status,
            gas_response=outcome.body,
            elapsed=elapsed,
        ),
    )
