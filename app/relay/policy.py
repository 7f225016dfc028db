"""Apps Script destination quirks, kept as named policy values."""

from __future__ import annotations

from typing import Any

import httpx

from app.relay.retry import Outcome, PermanentFailure, RetryPolicy, Success, TransientFailure

MAX_ATTEMPTS = 2
RETRY_BACKOFF_S = 0.5
FORWARD_TIMEOUT_S = 15.0
DEFAULT_SHEET_NAME = "Sheet1"

# Apps Script web apps answer a completed POST with a redirect to the result page.
SUCCESS_REDIRECT_STATUSES = frozenset({302})

# Request fields that pick the destination. They are consumed by the relay and never forwarded.
OVERRIDE_FIELDS = ("destinationOverride", "googleScriptUrl")

NETWORK_ERRORS: tuple[type[BaseException], ...] = (httpx.RequestError,)


def is_success_status(status: int) -> bool:
    return 200 <= status < 300 or status in SUCCESS_REDIRECT_STATUSES


def is_transient_status(status: int) -> bool:
    return status >= 500


def classify_forward_result(result: Any) -> Outcome:
    if isinstance(result, BaseException):
        return TransientFailure(error=str(result) or type(result).__name__)

    status = result.status_code
    body = result.text
    if is_success_status(status):
        return Success(status=status, body=body)
    if is_transient_status(status):
        return TransientFailure(status=status, body=body)
    return PermanentFailure(status=status, body=body)


def forward_retry_policy(
    max_attempts: int = MAX_ATTEMPTS,
    backoff_s: float = RETRY_BACKOFF_S,
) -> RetryPolicy[httpx.Response]:
    return RetryPolicy(
        max_attempts=max_attempts,
        backoff_s=backoff_s,
        classify=classify_forward_result,
        retry_on=NETWORK_ERRORS,
    )
