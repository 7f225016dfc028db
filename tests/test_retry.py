import httpx
import pytest

from app.relay.policy import (
    SUCCESS_REDIRECT_STATUSES,
    classify_forward_result,
    forward_retry_policy,
)
from app.relay.retry import PermanentFailure, RetryPolicy, Success, TransientFailure, attempt


class _Sleeps:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _scripted(*results):
    queue = list(results)
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    return operation, calls


def test_classify_forward_result_statuses() -> None:
    assert isinstance(classify_forward_result(httpx.Response(200, text="ok")), Success)
    assert isinstance(classify_forward_result(httpx.Response(204)), Success)
    assert isinstance(classify_forward_result(httpx.Response(302)), Success)
    assert isinstance(classify_forward_result(httpx.Response(500)), TransientFailure)
    assert isinstance(classify_forward_result(httpx.Response(503)), TransientFailure)
    assert isinstance(classify_forward_result(httpx.Response(403)), PermanentFailure)
    assert isinstance(classify_forward_result(httpx.Response(301)), PermanentFailure)
    assert SUCCESS_REDIRECT_STATUSES == {302}


def test_classify_network_error_is_transient_with_message() -> None:
    outcome = classify_forward_result(httpx.ConnectError("connection refused"))
    assert isinstance(outcome, TransientFailure)
    assert outcome.detail == "connection refused"
    assert outcome.status is None


async def test_attempt_retries_transient_once_then_succeeds() -> None:
    sleeps = _Sleeps()
    operation, calls = _scripted(httpx.Response(500), httpx.Response(200, text="done"))

    result = await attempt(operation, forward_retry_policy(), sleep=sleeps)

    assert calls["count"] == 2
    assert result.attempts == 2
    assert result.outcome == Success(status=200, body="done")
    assert sleeps.calls == [0.5]


async def test_attempt_stops_on_permanent_failure() -> None:
    sleeps = _Sleeps()
    operation, calls = _scripted(httpx.Response(403, text="forbidden"), httpx.Response(200))

    result = await attempt(operation, forward_retry_policy(), sleep=sleeps)

    assert calls["count"] == 1
    assert result.outcome == PermanentFailure(status=403, body="forbidden")
    assert sleeps.calls == []


async def test_attempt_exhausts_on_repeated_network_errors() -> None:
    sleeps = _Sleeps()
    operation, calls = _scripted(httpx.ReadTimeout("timed out"), httpx.ConnectError("refused"))

    result = await attempt(operation, forward_retry_policy(), sleep=sleeps)

    assert calls["count"] == 2
    assert isinstance(result.outcome, TransientFailure)
    assert result.outcome.detail == "refused"
    assert sleeps.calls == [0.5]


async def test_attempt_propagates_errors_outside_retry_on() -> None:
    operation, _ = _scripted(RuntimeError("bug"))
    with pytest.raises(RuntimeError):
        await attempt(operation, forward_retry_policy(), sleep=_Sleeps())


async def test_attempt_honours_custom_policy_and_retry_hook() -> None:
    sleeps = _Sleeps()
    retried: list[int] = []
    policy = RetryPolicy(
        max_attempts=3,
        backoff_s=0.01,
        classify=lambda value: Success(200, value) if value == "ok" else TransientFailure(error=value),
    )
    operation, calls = _scripted("busy", "busy", "ok")

    result = await attempt(operation, policy, on_retry=lambda n, _f: retried.append(n), sleep=sleeps)

    assert calls["count"] == 3
    assert result.outcome == Success(200, "ok")
    assert retried == [1, 2]
    assert sleeps.calls == [0.01, 0.01]


async def test_attempt_rejects_zero_attempts() -> None:
    operation, _ = _scripted()
    with pytest.raises(ValueError):
        await attempt(operation, forward_retry_policy(max_attempts=0), sleep=_Sleeps())
