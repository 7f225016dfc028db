"""Bounded retry for outbound calls.

An operation's result (or a network exception) is classified into one of three
outcomes. Only transient outcomes are retried, with a fixed backoff between
attempts.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

R = TypeVar("R")


@dataclass(frozen=True)
class Success:
    status: int
    body: str


@dataclass(frozen=True)
class TransientFailure:
    status: int | None = None
    body: str | None = None
    error: str | None = None

    @property
    def detail(self) -> str:
        if self.error:
            return self.error
        return f"Non-OK response {self.status}"


@dataclass(frozen=True)
class PermanentFailure:
    status: int
    body: str


Outcome = Union[Success, TransientFailure, PermanentFailure]


@dataclass(frozen=True)
class RetryResult:
    outcome: Outcome
    attempts: int


@dataclass(frozen=True)
class RetryPolicy(Generic[R]):
    max_attempts: int
    backoff_s: float
    classify: Callable[[Any], Outcome]
    retry_on: tuple[type[BaseException], ...] = ()


async def attempt(
    operation: Callable[[], Awaitable[R]],
    policy: RetryPolicy[R],
    *,
    on_retry: Callable[[int, TransientFailure], None] | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> RetryResult:
    """Run ``operation`` until it succeeds, fails permanently, or attempts run out.

    Exceptions listed in ``policy.retry_on`` are handed to ``policy.classify``
    as values; anything else propagates to the caller untouched.
    """
    if policy.max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    outcome: Outcome
    attempts = 0
    while attempts < policy.max_attempts:
        attempts += 1
        try:
            result: Any = await operation()
        except policy.retry_on as exc:
            result = exc

        outcome = policy.classify(result)
        if not isinstance(outcome, TransientFailure):
            break
        if attempts < policy.max_attempts:
            if on_retry is not None:
                on_retry(attempts, outcome)
            await sleep(policy.backoff_s)

    return RetryResult(outcome=outcome, attempts=attempts)
