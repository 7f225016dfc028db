from __future__ import annotations


class RelayError(Exception):
    """Base class for failures the relay reports to its callers."""


class InvalidPayload(RelayError, ValueError):
    """Missing or malformed request fields; answered with a 400 before any outbound call."""


class UpstreamFailure(RelayError):
    def __init__(self, message: str, status: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class TransientUpstreamFailure(UpstreamFailure):
    """Network error or 5xx from the destination."""


class PermanentUpstreamFailure(UpstreamFailure):
    """Non-5xx failure status from the destination; never retried."""
