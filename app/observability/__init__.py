"""Observability helpers for the relay.

Request IDs + structlog contextvars for every inbound request, timing for every
outbound call, and an in-memory metrics snapshot.
"""
