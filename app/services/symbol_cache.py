from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from app.models.schemas import SymbolSnapshot, SymbolWriteRequest
from app.services.errors import InvalidPayload

logger = logging.getLogger(__name__)


class SymbolCache:
    """Holds the latest symbol snapshot. Writes replace it whole; last write wins."""

    def __init__(self) -> None:
        self._snapshot = SymbolSnapshot()

    def write(
        self,
        symbols: Any,
        full_data: Any = None,
        timestamp: Any = None,
    ) -> int:
        try:
            request = SymbolWriteRequest(symbols=symbols, full_data=full_data, timestamp=timestamp)
        except ValidationError as exc:
            raise InvalidPayload("Missing or invalid 'symbols' array in payload.") from exc

        self._snapshot = SymbolSnapshot(
            symbols=list(request.symbols),
            full_data=list(request.full_data or []),
            timestamp=request.timestamp or datetime.now(timezone.utc),
        )
        logger.info("Stored %d symbols", len(request.symbols))
        return len(request.symbols)

    def read(self) -> SymbolSnapshot | None:
        snapshot = self._snapshot
        if not snapshot.symbols:
            return None
        return snapshot

    def clear(self) -> None:
        self._snapshot = SymbolSnapshot()


_cache: SymbolCache | None = None


def get_symbol_cache() -> SymbolCache:
    global _cache
    if _cache is None:
        _cache = SymbolCache()
    return _cache


def set_symbol_cache(cache: SymbolCache | None) -> None:
    global _cache
    _cache = cache
