from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.models.schemas import SymbolReadResponse, SymbolWriteResponse
from app.services.errors import InvalidPayload
from app.services.symbol_cache import get_symbol_cache

router = APIRouter(tags=["symbols"])

logger = logging.getLogger(__name__)


def _write_failure(status_code: int, error: str) -> JSONResponse:
    body = SymbolWriteResponse(success=False, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post("/symbols")
async def store_symbols(request: Request) -> JSONResponse:
    try:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise InvalidPayload("Request body must be a JSON object.")

        count = get_symbol_cache().write(
            body.get("symbols"),
            full_data=body.get("fullData"),
            timestamp=body.get("timestamp"),
        )
    except InvalidPayload as exc:
        return _write_failure(400, str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Symbol store failed")
        return _write_failure(500, str(exc))

    return JSONResponse(content=SymbolWriteResponse(success=True, count=count).model_dump(exclude_none=True))


@router.get("/symbols", response_model=SymbolReadResponse, response_model_exclude_none=True, response_model_by_alias=True)
async def read_symbols() -> SymbolReadResponse:
    snapshot = get_symbol_cache().read()
    if snapshot is None:
        return SymbolReadResponse(success=False, symbols=[], count=0, message="No symbols available")
    return SymbolReadResponse(
        success=True,
        symbols=snapshot.symbols,
        full_data=snapshot.full_data,
        count=len(snapshot.symbols),
        timestamp=snapshot.timestamp,
    )
