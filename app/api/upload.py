from __future__ import annotations

import logging
from time import perf_counter

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.models.schemas import RelayResponse
from app.relay.forward import format_elapsed, forward_rows

router = APIRouter(tags=["upload"])

logger = logging.getLogger(__name__)


@router.post("/upload")
async def upload_rows(request: Request) -> JSONResponse:
    start = perf_counter()
    try:
        try:
            body = await request.json()
        except ValueError:
            body = None
        result = await forward_rows(body)
        return JSONResponse(status_code=result.status_code, content=result.content())
    except Exception as exc:  # noqa: BLE001
        elapsed = format_elapsed(start)
        logger.exception("Relay error (%s)", elapsed)
        response = RelayResponse(ok=False, error="Internal server error", details=str(exc), elapsed=elapsed)
        return JSONResponse(status_code=500, content=response.model_dump(by_alias=True, exclude_none=True))
