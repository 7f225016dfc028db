from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.models.schemas import PifResponse
from app.relay.pif import fetch_pif

router = APIRouter(tags=["pif"])

logger = logging.getLogger(__name__)


@router.get("/fetch-pif")
async def fetch_pif_entries() -> JSONResponse:
    try:
        result = await fetch_pif()
    except Exception as exc:  # noqa: BLE001
        logger.exception("PIF fetch error")
        result = PifResponse(success=False, error=str(exc))

    status_code = 200 if result.success else 500
    return JSONResponse(status_code=status_code, content=result.model_dump(exclude_none=True))
