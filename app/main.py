import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.metrics import router as metrics_router
from app.api.pif import router as pif_router
from app.api.symbols import router as symbols_router
from app.api.upload import router as upload_router
from app.config import get_settings
from app.observability.logging import configure_logging
from app.observability.middleware import RequestContextMiddleware
from app.relay.client import close_http_client

logger = logging.getLogger(__name__)


app = FastAPI(title="Sheet Relay", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)
app.add_middleware(RequestContextMiddleware)
app.include_router(upload_router)
app.include_router(pif_router)
app.include_router(symbols_router)
app.include_router(metrics_router)


@app.on_event("startup")
def _startup() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Sheet Apps Script: %s", settings.google_script_url)
    logger.info("PIF Apps Script: %s", settings.pif_apps_script)


@app.on_event("shutdown")
async def _shutdown() -> None:
    await close_http_client()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.get("/")
async def index() -> dict:
    return {
        "status": "ok",
        "timestamp": _now(),
        "message": "Sheet relay alive",
        "endpoints": {
            "health": "GET /health",
            "upload": "POST /upload",
            "fetchPIF": "GET /fetch-pif",
            "storeSymbols": "POST /symbols",
            "readSymbols": "GET /symbols",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "timestamp": _now()}
