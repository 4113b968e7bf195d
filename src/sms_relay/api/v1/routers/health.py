from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from sms_relay.api.deps import StoreDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health")
async def health(store: StoreDep) -> JSONResponse:
    now = datetime.now(timezone.utc).isoformat()
    try:
        unsent = await store.count_pending()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Health check failed")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "timestamp": now, "error": str(exc)},
        )
    return JSONResponse(
        content={
            "status": "healthy",
            "timestamp": now,
            "database": "connected",
            "unsentMessages": unsent,
        }
    )
