"""
Liveness and readiness probes.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vibrate_monitor.core.config import get_settings
from vibrate_monitor.core.database import get_session
from vibrate_monitor.utils.time import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])
settings = get_settings()


@router.get("")
async def health_check():
    return {
        "status": "OK",
        "service": settings.app_name,
        "version": settings.app_version,
        "timestamp": utc_now().isoformat()
    }


@router.get("/live")
async def liveness():
    return {"status": "alive"}


@router.get("/ready")
async def readiness(session: AsyncSession = Depends(get_session)):
    """Ready once the database answers a trivial query."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Readiness check failed")
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}
