"""
Vibration data endpoints.
"""

from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from vibrate_monitor.core.constants import (
    DEFAULT_COMPARISON_OFFSET,
    DEFAULT_TIME_RANGE_DAYS,
    MAX_NOTES_LENGTH,
)
from vibrate_monitor.core.database import get_session
from vibrate_monitor.core.security import get_current_user
from vibrate_monitor.handlers.analysis import parse_days, parse_threshold, run_analysis
from vibrate_monitor.handlers.audit import client_ip
from vibrate_monitor.handlers.readings import (
    delete_reading,
    get_configurations,
    list_readings,
    save_reading,
)
from vibrate_monitor.models.user import User

router = APIRouter(prefix="/api/data", tags=["data"])


class ReadingCreate(BaseModel):
    """Schema for saving a day's reading of one piece of equipment."""
    unit: str
    equipment: str = Field(..., min_length=1)
    date: date
    parameters: Dict[str, Any]
    notes: Optional[str] = Field(default="", max_length=MAX_NOTES_LENGTH)


@router.get("")
async def list_readings_endpoint(
    request: Request,
    unit: Optional[str] = None,
    equipment: Optional[str] = None,
    on_date: Optional[date] = Query(None, alias="date"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=1000),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List readings, newest first, optionally filtered by unit, equipment and date range."""
    return await list_readings(
        session, user,
        unit=unit,
        equipment=equipment,
        on_date=on_date,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
        ip=client_ip(request)
    )


@router.post("")
async def save_reading_endpoint(
    reading: ReadingCreate,
    request: Request,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """
    Save the reading for (unit, equipment, date).

    A reading already stored under the same key is replaced.
    """
    return await save_reading(
        session, user,
        unit=reading.unit,
        equipment=reading.equipment,
        reading_date=reading.date,
        parameters=reading.parameters,
        notes=reading.notes or "",
        ip=client_ip(request)
    )


@router.get("/analysis")
async def analysis_endpoint(
    request: Request,
    threshold: Optional[str] = None,
    time_range: Optional[str] = Query(None, alias="timeRange"),
    comparison_days: Optional[str] = Query(None, alias="comparisonDays"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """
    Flag parameters whose latest value rose by at least `threshold` percent
    over an earlier reading of the same equipment.
    """
    return await run_analysis(
        session, user.id,
        threshold=parse_threshold(threshold),
        time_range_days=parse_days(time_range, DEFAULT_TIME_RANGE_DAYS),
        comparison_offset=parse_days(comparison_days, DEFAULT_COMPARISON_OFFSET),
        ip=client_ip(request)
    )


@router.get("/config")
async def config_endpoint(user: User = Depends(get_current_user)):
    """Equipment, parameter and unit catalogs."""
    return get_configurations()


@router.delete("/{data_id}")
async def delete_reading_endpoint(
    data_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Delete a reading (supervisors and administrators only)."""
    return await delete_reading(session, user, data_id, ip=client_ip(request))
