"""
Vibration reading ingestion, listing and removal.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, func

from vibrate_monitor.core.constants import (
    DATA_ACCESSED,
    DATA_CREATED,
    DATA_DELETE_ROLES,
    DATA_DELETED,
    DATA_UPDATED,
    EQUIPMENT_CONFIG,
    PARAMETER_CONFIG,
    UNIT_CONFIG,
)
from vibrate_monitor.core.errors import NotFound, PermissionDenied, ValidationFailed
from vibrate_monitor.handlers.audit import log_audit
from vibrate_monitor.handlers.validation import (
    is_valid_equipment,
    is_valid_unit,
    normalize_parameters,
    sanitize_string,
    validate_parameters,
)
from vibrate_monitor.models.reading import VibrationReading, reading_id
from vibrate_monitor.models.user import User
from vibrate_monitor.utils.time import utc_now

logger = logging.getLogger(__name__)


async def list_readings(
    session: AsyncSession,
    user: User,
    unit: Optional[str] = None,
    equipment: Optional[str] = None,
    on_date: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = 1,
    limit: int = 50,
    ip: str = "unknown"
) -> Dict[str, Any]:
    """Filtered, newest-first page of readings."""
    statement = select(VibrationReading)
    count_statement = select(func.count()).select_from(VibrationReading)

    conditions = []
    if unit:
        conditions.append(VibrationReading.unit == unit)
    if equipment:
        conditions.append(VibrationReading.equipment == equipment)
    if on_date:
        conditions.append(VibrationReading.date == on_date)
    if date_from:
        conditions.append(VibrationReading.date >= date_from)
    if date_to:
        conditions.append(VibrationReading.date <= date_to)

    if conditions:
        statement = statement.where(*conditions)
        count_statement = count_statement.where(*conditions)

    statement = statement.order_by(VibrationReading.timestamp.desc()).offset((page - 1) * limit).limit(limit)

    result = await session.execute(statement)
    readings = list(result.scalars().all())
    total = (await session.execute(count_statement)).scalar() or 0

    await log_audit(session, user.id, DATA_ACCESSED, {
        "filters": {
            "unit": unit,
            "equipment": equipment,
            "date": on_date.isoformat() if on_date else None,
            "dateFrom": date_from.isoformat() if date_from else None,
            "dateTo": date_to.isoformat() if date_to else None,
        },
        "resultCount": len(readings),
    }, ip=ip)

    return {
        "success": True,
        "data": [r.to_dict() for r in readings],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
        },
    }


async def save_reading(
    session: AsyncSession,
    user: User,
    unit: str,
    equipment: str,
    reading_date: date,
    parameters: Dict[str, Any],
    notes: str = "",
    ip: str = "unknown"
) -> Dict[str, Any]:
    """
    Validate and upsert the reading for (unit, equipment, date).

    An existing reading with the same key is replaced in place.

    Raises:
        ValidationFailed: unknown unit/equipment or bad parameter values
    """
    if not is_valid_unit(unit):
        raise ValidationFailed("Invalid unit")
    if not is_valid_equipment(equipment):
        raise ValidationFailed("Invalid equipment")

    param_errors = validate_parameters(parameters)
    if param_errors:
        raise ValidationFailed("Invalid parameters", details=param_errors)

    data_id = reading_id(unit, equipment, reading_date)
    values = normalize_parameters(parameters)
    now = utc_now()

    reading = await session.get(VibrationReading, data_id)
    is_update = reading is not None

    if reading:
        reading.parameters = values
        reading.notes = sanitize_string(notes)
        reading.timestamp = now
        reading.user_id = user.id
        reading.user_name = user.name
    else:
        reading = VibrationReading(
            id=data_id,
            unit=unit,
            equipment=equipment,
            date=reading_date,
            parameters=values,
            notes=sanitize_string(notes),
            timestamp=now,
            user_id=user.id,
            user_name=user.name
        )
        session.add(reading)

    await session.commit()

    await log_audit(session, user.id, DATA_UPDATED if is_update else DATA_CREATED, {
        "dataId": data_id,
        "unit": unit,
        "equipment": equipment,
        "date": reading_date.isoformat(),
        "parametersCount": len(values),
    }, ip=ip)

    logger.info("Data %s: %s by %s", "updated" if is_update else "created", data_id, user.email)

    return {
        "success": True,
        "message": "Reading updated" if is_update else "Reading saved",
        "data": {
            "id": data_id,
            "unit": unit,
            "equipment": equipment,
            "date": reading_date.isoformat(),
            "timestamp": now.isoformat(),
        },
    }


async def delete_reading(
    session: AsyncSession,
    user: User,
    data_id: str,
    ip: str = "unknown"
) -> Dict[str, Any]:
    """
    Remove a reading. Restricted to supervisors and administrators.

    Raises:
        PermissionDenied: caller's role may not delete data
        NotFound: no reading with that id
    """
    if user.role not in DATA_DELETE_ROLES:
        raise PermissionDenied("You do not have permission to delete readings")

    reading = await session.get(VibrationReading, data_id)
    if not reading:
        raise NotFound("Reading not found")

    deleted = {
        "unit": reading.unit,
        "equipment": reading.equipment,
        "date": reading.date.isoformat(),
    }
    await session.delete(reading)
    await session.commit()

    await log_audit(session, user.id, DATA_DELETED, {
        "dataId": data_id,
        "deletedData": deleted,
    }, ip=ip)

    logger.info("Data deleted: %s by %s", data_id, user.email)

    return {"success": True, "message": "Reading deleted"}


def get_configurations() -> Dict[str, Any]:
    """Equipment, parameter and unit catalogs for clients."""
    return {
        "success": True,
        "equipment": EQUIPMENT_CONFIG,
        "parameters": PARAMETER_CONFIG,
        "units": UNIT_CONFIG,
    }
