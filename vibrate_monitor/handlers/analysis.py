"""
Anomaly detection over recent vibration readings.

Readings are grouped per (unit, equipment); the most recent reading of each
group is compared with an earlier one and every parameter whose percentage
increase meets the threshold is reported.
"""

import logging
import math
from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from vibrate_monitor.core.constants import (
    DATA_ANALYSIS_REQUESTED,
    DEFAULT_COMPARISON_OFFSET,
    DEFAULT_THRESHOLD_PERCENT,
    DEFAULT_TIME_RANGE_DAYS,
    EQUIPMENT_BY_ID,
    PARAMETERS_BY_ID,
)
from vibrate_monitor.handlers.audit import log_audit
from vibrate_monitor.models.reading import VibrationReading
from vibrate_monitor.utils.time import days_ago, utc_today

logger = logging.getLogger(__name__)


def parse_threshold(raw: Optional[str]) -> float:
    """Numeric coercion; anything non-numeric becomes NaN and matches nothing."""
    if raw is None or raw == "":
        return DEFAULT_THRESHOLD_PERCENT
    try:
        return float(raw)
    except (TypeError, ValueError):
        return math.nan


def parse_days(raw: Optional[str], default: int) -> int:
    """Integer coercion falling back to `default`."""
    if raw is None or raw == "":
        return default
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return default


def round_half_up(value: float) -> float:
    """Two-place rounding with halves going up (40.625 -> 40.63)."""
    return math.floor(value * 100 + 0.5) / 100


def pick_comparison(group: List[VibrationReading], offset: int) -> VibrationReading:
    """
    Reading to compare the latest one against.

    `group` is sorted newest first. An offset outside the group falls back to
    the oldest reading.
    """
    if 0 <= offset < len(group):
        return group[offset]
    return group[-1]


def group_readings(readings: Iterable[VibrationReading]) -> Dict[Tuple[str, str], List[VibrationReading]]:
    groups: Dict[Tuple[str, str], List[VibrationReading]] = defaultdict(list)
    for reading in readings:
        groups[(reading.unit, reading.equipment)].append(reading)
    return groups


def detect_anomalies(
    readings: Iterable[VibrationReading],
    threshold: float = DEFAULT_THRESHOLD_PERCENT,
    comparison_offset: int = DEFAULT_COMPARISON_OFFSET
) -> List[Dict[str, Any]]:
    """
    Flag parameters whose increase over the comparison reading is at least
    `threshold` percent.

    Returns:
        Anomaly records sorted by increasePercentage, highest first
    """
    anomalies = []

    for (unit, equipment), group in group_readings(readings).items():
        if len(group) < 2:
            continue

        group.sort(key=lambda r: r.date, reverse=True)
        latest = group[0]
        comparison = pick_comparison(group, comparison_offset)
        previous_values = comparison.parameters or {}

        for parameter_id, latest_value in (latest.parameters or {}).items():
            comparison_value = previous_values.get(parameter_id)

            # zero or missing values are treated as not comparable
            if not latest_value or not comparison_value:
                continue

            increase = (latest_value - comparison_value) / comparison_value * 100
            if not increase >= threshold:
                continue

            equipment_info = EQUIPMENT_BY_ID.get(equipment)
            parameter_info = PARAMETERS_BY_ID.get(parameter_id)
            anomalies.append({
                "unit": unit,
                "equipment": equipment,
                "equipmentName": equipment_info["name"] if equipment_info else equipment,
                "parameter": parameter_id,
                "parameterName": parameter_info["name"] if parameter_info else parameter_id,
                "currentValue": latest_value,
                "previousValue": comparison_value,
                "increasePercentage": round_half_up(increase),
                "increaseAmount": round_half_up(latest_value - comparison_value),
                "latestDate": latest.date.isoformat(),
                "comparisonDate": comparison.date.isoformat(),
            })

    anomalies.sort(key=lambda a: a["increasePercentage"], reverse=True)
    return anomalies


async def get_readings_between(
    session: AsyncSession,
    start_date: date,
    end_date: date
) -> List[VibrationReading]:
    statement = select(VibrationReading).where(
        VibrationReading.date >= start_date,
        VibrationReading.date <= end_date
    ).order_by(VibrationReading.date.desc())

    result = await session.execute(statement)
    return list(result.scalars().all())


async def run_analysis(
    session: AsyncSession,
    user_id: str,
    threshold: float = DEFAULT_THRESHOLD_PERCENT,
    time_range_days: int = DEFAULT_TIME_RANGE_DAYS,
    comparison_offset: int = DEFAULT_COMPARISON_OFFSET,
    ip: str = "unknown",
    today: Optional[date] = None
) -> Dict[str, Any]:
    """Scan the recent window, detect anomalies and audit the request."""
    end_date = today or utc_today()
    start_date = days_ago(time_range_days, end_date)

    readings = await get_readings_between(session, start_date, end_date)
    anomalies = detect_anomalies(readings, threshold, comparison_offset)

    reported_threshold = threshold if math.isfinite(threshold) else None
    await log_audit(session, user_id, DATA_ANALYSIS_REQUESTED, {
        "threshold": reported_threshold,
        "timeRange": time_range_days,
        "comparisonDays": comparison_offset,
        "anomaliesFound": len(anomalies),
    }, ip=ip)

    logger.info(
        "Analysis over %s..%s found %d anomalies in %d readings",
        start_date, end_date, len(anomalies), len(readings)
    )

    return {
        "success": True,
        "anomalies": anomalies,
        "analysis": {
            "threshold": reported_threshold,
            "timeRange": time_range_days,
            "comparisonDays": comparison_offset,
            "totalDataPoints": len(readings),
            "anomaliesFound": len(anomalies),
        },
    }
