"""
Input validation for readings and accounts.

Validators return lists of human-readable messages so a submitted batch is
reported in full rather than failing on the first problem.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from vibrate_monitor.core.constants import (
    EQUIPMENT_BY_ID,
    MAX_DECIMAL_PLACES,
    PARAMETERS_BY_ID,
    UNITS_BY_ID,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{6,}$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a submitted value to a finite float.

    Returns None for booleans, non-numeric strings, NaN and infinities.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def decimal_places(number: float) -> int:
    """Significant digits after the point, e.g. 20.00 -> 0, 20.001 -> 3."""
    try:
        exponent = Decimal(repr(number)).normalize().as_tuple().exponent
    except InvalidOperation:
        return 0
    return max(0, -exponent)


def validate_parameters(parameters: Dict[str, Any]) -> List[str]:
    """Check a parameter-id -> value mapping against the parameter catalog."""
    errors = []

    for param_id, value in parameters.items():
        param = PARAMETERS_BY_ID.get(param_id)
        if param is None:
            errors.append(f"Unknown parameter: {param_id}")
            continue

        number = to_number(value)
        if number is None:
            errors.append(f"{param['name']} must be a number")
            continue

        if number < 0:
            errors.append(f"{param['name']} cannot be negative")
            continue

        if number > param["maxValue"]:
            errors.append(f"{param['name']} cannot exceed {param['maxValue']}")
            continue

        if decimal_places(number) > MAX_DECIMAL_PLACES:
            errors.append(f"{param['name']} allows at most {MAX_DECIMAL_PLACES} decimal places")

    return errors


def normalize_parameters(parameters: Dict[str, Any]) -> Dict[str, float]:
    """Convert already-validated values to floats for storage."""
    return {param_id: to_number(value) for param_id, value in parameters.items()}


def is_valid_unit(unit_id: str) -> bool:
    return unit_id in UNITS_BY_ID


def is_valid_equipment(equipment_id: str) -> bool:
    return equipment_id in EQUIPMENT_BY_ID


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def is_valid_password(password: str) -> bool:
    """At least 6 characters with one uppercase, one lowercase and one digit."""
    return bool(PASSWORD_PATTERN.match(password or ""))


def password_errors(password: str, label: str = "Password") -> List[str]:
    if not password or len(password) < 6:
        return [f"{label} must be at least 6 characters"]
    if not is_valid_password(password):
        return [f"{label} must contain an uppercase letter, a lowercase letter and a digit"]
    return []


def name_errors(name: str) -> List[str]:
    length = len((name or "").strip())
    if length < NAME_MIN_LENGTH or length > NAME_MAX_LENGTH:
        return [f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"]
    return []


def sanitize_string(value: Any) -> str:
    """Trim and strip angle brackets from free text."""
    if not isinstance(value, str):
        return ""
    return value.strip().replace("<", "").replace(">", "")
