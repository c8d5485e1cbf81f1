# SQLModel database models

from vibrate_monitor.models.user import User, AccountState
from vibrate_monitor.models.reading import VibrationReading
from vibrate_monitor.models.audit import AuditLog

__all__ = [
    "User",
    "AccountState",
    "VibrationReading",
    "AuditLog",
]
