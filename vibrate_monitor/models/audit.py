"""
Audit log model - append-only trail of who did what.
"""

from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import event
from typing import Any, Dict, Optional
from datetime import datetime

from vibrate_monitor.utils.time import utc_now


class AuditLogBase(SQLModel):
    """Base audit log schema."""
    user_id: Optional[str] = Field(default=None, index=True, description="Acting user id")
    action: str = Field(..., index=True, description="Action type (e.g. 'DATA_CREATED')")
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    ip: str = Field(default="unknown")


class AuditLog(AuditLogBase, table=True):
    """Audit log database table - append-only."""
    __tablename__ = "audit_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=utc_now, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "action": self.action,
            "details": self.details,
            "ip": self.ip,
            "timestamp": self.timestamp.isoformat(),
        }


class AuditLogImmutable(RuntimeError):
    pass


@event.listens_for(AuditLog, "before_update")
def _reject_update(mapper, connection, target):
    raise AuditLogImmutable("audit log entries cannot be modified")


@event.listens_for(AuditLog, "before_delete")
def _reject_delete(mapper, connection, target):
    raise AuditLogImmutable("audit log entries cannot be deleted")
