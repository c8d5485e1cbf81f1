"""
User model - accounts, roles and the approval lifecycle.
"""

from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from vibrate_monitor.core.constants import ROLE_OPERATOR, ROLE_SUPER_ADMIN
from vibrate_monitor.utils.time import utc_now


class AccountState(str, Enum):
    """Approval lifecycle: pending -> approved -> deactivated."""
    PENDING = "pending"
    APPROVED = "approved"
    DEACTIVATED = "deactivated"


class UserBase(SQLModel):
    """Base user schema."""
    email: str = Field(..., index=True, unique=True)
    name: str = Field(..., max_length=50)
    role: str = Field(default=ROLE_OPERATOR, index=True)
    is_approved: bool = Field(default=False, index=True)
    is_active: bool = Field(default=True)


class User(UserBase, table=True):
    """User database table."""
    __tablename__ = "users"

    id: str = Field(primary_key=True)
    password_hash: str
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    deactivated_at: Optional[datetime] = None
    deactivated_by: Optional[str] = None
    deactivation_reason: Optional[str] = None
    role_changed_at: Optional[datetime] = None
    role_changed_by: Optional[str] = None
    password_reset_at: Optional[datetime] = None
    password_reset_by: Optional[str] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    original_email: Optional[str] = None

    @property
    def state(self) -> AccountState:
        if not self.is_active:
            return AccountState.DEACTIVATED
        if self.is_approved:
            return AccountState.APPROVED
        return AccountState.PENDING

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    def public_dict(self) -> dict:
        """Every stored field except the password hash."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "isApproved": self.is_approved,
            "isActive": self.is_active,
            "state": self.state.value,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
            "lastLoginAt": _iso(self.last_login_at),
            "approvedAt": _iso(self.approved_at),
            "approvedBy": self.approved_by,
            "deactivatedAt": _iso(self.deactivated_at),
            "deactivatedBy": self.deactivated_by,
            "deactivationReason": self.deactivation_reason,
            "roleChangedAt": _iso(self.role_changed_at),
            "roleChangedBy": self.role_changed_by,
        }

    def summary_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "isApproved": self.is_approved,
        }


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
