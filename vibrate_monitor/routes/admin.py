"""
Administrator endpoints: account approval, roles, bulk operations and
system monitoring.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from vibrate_monitor.core.constants import MAX_REASON_LENGTH
from vibrate_monitor.core.database import get_session
from vibrate_monitor.core.security import admin_only, super_admin_only
from vibrate_monitor.handlers.admin import (
    approve_user,
    bulk_update_users,
    change_user_role,
    deactivate_user,
    get_audit_logs,
    get_system_stats,
    list_pending_users,
    list_users,
    reset_user_password,
)
from vibrate_monitor.handlers.audit import client_ip
from vibrate_monitor.models.user import User

router = APIRouter(prefix="/api/admin", tags=["admin"])


class DeactivateRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=MAX_REASON_LENGTH)


class RoleChangeRequest(BaseModel):
    role: str


class PasswordResetRequest(BaseModel):
    new_password: str = Field(..., alias="newPassword")


class BulkRequest(BaseModel):
    user_ids: List[str] = Field(..., alias="userIds")
    action: str
    data: Dict[str, Any] = Field(default_factory=dict)


@router.get("/users")
async def list_users_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    role: Optional[str] = None,
    status: Optional[str] = None,
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    """List accounts. `status` is one of approved, pending, inactive."""
    return await list_users(session, page=page, limit=limit, role=role, status=status)


@router.get("/users/pending")
async def pending_users_endpoint(
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    """Accounts waiting for approval."""
    return await list_pending_users(session)


@router.post("/users/bulk")
async def bulk_users_endpoint(
    body: BulkRequest,
    request: Request,
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    """Approve, deactivate or re-role several users; per-user failures are reported."""
    return await bulk_update_users(
        session, admin,
        user_ids=body.user_ids,
        action=body.action,
        data=body.data,
        ip=client_ip(request)
    )


@router.post("/users/{user_id}/approve")
async def approve_user_endpoint(
    user_id: str,
    request: Request,
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    return await approve_user(session, admin, user_id, ip=client_ip(request))


@router.post("/users/{user_id}/deactivate")
async def deactivate_user_endpoint(
    user_id: str,
    request: Request,
    body: Optional[DeactivateRequest] = None,
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    reason = body.reason if body else None
    return await deactivate_user(session, admin, user_id, reason=reason, ip=client_ip(request))


@router.put("/users/{user_id}/role")
async def change_role_endpoint(
    user_id: str,
    body: RoleChangeRequest,
    request: Request,
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    """Change a user's role. Granting `admin` requires the super admin."""
    return await change_user_role(session, admin, user_id, body.role, ip=client_ip(request))


@router.post("/users/{user_id}/reset-password")
async def reset_password_endpoint(
    user_id: str,
    body: PasswordResetRequest,
    request: Request,
    admin: User = Depends(super_admin_only),
    session: AsyncSession = Depends(get_session)
):
    return await reset_user_password(session, admin, user_id, body.new_password, ip=client_ip(request))


@router.get("/stats")
async def stats_endpoint(
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    """User and data counts plus the latest audit entries."""
    return await get_system_stats(session)


@router.get("/audit-logs")
async def audit_logs_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    action: Optional[str] = None,
    user_id: Optional[str] = Query(None, alias="userId"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    return await get_audit_logs(
        session,
        page=page,
        limit=limit,
        action=action,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to
    )
