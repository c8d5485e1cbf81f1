"""
User directory, activity feed, data export and account deletion.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from vibrate_monitor.core.constants import (
    ADMIN_ROLES,
    DELETE_CONFIRMATION,
    ROLE_SUPER_ADMIN,
    USER_ACCOUNT_DELETED,
    USER_DATA_EXPORTED,
)
from vibrate_monitor.core.errors import PermissionDenied, ValidationFailed
from vibrate_monitor.handlers.admin import get_user_or_404, query_audit_logs, users_by_id
from vibrate_monitor.handlers.audit import log_audit
from vibrate_monitor.models.audit import AuditLog
from vibrate_monitor.models.reading import VibrationReading
from vibrate_monitor.models.user import AccountState, User
from vibrate_monitor.utils.time import utc_now

logger = logging.getLogger(__name__)

EXPORT_AUDIT_LIMIT = 1000
ANONYMIZED_NAME = "Deleted User"


def directory_entry(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "role": user.role,
        "email": user.email,
        "createdAt": user.created_at.isoformat(),
    }


async def _active_users(session: AsyncSession, role: Optional[str] = None):
    statement = select(User).where(
        User.is_approved == True,  # noqa: E712
        User.is_active == True  # noqa: E712
    )
    if role:
        statement = statement.where(User.role == role)
    result = await session.execute(statement.order_by(User.name))
    return list(result.scalars().all())


async def get_directory(session: AsyncSession) -> Dict[str, Any]:
    """Approved, active users with limited fields."""
    users = await _active_users(session)
    return {"success": True, "users": [directory_entry(u) for u in users]}


async def search_users(
    session: AsyncSession,
    query: Optional[str] = None,
    role: Optional[str] = None
) -> Dict[str, Any]:
    users = await _active_users(session, role)

    term = (query or "").strip().lower()
    if term:
        users = [u for u in users if term in u.name.lower() or term in u.email.lower()]

    return {"success": True, "users": [directory_entry(u) for u in users]}


async def get_user_stats(session: AsyncSession) -> Dict[str, Any]:
    users = list((await session.execute(select(User))).scalars().all())

    by_role: Dict[str, int] = {}
    for user in users:
        by_role[user.role] = by_role.get(user.role, 0) + 1

    recent = sorted(users, key=lambda u: u.created_at, reverse=True)[:5]

    return {
        "success": True,
        "stats": {
            "total": len(users),
            "active": sum(1 for u in users if u.is_active),
            "approved": sum(1 for u in users if u.is_approved),
            "pending": sum(1 for u in users if u.state == AccountState.PENDING),
            "inactive": sum(1 for u in users if not u.is_active),
            "byRole": by_role,
            "recentRegistrations": [
                {**u.summary_dict(), "createdAt": u.created_at.isoformat()}
                for u in recent
            ],
        },
    }


async def get_user_activity(
    session: AsyncSession,
    page: int = 1,
    limit: int = 20,
    user_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None
) -> Dict[str, Any]:
    logs = await query_audit_logs(session, page, limit, user_id=user_id, date_from=date_from, date_to=date_to)
    actors = await users_by_id(session, (log.user_id for log in logs))

    activities = []
    for log in logs:
        entry = log.to_dict()
        actor = actors.get(log.user_id)
        entry["user"] = {"name": actor.name, "email": actor.email} if actor else {"name": "Unknown", "email": ""}
        activities.append(entry)

    return {
        "success": True,
        "activities": activities,
        "pagination": {"page": page, "limit": limit, "total": len(activities)},
    }


async def get_user_profile(session: AsyncSession, user_id: str) -> Dict[str, Any]:
    user = await get_user_or_404(session, user_id)
    recent = await session.execute(
        select(AuditLog).where(AuditLog.user_id == user_id)
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(10)
    )
    return {
        "success": True,
        "user": user.public_dict(),
        "recentActivity": [log.to_dict() for log in recent.scalars().all()],
    }


async def export_user_data(
    session: AsyncSession,
    actor: User,
    user_id: str,
    ip: str = "unknown"
) -> Dict[str, Any]:
    """
    Everything stored about a user: account, readings and audit trail.

    Raises:
        PermissionDenied: caller is neither the user nor an administrator
    """
    if actor.id != user_id and actor.role not in ADMIN_ROLES:
        raise PermissionDenied("You do not have permission to export this data")

    user = await get_user_or_404(session, user_id)

    readings = await session.execute(
        select(VibrationReading).where(VibrationReading.user_id == user_id).order_by(VibrationReading.date)
    )
    logs = await session.execute(
        select(AuditLog).where(AuditLog.user_id == user_id)
        .order_by(AuditLog.timestamp.desc()).limit(EXPORT_AUDIT_LIMIT)
    )

    export = {
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "createdAt": user.created_at.isoformat(),
            "lastLoginAt": user.last_login_at.isoformat() if user.last_login_at else None,
            "isApproved": user.is_approved,
            "isActive": user.is_active,
        },
        "vibrateData": [r.to_dict() for r in readings.scalars().all()],
        "auditLogs": [
            {"action": log.action, "timestamp": log.timestamp.isoformat(), "details": log.details}
            for log in logs.scalars().all()
        ],
        "exportedAt": utc_now().isoformat(),
        "exportedBy": actor.email,
    }

    await log_audit(session, actor.id, USER_DATA_EXPORTED, {
        "targetUserId": user_id,
        "readingsCount": len(export["vibrateData"]),
    }, ip=ip)

    return export


async def delete_user_account(
    session: AsyncSession,
    actor: User,
    user_id: str,
    confirmation: Optional[str],
    ip: str = "unknown"
) -> Dict[str, Any]:
    """
    Anonymize an account; the row stays so audit references remain valid.

    Raises:
        ValidationFailed: confirmation phrase missing
        PermissionDenied: super admin target, or caller is neither the user
            nor the super admin
    """
    if confirmation != DELETE_CONFIRMATION:
        raise ValidationFailed("Account deletion was not confirmed")

    user = await get_user_or_404(session, user_id)

    if user.is_super_admin:
        raise PermissionDenied("The super admin cannot be deleted")
    if actor.id != user_id and actor.role != ROLE_SUPER_ADMIN:
        raise PermissionDenied("You do not have permission to delete this account")

    now = utc_now()
    original_email = user.email
    user.original_email = original_email
    user.name = ANONYMIZED_NAME
    user.email = f"deleted-{int(now.timestamp() * 1000)}-{user.id}@anonymized.local"
    user.password_hash = "DELETED"
    user.is_active = False
    user.is_approved = False
    user.deleted_at = now
    user.deleted_by = actor.id
    await session.commit()

    await log_audit(session, actor.id, USER_ACCOUNT_DELETED, {
        "targetUserId": user_id,
        "originalEmail": original_email,
    }, ip=ip)
    logger.info("User account deleted: %s by %s", original_email, actor.email)

    return {"success": True, "message": "Account deleted"}
