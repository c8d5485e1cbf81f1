"""
Administrator user management: approval lifecycle, roles, statistics and
the audit log view.
"""

import logging
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, func

from vibrate_monitor.core.constants import (
    ASSIGNABLE_ROLES,
    PASSWORD_RESET_BY_ADMIN,
    ROLE_ADMIN,
    ROLE_SUPER_ADMIN,
    USER_APPROVED,
    USER_DEACTIVATED,
    USER_ROLE_CHANGED,
)
from vibrate_monitor.core.errors import ApiError, NotFound, PermissionDenied, ValidationFailed
from vibrate_monitor.core.security import hash_password
from vibrate_monitor.handlers.audit import log_audit
from vibrate_monitor.handlers.validation import password_errors, sanitize_string
from vibrate_monitor.models.audit import AuditLog
from vibrate_monitor.models.reading import VibrationReading
from vibrate_monitor.models.user import AccountState, User
from vibrate_monitor.utils.time import day_end, day_start, utc_now, utc_today

logger = logging.getLogger(__name__)

BULK_ACTIONS = ("approve", "deactivate", "changeRole")
UNKNOWN_USER_NAME = "Unknown"


# ── State transitions ────────────────────────────────────────────────────────
# These mutate the target in memory; callers commit and audit.

def apply_approval(target: User, actor: User) -> None:
    if target.state == AccountState.DEACTIVATED:
        raise ValidationFailed("Deactivated users cannot be approved")
    if target.state == AccountState.APPROVED:
        raise ValidationFailed("This user is already approved")

    target.is_approved = True
    target.approved_at = utc_now()
    target.approved_by = actor.id


def apply_deactivation(target: User, actor: User, reason: Optional[str] = None) -> None:
    if target.is_super_admin:
        raise PermissionDenied("The super admin cannot be deactivated")
    if target.state == AccountState.DEACTIVATED:
        raise ValidationFailed("This user is already deactivated")

    target.is_active = False
    target.is_approved = False
    target.deactivated_at = utc_now()
    target.deactivated_by = actor.id
    target.deactivation_reason = sanitize_string(reason) or "No reason provided"


def apply_role_change(target: User, actor: User, role: str) -> str:
    """Returns the previous role."""
    if role not in ASSIGNABLE_ROLES:
        raise ValidationFailed("Invalid role")
    if target.is_super_admin:
        raise PermissionDenied("The super admin role cannot be changed")
    if role == ROLE_ADMIN and actor.role != ROLE_SUPER_ADMIN:
        raise PermissionDenied("Only the super admin can grant the admin role")

    old_role = target.role
    target.role = role
    target.role_changed_at = utc_now()
    target.role_changed_by = actor.id
    return old_role


# ── Queries ──────────────────────────────────────────────────────────────────

async def get_user_or_404(session: AsyncSession, user_id: str) -> User:
    user = await session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


async def list_users(
    session: AsyncSession,
    page: int = 1,
    limit: int = 10,
    role: Optional[str] = None,
    status: Optional[str] = None
) -> Dict[str, Any]:
    """Page of users filtered by role and approval status."""
    conditions = []
    if role and role != "all":
        conditions.append(User.role == role)
    if status == "approved":
        conditions.append(User.is_approved == True)  # noqa: E712
    elif status == "pending":
        conditions.append(User.is_approved == False)  # noqa: E712
    elif status == "inactive":
        conditions.append(User.is_active == False)  # noqa: E712

    statement = select(User)
    count_statement = select(func.count()).select_from(User)
    if conditions:
        statement = statement.where(*conditions)
        count_statement = count_statement.where(*conditions)

    statement = statement.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit)
    users = list((await session.execute(statement)).scalars().all())
    total = (await session.execute(count_statement)).scalar() or 0

    return {
        "success": True,
        "users": [u.public_dict() for u in users],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": -(-total // limit) if limit else 0,
        },
    }


async def list_pending_users(session: AsyncSession) -> Dict[str, Any]:
    statement = select(User).where(
        User.is_approved == False,  # noqa: E712
        User.is_active == True  # noqa: E712
    ).order_by(User.created_at.desc())
    users = list((await session.execute(statement)).scalars().all())

    return {
        "success": True,
        "users": [u.public_dict() for u in users],
        "count": len(users),
    }


# ── Mutations ────────────────────────────────────────────────────────────────

async def approve_user(session: AsyncSession, actor: User, user_id: str, ip: str = "unknown") -> Dict[str, Any]:
    target = await get_user_or_404(session, user_id)
    apply_approval(target, actor)
    await session.commit()

    await log_audit(session, actor.id, USER_APPROVED, {
        "targetUserId": target.id,
        "targetUserEmail": target.email,
    }, ip=ip)
    logger.info("User approved: %s by %s", target.email, actor.email)

    return {"success": True, "message": "User approved", "user": target.summary_dict()}


async def deactivate_user(
    session: AsyncSession,
    actor: User,
    user_id: str,
    reason: Optional[str] = None,
    ip: str = "unknown"
) -> Dict[str, Any]:
    target = await get_user_or_404(session, user_id)
    apply_deactivation(target, actor, reason)
    await session.commit()

    await log_audit(session, actor.id, USER_DEACTIVATED, {
        "targetUserId": target.id,
        "targetUserEmail": target.email,
        "reason": target.deactivation_reason,
    }, ip=ip)
    logger.info("User deactivated: %s by %s", target.email, actor.email)

    return {"success": True, "message": "User deactivated"}


async def change_user_role(
    session: AsyncSession,
    actor: User,
    user_id: str,
    role: str,
    ip: str = "unknown"
) -> Dict[str, Any]:
    if role not in ASSIGNABLE_ROLES:
        raise ValidationFailed("Invalid role")

    target = await get_user_or_404(session, user_id)
    old_role = apply_role_change(target, actor, role)
    await session.commit()

    await log_audit(session, actor.id, USER_ROLE_CHANGED, {
        "targetUserId": target.id,
        "targetUserEmail": target.email,
        "oldRole": old_role,
        "newRole": role,
    }, ip=ip)
    logger.info("User role changed: %s from %s to %s by %s", target.email, old_role, role, actor.email)

    return {
        "success": True,
        "message": "Role changed",
        "user": {
            "id": target.id,
            "email": target.email,
            "name": target.name,
            "role": target.role,
        },
    }


async def reset_user_password(
    session: AsyncSession,
    actor: User,
    user_id: str,
    new_password: str,
    ip: str = "unknown"
) -> Dict[str, Any]:
    errors = password_errors(new_password, label="New password")
    if errors:
        raise ValidationFailed("Invalid input", details=errors)

    target = await get_user_or_404(session, user_id)
    if target.is_super_admin and actor.role != ROLE_SUPER_ADMIN:
        raise PermissionDenied("Only the super admin can reset the super admin password")

    target.password_hash = hash_password(new_password)
    target.password_reset_at = utc_now()
    target.password_reset_by = actor.id
    await session.commit()

    await log_audit(session, actor.id, PASSWORD_RESET_BY_ADMIN, {
        "targetUserId": target.id,
        "targetUserEmail": target.email,
    }, ip=ip)
    logger.info("Password reset for user: %s by admin: %s", target.email, actor.email)

    return {"success": True, "message": "Password reset"}


async def bulk_update_users(
    session: AsyncSession,
    actor: User,
    user_ids: List[str],
    action: str,
    data: Optional[Dict[str, Any]] = None,
    ip: str = "unknown"
) -> Dict[str, Any]:
    """
    Apply one lifecycle action to many users.

    Each user goes through the same rules as the single-user endpoints;
    failures are collected per user instead of aborting the batch.
    """
    if not user_ids:
        raise ValidationFailed("User list is empty")
    if action not in BULK_ACTIONS:
        raise ValidationFailed("Invalid bulk action")

    data = data or {}
    results: Dict[str, List[Dict[str, Any]]] = {"success": [], "failed": []}

    for user_id in user_ids:
        try:
            target = await get_user_or_404(session, user_id)
            if action == "approve":
                apply_approval(target, actor)
            elif action == "deactivate":
                apply_deactivation(target, actor, data.get("reason") or "Bulk deactivation")
            else:
                apply_role_change(target, actor, data.get("role") or "")
            await session.commit()
        except ApiError as e:
            # transitions validate before mutating, so nothing to roll back
            results["failed"].append({"userId": user_id, "error": e.message})
            continue

        await log_audit(session, actor.id, f"BULK_{action.upper()}", {
            "targetUserId": target.id,
            "targetUserEmail": target.email,
            "data": data,
        }, ip=ip)
        results["success"].append({"userId": target.id, "email": target.email, "name": target.name})

    logger.info(
        "Bulk operation %s completed by %s: %d success, %d failed",
        action, actor.email, len(results["success"]), len(results["failed"])
    )

    return {
        "success": True,
        "message": f"Completed: {len(results['success'])} succeeded, {len(results['failed'])} failed",
        "results": results,
    }


# ── Monitoring ───────────────────────────────────────────────────────────────

async def get_system_stats(session: AsyncSession) -> Dict[str, Any]:
    users = list((await session.execute(select(User))).scalars().all())

    total_records = (await session.execute(
        select(func.count()).select_from(VibrationReading)
    )).scalar() or 0
    today_records = (await session.execute(
        select(func.count()).select_from(VibrationReading).where(VibrationReading.date == utc_today())
    )).scalar() or 0
    unique_dates = (await session.execute(
        select(func.count(func.distinct(VibrationReading.date)))
    )).scalar() or 0

    recent = await session.execute(
        select(AuditLog).order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(10)
    )

    return {
        "success": True,
        "stats": {
            "users": {
                "total": len(users),
                "active": sum(1 for u in users if u.is_active),
                "approved": sum(1 for u in users if u.is_approved),
                "pending": sum(1 for u in users if u.state == AccountState.PENDING),
                "byRole": dict(Counter(u.role for u in users)),
            },
            "data": {
                "totalRecords": total_records,
                "todayRecords": today_records,
                "uniqueDates": unique_dates,
            },
            "recentActivity": [log.to_dict() for log in recent.scalars().all()],
        },
    }


async def query_audit_logs(
    session: AsyncSession,
    page: int = 1,
    limit: int = 20,
    action: Optional[str] = None,
    user_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None
) -> List[AuditLog]:
    """Newest-first page of audit entries matching the filters."""
    statement = select(AuditLog)
    if action:
        statement = statement.where(AuditLog.action == action)
    if user_id:
        statement = statement.where(AuditLog.user_id == user_id)
    if date_from:
        statement = statement.where(AuditLog.timestamp >= day_start(date_from))
    if date_to:
        statement = statement.where(AuditLog.timestamp <= day_end(date_to))

    statement = statement.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).offset((page - 1) * limit).limit(limit)
    return list((await session.execute(statement)).scalars().all())


async def users_by_id(session: AsyncSession, user_ids) -> Dict[str, User]:
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    result = await session.execute(select(User).where(User.id.in_(ids)))
    return {u.id: u for u in result.scalars().all()}


async def get_audit_logs(
    session: AsyncSession,
    page: int = 1,
    limit: int = 20,
    action: Optional[str] = None,
    user_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None
) -> Dict[str, Any]:
    logs = await query_audit_logs(session, page, limit, action, user_id, date_from, date_to)
    actors = await users_by_id(session, (log.user_id for log in logs))

    entries = []
    for log in logs:
        entry = log.to_dict()
        actor = actors.get(log.user_id)
        entry["userName"] = actor.name if actor else UNKNOWN_USER_NAME
        entries.append(entry)

    return {
        "success": True,
        "logs": entries,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": len(entries),
        },
    }
