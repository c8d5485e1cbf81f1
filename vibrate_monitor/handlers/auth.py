"""
Account registration, login and self-service profile handler.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from vibrate_monitor.core.config import get_settings
from vibrate_monitor.core.constants import (
    LOGIN_FAILED,
    LOGIN_SUCCESS,
    LOGOUT,
    PASSWORD_CHANGED,
    PROFILE_UPDATED,
    ROLE_OPERATOR,
    ROLE_SUPER_ADMIN,
    SELF_REGISTER_ROLES,
    USER_REGISTERED,
)
from vibrate_monitor.core.errors import PermissionDenied, ValidationFailed
from vibrate_monitor.core.security import create_access_token, hash_password, verify_password
from vibrate_monitor.handlers.audit import log_audit
from vibrate_monitor.handlers.validation import is_valid_email, name_errors, password_errors
from vibrate_monitor.models.user import User
from vibrate_monitor.utils.time import utc_now

logger = logging.getLogger(__name__)

BAD_CREDENTIALS = "Invalid email or password"


def new_user_id() -> str:
    return f"user_{uuid.uuid4()}"


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    statement = select(User).where(User.email == email.strip().lower())
    result = await session.execute(statement)
    return result.scalars().first()


async def ensure_super_admin(session: AsyncSession) -> User:
    """Create the configured super admin on first start."""
    settings = get_settings()
    email = settings.super_admin_email.strip().lower()

    existing = await get_user_by_email(session, email)
    if existing:
        logger.info("Super admin already exists")
        return existing

    now = utc_now()
    admin = User(
        id=new_user_id(),
        email=email,
        password_hash=hash_password(settings.super_admin_password),
        name="System Administrator",
        role=ROLE_SUPER_ADMIN,
        is_approved=True,
        is_active=True,
        created_at=now,
        approved_at=now,
        approved_by="system"
    )
    session.add(admin)
    await session.commit()
    logger.info("Super admin created: %s", email)
    return admin


async def register_user(
    session: AsyncSession,
    email: str,
    password: str,
    name: str,
    role: Optional[str] = None,
    ip: str = "unknown"
) -> Dict[str, Any]:
    """
    Create a pending account awaiting administrator approval.

    Raises:
        ValidationFailed: bad input or email already registered
    """
    role = role or ROLE_OPERATOR
    errors = []
    if not is_valid_email(email):
        errors.append("Invalid email address")
    errors.extend(password_errors(password))
    errors.extend(name_errors(name))
    if role not in SELF_REGISTER_ROLES:
        errors.append("Invalid role")
    if errors:
        raise ValidationFailed("Invalid input", details=errors)

    if await get_user_by_email(session, email):
        raise ValidationFailed("A user with this email is already registered")

    user = User(
        id=new_user_id(),
        email=email.strip().lower(),
        password_hash=hash_password(password),
        name=name.strip(),
        role=role,
        is_approved=False,
        is_active=True
    )
    session.add(user)
    await session.commit()

    await log_audit(session, user.id, USER_REGISTERED, {
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }, ip=ip)

    logger.info("New user registered: %s", user.email)

    return {
        "success": True,
        "message": "Registration complete. Please wait for an administrator to approve your account.",
        "user": user.summary_dict(),
    }


async def login_user(
    session: AsyncSession,
    email: str,
    password: str,
    ip: str = "unknown"
) -> Dict[str, Any]:
    """
    Check credentials and account state, then issue a bearer token.

    Raises:
        ValidationFailed: unknown email or wrong password
        PermissionDenied: account deactivated or still pending approval
    """
    user = await get_user_by_email(session, email)
    if not user:
        raise ValidationFailed(BAD_CREDENTIALS)

    if not user.is_active:
        raise PermissionDenied("Your account has been deactivated. Please contact an administrator.")

    if not verify_password(password, user.password_hash):
        await log_audit(session, user.id, LOGIN_FAILED, {
            "email": user.email,
            "reason": "Invalid password",
        }, ip=ip)
        raise ValidationFailed(BAD_CREDENTIALS)

    if not user.is_approved:
        raise PermissionDenied(
            "Your account has not been approved by an administrator yet.",
            needsApproval=True
        )

    token = create_access_token(user.id, user.email)

    user.last_login_at = utc_now()
    await session.commit()

    await log_audit(session, user.id, LOGIN_SUCCESS, {"email": user.email}, ip=ip)
    logger.info("User logged in: %s", user.email)

    return {
        "success": True,
        "message": "Logged in",
        "token": token,
        "user": user.summary_dict(),
    }


def get_profile(user: User) -> Dict[str, Any]:
    return {
        "success": True,
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "isApproved": user.is_approved,
            "createdAt": user.created_at.isoformat(),
            "lastLoginAt": user.last_login_at.isoformat() if user.last_login_at else None,
        },
    }


async def update_profile(
    session: AsyncSession,
    user: User,
    name: str,
    ip: str = "unknown"
) -> Dict[str, Any]:
    errors = name_errors(name)
    if errors:
        raise ValidationFailed("Invalid input", details=errors)

    user.name = name.strip()
    user.updated_at = utc_now()
    await session.commit()

    await log_audit(session, user.id, PROFILE_UPDATED, {"changes": {"name": user.name}}, ip=ip)

    return {
        "success": True,
        "message": "Profile updated",
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
        },
    }


async def change_password(
    session: AsyncSession,
    user: User,
    current_password: str,
    new_password: str,
    ip: str = "unknown"
) -> Dict[str, Any]:
    """
    Raises:
        ValidationFailed: current password wrong or new password too weak
    """
    errors = password_errors(new_password, label="New password")
    if errors:
        raise ValidationFailed("Invalid input", details=errors)

    if not verify_password(current_password, user.password_hash):
        raise ValidationFailed("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    user.updated_at = utc_now()
    await session.commit()

    await log_audit(session, user.id, PASSWORD_CHANGED, {}, ip=ip)

    return {"success": True, "message": "Password changed"}


async def logout_user(session: AsyncSession, user: User, ip: str = "unknown") -> Dict[str, Any]:
    """Tokens are stateless; logout only leaves an audit trail."""
    await log_audit(session, user.id, LOGOUT, {}, ip=ip)
    return {"success": True, "message": "Logged out"}
