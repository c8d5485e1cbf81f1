"""
Password hashing, bearer tokens and role gates.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from vibrate_monitor.core.config import get_settings
from vibrate_monitor.core.constants import ADMIN_ROLES, ROLE_SUPER_ADMIN, UNAUTHORIZED_ACCESS_ATTEMPT
from vibrate_monitor.core.database import get_session
from vibrate_monitor.core.errors import AuthenticationFailed, PermissionDenied
from vibrate_monitor.handlers.audit import client_ip, log_audit
from vibrate_monitor.models.user import User
from vibrate_monitor.utils.time import utc_now

logger = logging.getLogger(__name__)

# Missing credentials are reported by get_current_user, not by FastAPI
security = HTTPBearer(auto_error=False)

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # anonymized accounts carry a non-bcrypt placeholder
        return False


def create_access_token(user_id: str, email: str) -> str:
    """Issue a signed bearer token for a user."""
    settings = get_settings()
    payload = {
        "userId": user_id,
        "email": email,
        "exp": utc_now() + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify a bearer token and return its claims.

    Raises:
        AuthenticationFailed: if the token is expired, tampered or malformed
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationFailed("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token: %s", e)
        raise AuthenticationFailed("Invalid authentication token")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the bearer token to an active, approved user.

    Raises:
        AuthenticationFailed: no token, bad token or unknown user
        PermissionDenied: account deactivated or not yet approved
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationFailed("Authentication token was not provided")

    claims = decode_access_token(credentials.credentials)
    user_id = claims.get("userId")
    if not user_id:
        raise AuthenticationFailed("Invalid token payload")

    user = await session.get(User, user_id)
    if not user:
        raise AuthenticationFailed("User not found")
    if not user.is_active:
        raise PermissionDenied("Account is deactivated")
    if not user.is_approved:
        raise PermissionDenied("Account has not been approved by an administrator yet")

    return user


def require_roles(*roles: str):
    """
    Dependency factory that admits only users holding one of `roles`.

    Refusals are written to the audit trail.
    """
    async def check_roles(
        request: Request,
        user: User = Depends(get_current_user),
        session: AsyncSession = Depends(get_session)
    ) -> User:
        if user.role not in roles:
            await log_audit(session, user.id, UNAUTHORIZED_ACCESS_ATTEMPT, {
                "requiredRoles": list(roles),
                "userRole": user.role,
                "endpoint": request.url.path,
            }, ip=client_ip(request))
            raise PermissionDenied("You do not have permission to access this resource")
        return user

    return check_roles


admin_only = require_roles(*ADMIN_ROLES)
super_admin_only = require_roles(ROLE_SUPER_ADMIN)
