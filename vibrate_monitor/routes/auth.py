"""
Authentication and self-service profile endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from vibrate_monitor.core.database import get_session
from vibrate_monitor.core.security import get_current_user
from vibrate_monitor.handlers.audit import client_ip
from vibrate_monitor.handlers.auth import (
    change_password,
    get_profile,
    login_user,
    logout_user,
    register_user,
    update_profile,
)
from vibrate_monitor.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str
    role: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    name: str


class PasswordChange(BaseModel):
    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_endpoint(
    body: RegisterRequest,
    request: Request,
    session: AsyncSession = Depends(get_session)
):
    """Register a new account; it stays pending until an administrator approves it."""
    return await register_user(
        session,
        email=body.email,
        password=body.password,
        name=body.name,
        role=body.role,
        ip=client_ip(request)
    )


@router.post("/login")
async def login_endpoint(
    body: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_session)
):
    """Exchange email and password for a bearer token."""
    return await login_user(session, body.email, body.password, ip=client_ip(request))


@router.get("/profile")
async def profile_endpoint(user: User = Depends(get_current_user)):
    return get_profile(user)


@router.put("/profile")
async def update_profile_endpoint(
    body: ProfileUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return await update_profile(session, user, body.name, ip=client_ip(request))


@router.put("/change-password")
async def change_password_endpoint(
    body: PasswordChange,
    request: Request,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return await change_password(
        session, user,
        current_password=body.current_password,
        new_password=body.new_password,
        ip=client_ip(request)
    )


@router.post("/logout")
async def logout_endpoint(
    request: Request,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return await logout_user(session, user, ip=client_ip(request))
