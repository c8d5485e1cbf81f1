"""
User directory endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from vibrate_monitor.core.database import get_session
from vibrate_monitor.core.security import admin_only, get_current_user
from vibrate_monitor.handlers.audit import client_ip
from vibrate_monitor.handlers.users import (
    delete_user_account,
    export_user_data,
    get_directory,
    get_user_activity,
    get_user_profile,
    get_user_stats,
    search_users,
)
from vibrate_monitor.models.user import User
from vibrate_monitor.utils.time import utc_now

router = APIRouter(prefix="/api/users", tags=["users"])


class DeleteAccountRequest(BaseModel):
    confirmation: Optional[str] = None


@router.get("")
async def directory_endpoint(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Approved, active colleagues."""
    return await get_directory(session)


@router.get("/search")
async def search_endpoint(
    query: Optional[str] = None,
    role: Optional[str] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return await search_users(session, query=query, role=role)


@router.get("/stats")
async def user_stats_endpoint(
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    return await get_user_stats(session)


@router.get("/activity")
async def activity_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    user_id: Optional[str] = Query(None, alias="userId"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    return await get_user_activity(
        session,
        page=page,
        limit=limit,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to
    )


@router.get("/{user_id}")
async def user_profile_endpoint(
    user_id: str,
    admin: User = Depends(admin_only),
    session: AsyncSession = Depends(get_session)
):
    return await get_user_profile(session, user_id)


@router.get("/{user_id}/export")
async def export_endpoint(
    user_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Download everything stored about a user (self or administrator)."""
    export = await export_user_data(session, user, user_id, ip=client_ip(request))
    filename = f"user-data-{user_id}-{int(utc_now().timestamp() * 1000)}.json"
    return JSONResponse(
        content=export,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.post("/{user_id}/delete")
async def delete_account_endpoint(
    user_id: str,
    body: DeleteAccountRequest,
    request: Request,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Anonymize an account. Requires confirmation `DELETE_PERMANENTLY`."""
    return await delete_user_account(session, user, user_id, body.confirmation, ip=client_ip(request))
