"""
Audit trail writer and reader helpers.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vibrate_monitor.models.audit import AuditLog

logger = logging.getLogger(__name__)


def client_ip(request: Optional[Request]) -> str:
    """Best-effort caller address for audit entries."""
    if request is None or request.client is None:
        return "unknown"
    return request.client.host or "unknown"


async def log_audit(
    session: AsyncSession,
    user_id: Optional[str],
    action: str,
    details: Optional[Dict[str, Any]] = None,
    ip: str = "unknown"
) -> None:
    """
    Append an audit entry and commit it.

    Callers commit their own change first; a failed audit write is logged and
    rolled back without failing the request.
    """
    entry = AuditLog(
        user_id=user_id,
        action=action,
        details=details or {},
        ip=ip
    )
    try:
        session.add(entry)
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Audit logging failed for action %s", action)
