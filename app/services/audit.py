import logging
from typing import Any, Optional
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.activity import ActivityLog
from app.models.admin import AdminLog

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> Optional[str]:
    """
    Get client IP from trusted header (X-Real-IP) set by the frontend.
    Falls back to X-Forwarded-For, then request.client.host.
    """
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    return request.client.host if request.client else None


def record_activity(
    db: AsyncSession,
    user_id: int,
    action: str,
    entity_type: str,
    entity_id: Any,
    details: Optional[dict] = None,
) -> ActivityLog:
    """Stage an activity row; it is committed together with the caller's change."""
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        details=details,
    )
    db.add(entry)
    return entry


def record_admin_action(
    db: AsyncSession,
    admin,
    request: Request,
    action: str,
    target_type: Optional[str] = None,
    target_id: Any = None,
    details: Optional[dict] = None,
) -> AdminLog:
    entry = AdminLog(
        admin_id=admin.id,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        details=details,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    db.add(entry)
    logger.info("admin %s: %s %s=%s", admin.id, action, target_type, target_id)
    return entry
