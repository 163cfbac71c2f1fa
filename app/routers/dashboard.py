from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List
from app.database import get_db
from app.core.auth import get_current_user
from app.models.activity import ActivityLog
from app.models.task import Task
from app.schemas.dashboard import ActivityLogResponse, DashboardResponse, QuickStats
from app.services.dashboard import compute_quick_stats
from app.utils.dates import utcnow

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RECENT_ACTIVITY_LIMIT = 10


async def _recent_activity(db: AsyncSession, user_id: int, limit: int):
    result = await db.execute(
        select(ActivityLog)
        .where(ActivityLog.user_id == user_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
    )
    return result.scalars().all()


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    result = await db.execute(select(Task).where(Task.user_id == current_user.id))
    tasks = result.scalars().all()

    return DashboardResponse(
        name=current_user.full_name or current_user.email.split("@")[0],
        stats=compute_quick_stats(tasks, utcnow()),
        recent_activity=await _recent_activity(db, current_user.id, RECENT_ACTIVITY_LIMIT)
    )


@router.get("/stats", response_model=QuickStats)
async def get_quick_stats(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    result = await db.execute(select(Task).where(Task.user_id == current_user.id))
    return compute_quick_stats(result.scalars().all(), utcnow())


@router.get("/activity", response_model=List[ActivityLogResponse])
async def get_recent_activity(
    limit: int = Query(RECENT_ACTIVITY_LIMIT, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    return await _recent_activity(db, current_user.id, limit)
