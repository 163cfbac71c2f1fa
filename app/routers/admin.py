from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete, or_, case
from datetime import datetime, timedelta
from typing import List, Optional
from app.database import get_db
from app.core.auth import get_current_admin
from app.models.activity import ActivityLog
from app.models.admin import AdminLog, AdminSetting
from app.models.category import Category
from app.models.goal import WeeklyFocusGoal
from app.models.task import Task
from app.models.user import User
from app.routers.analytics import validate_period
from app.schemas.admin import (
    AdminStats, UserWithStats, UserListResponse, RoleUpdate, SuspendRequest,
    AdminSettingUpdate, AdminSettingResponse, AdminLogListResponse, ActivityLogListResponse
)
from app.schemas.analytics import AnalyticsReport
from app.schemas.user import UserResponse
from app.services.analytics import get_user_analytics
from app.services.audit import record_admin_action
from app.utils.dates import as_utc, utcnow


router = APIRouter(prefix="/admin", tags=["admin"])


async def _get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(404, "User not found")
    return user


def _ensure_can_manage(admin: User, target: User) -> None:
    if admin.id == target.id:
        raise HTTPException(400, "You cannot change your own account here")
    if target.role == "super_admin" and admin.role != "super_admin":
        raise HTTPException(403, "Super admin access required")


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return result.scalar_one() or 0


@router.get("/stats", response_model=AdminStats)
async def admin_stats(
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    now = utcnow()
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    total_users = await _count(db, select(func.count(User.id)))
    active_users = await _count(
        db,
        select(func.count(func.distinct(Task.user_id)))
        .where(Task.created_at >= now - timedelta(days=30))
    )
    total_tasks = await _count(db, select(func.count(Task.id)))
    completed_tasks = await _count(db, select(func.count(Task.id)).where(Task.completed.is_(True)))
    new_users = await _count(
        db, select(func.count(User.id)).where(User.created_at >= now - timedelta(days=7))
    )
    completed_today = await _count(
        db,
        select(func.count(Task.id))
        .where(Task.completed.is_(True))
        .where(Task.completed_at >= start_of_today)
    )

    return AdminStats(
        total_users=total_users,
        active_users=active_users,
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        completion_rate=round(completed_tasks / total_tasks * 100, 2) if total_tasks else 0.0,
        new_users_this_week=new_users,
        tasks_completed_today=completed_today
    )


@router.get("/users", response_model=UserListResponse)
async def admin_list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    query = select(User)
    count_query = select(func.count(User.id))
    if search:
        pattern = f"%{search}%"
        condition = or_(User.full_name.ilike(pattern), User.email.ilike(pattern))
        query = query.where(condition)
        count_query = count_query.where(condition)

    total = await _count(db, count_query)
    result = await db.execute(
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    users = result.scalars().all()

    # One grouped query for the task numbers of the whole page
    stats = {}
    if users:
        stats_result = await db.execute(
            select(
                Task.user_id,
                func.count(Task.id),
                func.sum(case((Task.completed.is_(True), 1), else_=0)),
                func.max(Task.created_at),
            )
            .where(Task.user_id.in_([u.id for u in users]))
            .group_by(Task.user_id)
        )
        stats = {row[0]: row[1:] for row in stats_result.all()}

    items = []
    for user in users:
        task_count, completed_count, last_active = stats.get(user.id, (0, 0, None))
        item = UserWithStats.model_validate(user)
        item.task_count = task_count or 0
        item.completed_task_count = completed_count or 0
        item.last_active = last_active
        items.append(item)

    return UserListResponse(users=items, total=total, page=page, limit=limit)


@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def admin_update_role(
    user_id: int,
    role_in: RoleUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    user = await _get_user(db, user_id)
    _ensure_can_manage(admin, user)
    if role_in.role == "super_admin" and admin.role != "super_admin":
        raise HTTPException(403, "Super admin access required")

    old_role = user.role
    user.role = role_in.role
    record_admin_action(
        db, admin, request, "user_role_updated", "user", user.id,
        {"old_role": old_role, "new_role": role_in.role}
    )
    await db.commit()
    await db.refresh(user)
    return user


@router.post("/users/{user_id}/suspend", response_model=UserResponse)
async def admin_suspend_user(
    user_id: int,
    suspend_in: SuspendRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    user = await _get_user(db, user_id)
    _ensure_can_manage(admin, user)

    until = as_utc(suspend_in.until)
    if until is not None and until <= utcnow():
        raise HTTPException(400, "Suspension end must be in the future")

    user.suspended = True
    user.suspended_reason = suspend_in.reason
    user.suspended_until = until
    record_admin_action(
        db, admin, request, "user_suspended", "user", user.id,
        {"reason": suspend_in.reason, "until": until.isoformat() if until else None}
    )
    await db.commit()
    await db.refresh(user)
    return user


@router.post("/users/{user_id}/unsuspend", response_model=UserResponse)
async def admin_unsuspend_user(
    user_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    user = await _get_user(db, user_id)
    _ensure_can_manage(admin, user)

    user.suspended = False
    user.suspended_reason = None
    user.suspended_until = None
    record_admin_action(db, admin, request, "user_unsuspended", "user", user.id)
    await db.commit()
    await db.refresh(user)
    return user


@router.delete("/users/{user_id}")
async def admin_delete_user(
    user_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    user = await _get_user(db, user_id)
    _ensure_can_manage(admin, user)

    # Owned rows first; SQLite does not enforce ON DELETE CASCADE by default
    for model in (Task, Category, WeeklyFocusGoal, ActivityLog):
        await db.execute(delete(model).where(model.user_id == user_id))
    await db.delete(user)

    record_admin_action(db, admin, request, "user_deleted", "user", user_id, {"email": user.email})
    await db.commit()
    return {"message": "User deleted"}


@router.get("/users/{user_id}/analytics", response_model=AnalyticsReport)
async def admin_user_analytics(
    user_id: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
    as_of: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    await _get_user(db, user_id)
    if year is None:
        year = utcnow().year
    validate_period(year, month)
    return await get_user_analytics(db, user_id, year, month=month, as_of=as_of)


@router.get("/settings", response_model=List[AdminSettingResponse])
async def admin_list_settings(
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    result = await db.execute(select(AdminSetting).order_by(AdminSetting.key))
    return result.scalars().all()


@router.put("/settings/{key}", response_model=AdminSettingResponse)
async def admin_upsert_setting(
    key: str,
    setting_in: AdminSettingUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    result = await db.execute(select(AdminSetting).where(AdminSetting.key == key))
    setting = result.scalar_one_or_none()
    if setting is None:
        setting = AdminSetting(key=key, value=setting_in.value, description=setting_in.description)
        db.add(setting)
    else:
        setting.value = setting_in.value
        if setting_in.description is not None:
            setting.description = setting_in.description

    record_admin_action(db, admin, request, "setting_updated", "setting", key, {"new_value": setting_in.value})
    await db.commit()
    await db.refresh(setting)
    return setting


@router.get("/logs", response_model=AdminLogListResponse)
async def admin_list_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    action: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    query = select(AdminLog)
    count_query = select(func.count(AdminLog.id))
    if action:
        query = query.where(AdminLog.action == action)
        count_query = count_query.where(AdminLog.action == action)

    total = await _count(db, count_query)
    result = await db.execute(
        query.order_by(AdminLog.created_at.desc(), AdminLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return AdminLogListResponse(logs=result.scalars().all(), total=total)


@router.get("/activity", response_model=ActivityLogListResponse)
async def admin_list_activity(
    user_id: Optional[int] = None,
    action: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    query = select(ActivityLog)
    count_query = select(func.count(ActivityLog.id))
    if user_id is not None:
        query = query.where(ActivityLog.user_id == user_id)
        count_query = count_query.where(ActivityLog.user_id == user_id)
    if action:
        query = query.where(ActivityLog.action == action)
        count_query = count_query.where(ActivityLog.action == action)

    total = await _count(db, count_query)
    result = await db.execute(
        query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return ActivityLogListResponse(logs=result.scalars().all(), total=total)
