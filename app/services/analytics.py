from datetime import datetime
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.category import Category
from app.models.task import Task
from app.schemas.analytics import AnalyticsReport, TaskSnapshot
from app.services.performance import build_analytics_report


def snapshot_from_task(task: Task, category_name: Optional[str] = None) -> TaskSnapshot:
    return TaskSnapshot(
        id=str(task.id),
        title=task.title,
        description=task.description,
        category=category_name,
        priority=task.priority or "medium",
        deadline=task.deadline,
        completed=bool(task.completed),
        completed_at=task.completed_at,
        estimated_time=task.estimated_time,
        created_at=task.created_at,
    )


async def get_task_snapshots(db: AsyncSession, user_id: int) -> List[TaskSnapshot]:
    """All of a user's tasks (scheduled and inbox) with their category names."""
    result = await db.execute(
        select(Task, Category.name)
        .outerjoin(Category, Category.id == Task.category_id)
        .where(Task.user_id == user_id)
        .order_by(Task.created_at)
    )
    return [snapshot_from_task(task, category_name) for task, category_name in result.all()]


async def get_user_analytics(
    db: AsyncSession,
    user_id: int,
    year: int,
    month: Optional[int] = None,
    as_of: Optional[datetime] = None,
) -> AnalyticsReport:
    tasks = await get_task_snapshots(db, user_id)
    return build_analytics_report(tasks, year, month=month, now=as_of)
