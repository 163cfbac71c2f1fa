from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from app.database import get_db
from app.core.auth import get_current_user
from app.models.category import Category
from app.models.task import Task
from app.schemas.task import TaskCreate, TaskUpdate, TaskSchedule, TaskResponse, TaskSummaryResponse
from app.services.audit import record_activity
from app.utils.dates import as_utc, utcnow

router = APIRouter(prefix="/tasks", tags=["tasks"])

# Columns that may be left out of a PATCH but never cleared
NON_NULLABLE_FIELDS = ("title", "priority", "is_scheduled", "completed")


async def _get_owned_task(db: AsyncSession, task_id: int, user_id: int) -> Task:
    result = await db.execute(
        select(Task).where(Task.id == task_id, Task.user_id == user_id)
    )
    task = result.scalar_one_or_none()
    if not task:
        raise HTTPException(404, "Task not found")
    return task


async def _ensure_category(db: AsyncSession, category_id: Optional[int], user_id: int) -> None:
    if category_id is None:
        return
    result = await db.execute(
        select(Category.id).where(Category.id == category_id, Category.user_id == user_id)
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(400, "Category not found")


def _set_completed(task: Task, completed: bool) -> None:
    # completed_at is present exactly when the task is completed
    task.completed = completed
    task.completed_at = utcnow() if completed else None


@router.post("", response_model=TaskResponse)
async def create_task(
    task_in: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    await _ensure_category(db, task_in.category_id, current_user.id)

    task = Task(
        user_id=current_user.id,
        category_id=task_in.category_id,
        title=task_in.title,
        description=task_in.description,
        priority=task_in.priority,
        deadline=as_utc(task_in.deadline),
        day_of_week=task_in.day_of_week,
        time_slot=task_in.time_slot,
        is_scheduled=task_in.is_scheduled,
        estimated_time=task_in.estimated_time,
        completed=False
    )
    db.add(task)
    await db.flush()

    record_activity(db, current_user.id, "task_created", "task", task.id, {"title": task.title})
    await db.commit()
    await db.refresh(task)
    return task


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    scheduled: Optional[bool] = None,
    completed: Optional[bool] = None,
    category_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    query = select(Task).where(Task.user_id == current_user.id)
    if scheduled is not None:
        query = query.where(Task.is_scheduled == scheduled)
    if completed is not None:
        query = query.where(Task.completed == completed)
    if category_id is not None:
        query = query.where(Task.category_id == category_id)

    result = await db.execute(query.order_by(Task.created_at.desc()))
    return result.scalars().all()


@router.get("/inbox", response_model=List[TaskResponse])
async def list_inbox_tasks(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    result = await db.execute(
        select(Task)
        .where(Task.user_id == current_user.id)
        .where(Task.is_scheduled.is_(False))
        .order_by(Task.created_at.desc())
    )
    return result.scalars().all()


@router.get("/summary", response_model=TaskSummaryResponse)
async def get_task_summary(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    result = await db.execute(
        select(Task)
        .where(Task.user_id == current_user.id)
        .order_by(Task.deadline)
    )
    tasks = result.scalars().all()

    now = utcnow()
    completed = 0
    overdue = 0
    pending = 0

    for task in tasks:
        if task.completed:
            completed += 1
        elif task.deadline is not None and as_utc(task.deadline) < now:
            overdue += 1
        else:
            pending += 1

    return TaskSummaryResponse(
        total_tasks=len(tasks),
        completed_tasks=completed,
        overdue_tasks=overdue,
        pending_tasks=pending,
        tasks=tasks
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await _get_owned_task(db, task_id, current_user.id)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    task_in: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    task = await _get_owned_task(db, task_id, current_user.id)
    updates = task_in.model_dump(exclude_unset=True)

    for field in NON_NULLABLE_FIELDS:
        if field in updates and updates[field] is None:
            raise HTTPException(400, f"{field} cannot be null")

    if "category_id" in updates:
        await _ensure_category(db, updates["category_id"], current_user.id)
    if "deadline" in updates:
        updates["deadline"] = as_utc(updates["deadline"])

    completed = updates.pop("completed", None)
    for field, value in updates.items():
        setattr(task, field, value)
    if completed is not None and completed != task.completed:
        _set_completed(task, completed)

    record_activity(db, current_user.id, "task_updated", "task", task.id, {"fields": sorted(task_in.model_fields_set)})
    await db.commit()
    await db.refresh(task)
    return task


@router.post("/{task_id}/toggle", response_model=TaskResponse)
async def toggle_task_completion(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    task = await _get_owned_task(db, task_id, current_user.id)
    _set_completed(task, not task.completed)

    action = "task_completed" if task.completed else "task_reopened"
    record_activity(db, current_user.id, action, "task", task.id, {"title": task.title})
    await db.commit()
    await db.refresh(task)
    return task


@router.post("/{task_id}/schedule", response_model=TaskResponse)
async def schedule_task(
    task_id: int,
    schedule_in: TaskSchedule,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Move an inbox task onto a weekday of the calendar."""
    task = await _get_owned_task(db, task_id, current_user.id)
    task.day_of_week = schedule_in.day_of_week
    if schedule_in.time_slot is not None:
        task.time_slot = schedule_in.time_slot
    task.is_scheduled = True

    record_activity(db, current_user.id, "task_scheduled", "task", task.id, {"day_of_week": task.day_of_week})
    await db.commit()
    await db.refresh(task)
    return task


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    task = await _get_owned_task(db, task_id, current_user.id)
    await db.delete(task)
    record_activity(db, current_user.id, "task_deleted", "task", task_id, {"title": task.title})
    await db.commit()
    return {"message": "Task deleted"}
