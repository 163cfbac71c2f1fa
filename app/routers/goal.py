from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import date, timedelta
from typing import List, Optional
from app.database import get_db
from app.core.auth import get_current_user
from app.models.goal import WeeklyFocusGoal
from app.schemas.goal import FocusGoalCreate, FocusGoalUpdate, FocusGoalResponse
from app.services.audit import record_activity
from app.utils.dates import utcnow

router = APIRouter(prefix="/goals/weekly-focus", tags=["goals"])


def week_start_for(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=day.isoweekday() % 7)


async def _get_owned_goal(db: AsyncSession, goal_id: int, user_id: int) -> WeeklyFocusGoal:
    result = await db.execute(
        select(WeeklyFocusGoal).where(WeeklyFocusGoal.id == goal_id, WeeklyFocusGoal.user_id == user_id)
    )
    goal = result.scalar_one_or_none()
    if not goal:
        raise HTTPException(404, "Goal not found")
    return goal


@router.get("", response_model=List[FocusGoalResponse])
async def list_focus_goals(
    week_start: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    week = week_start_for(week_start or utcnow().date())
    result = await db.execute(
        select(WeeklyFocusGoal)
        .where(WeeklyFocusGoal.user_id == current_user.id)
        .where(WeeklyFocusGoal.week_start_date == week)
        .order_by(WeeklyFocusGoal.id)
    )
    return result.scalars().all()


@router.post("", response_model=FocusGoalResponse)
async def create_focus_goal(
    goal_in: FocusGoalCreate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    goal = WeeklyFocusGoal(
        user_id=current_user.id,
        week_start_date=week_start_for(goal_in.week_start_date or utcnow().date()),
        goal=goal_in.goal.strip(),
        completed=False
    )
    db.add(goal)
    await db.flush()
    record_activity(db, current_user.id, "focus_goal_created", "focus_goal", goal.id, {"title": goal.goal})
    await db.commit()
    await db.refresh(goal)
    return goal


@router.patch("/{goal_id}", response_model=FocusGoalResponse)
async def update_focus_goal(
    goal_id: int,
    goal_in: FocusGoalUpdate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    goal = await _get_owned_goal(db, goal_id, current_user.id)
    if goal_in.goal is not None:
        goal.goal = goal_in.goal.strip()
    if goal_in.completed is not None and goal_in.completed != goal.completed:
        goal.completed = goal_in.completed
        action = "focus_goal_completed" if goal.completed else "focus_goal_reopened"
        record_activity(db, current_user.id, action, "focus_goal", goal.id, {"title": goal.goal})
    await db.commit()
    await db.refresh(goal)
    return goal


@router.delete("/{goal_id}")
async def delete_focus_goal(
    goal_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    goal = await _get_owned_goal(db, goal_id, current_user.id)
    await db.delete(goal)
    await db.commit()
    return {"message": "Goal deleted"}
