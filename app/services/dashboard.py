from datetime import datetime, timedelta
from typing import Sequence
from app.models.task import Task
from app.schemas.dashboard import QuickStats
from app.utils.dates import as_utc
from app.utils.rounding import round_half_up


def compute_quick_stats(tasks: Sequence[Task], now: datetime) -> QuickStats:
    now = as_utc(now)
    today = now.isoweekday() % 7  # 0 = Sunday, matches Task.day_of_week
    week_start = (now - timedelta(days=today)).replace(hour=0, minute=0, second=0, microsecond=0)

    completed = [task for task in tasks if task.completed]
    pending = [task for task in tasks if not task.completed]
    overdue = [task for task in pending if task.deadline is not None and as_utc(task.deadline) < now]

    # only calendar tasks belong to a weekday
    today_tasks = [task for task in tasks if task.is_scheduled and task.day_of_week == today]
    week_tasks = [task for task in tasks if as_utc(task.created_at) >= week_start]
    week_completed = sum(1 for task in week_tasks if task.completed)

    return QuickStats(
        total_tasks=len(tasks),
        completed_tasks=len(completed),
        pending_tasks=len(pending),
        overdue_tasks=len(overdue),
        inbox_count=sum(1 for task in tasks if not task.is_scheduled),
        today_tasks=len(today_tasks),
        today_completed=sum(1 for task in today_tasks if task.completed),
        week_tasks=len(week_tasks),
        week_completion_rate=round_half_up(week_completed / len(week_tasks) * 100) if week_tasks else 0,
    )
