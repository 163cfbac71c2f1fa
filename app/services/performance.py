"""
TAL (To-Achieve List) performance scoring.

Pure functions over task snapshots: week windows -> weekly scores ->
monthly scores -> yearly summary. Nothing here touches the database;
callers load the tasks and pass an explicit ``now`` when they need a
reproducible "as of" report.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence
from app.schemas.analytics import (
    AnalyticsReport, MonthWeeks, MonthlyScore, OverallStats, TaskSnapshot, WeeklyScore
)
from app.services.grading import grade_of, performance_distribution
from app.services.week_windows import WeekWindow, month_week_windows
from app.utils.dates import as_utc, utcnow
from app.utils.rounding import round2, round_half_up

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

MONTHLY_TARGET = 95.0

SCORING_FORMULAS = {
    "weekly": "DP40% + RH20% + WO40%",
    "monthly": "Rata-rata Score TAL dlm 1 bulan",
    "structural": "(Avg Score TAL x 80%) + (MO x 20%)",
}


def _ratio(part: int, whole: int) -> float:
    return part / whole if whole else 0.0


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def daily_planning_score(tasks: Sequence[TaskSnapshot]) -> int:
    """DP, max 40: tasks planned with both a description and a time estimate."""
    planned = sum(1 for task in tasks if task.is_planned)
    return round_half_up(_ratio(planned, len(tasks)) * 40)


def report_harian_score(tasks: Sequence[TaskSnapshot]) -> int:
    """RH, max 20: tasks completed with a completion timestamp."""
    reported = sum(1 for task in tasks if task.is_reported)
    return round_half_up(_ratio(reported, len(tasks)) * 20)


def weekly_objective_score(tasks: Sequence[TaskSnapshot]) -> int:
    """WO, max 40: 30 for overall completion plus 10 for high-priority completion."""
    if not tasks:
        return 0

    completed = sum(1 for task in tasks if task.completed)
    score = _ratio(completed, len(tasks)) * 30

    high = [task for task in tasks if task.priority == "high"]
    if high:
        completed_high = sum(1 for task in high if task.completed)
        score += _ratio(completed_high, len(high)) * 10

    return round_half_up(min(40.0, score))


def week_status(tasks: Sequence[TaskSnapshot], now: datetime) -> str:
    if not tasks:
        return "not_sent"
    for task in tasks:
        if not task.completed and task.deadline is not None and task.deadline < now:
            return "late"
    return "completed"


def calculate_weekly_score(
    tasks: Iterable[TaskSnapshot],
    window: WeekWindow,
    now: Optional[datetime] = None,
) -> WeeklyScore:
    now = as_utc(now) if now else utcnow()
    week_tasks = [task for task in tasks if window.contains(task.created_at)]

    dp = daily_planning_score(week_tasks)
    rh = report_harian_score(week_tasks)
    wo = weekly_objective_score(week_tasks)

    # Components are already scaled to their maxima; the weights still apply.
    total = dp * 0.4 + rh * 0.2 + wo * 0.4

    return WeeklyScore(
        week=window.week,
        week_start=window.start,
        week_end=window.end,
        status=week_status(week_tasks, now),
        dp=dp,
        rh=rh,
        wo=wo,
        total=total,
        percentage=min(100.0, max(0.0, total)),
        tasks=week_tasks,
    )


def monthly_objective_score(tasks: Sequence[TaskSnapshot]) -> int:
    """MO: completion ratio worth 80 plus 5 per distinct category (max 20)."""
    if not tasks:
        return 0
    completed = sum(1 for task in tasks if task.completed)
    diversity_bonus = min(len({task.category for task in tasks}) * 5, 20)
    return round_half_up(min(100.0, _ratio(completed, len(tasks)) * 80 + diversity_bonus))


def tasks_in_month(tasks: Iterable[TaskSnapshot], year: int, month: int) -> List[TaskSnapshot]:
    return [
        task for task in tasks
        if task.created_at.year == year and task.created_at.month == month
    ]


def calculate_monthly_score(
    tasks: Iterable[TaskSnapshot],
    year: int,
    month: int,
    now: Optional[datetime] = None,
) -> MonthlyScore:
    now = as_utc(now) if now else utcnow()

    # Month filter first: an edge week only sees tasks created in this month.
    month_tasks = tasks_in_month(tasks, year, month)
    weekly_data = [
        calculate_weekly_score(month_tasks, window, now)
        for window in month_week_windows(year, month)
    ]

    staff = _mean([week.percentage for week in weekly_data])
    structural = staff * 0.8 + monthly_objective_score(month_tasks) * 0.2
    average = (staff + structural) / 2

    return MonthlyScore(
        month=MONTH_NAMES[month - 1],
        month_index=month,
        staff=round2(staff),
        structural=round2(structural),
        average=round2(average),
        weekly_data=weekly_data,
    )


def generate_monthly_data(
    tasks: Iterable[TaskSnapshot],
    year: int,
    now: Optional[datetime] = None,
) -> List[MonthlyScore]:
    now = as_utc(now) if now else utcnow()
    tasks = list(tasks)
    return [calculate_monthly_score(tasks, year, month, now) for month in range(1, 13)]


def filter_months(months: List[MonthlyScore], month: Optional[int] = None) -> List[MonthlyScore]:
    if month is None:
        return list(months)
    return [m for m in months if m.month_index == month]


def weekly_view(months: Iterable[MonthlyScore]) -> List[MonthWeeks]:
    return [MonthWeeks(month=m.month, weeks=m.weekly_data) for m in months]


def calculate_overall_stats(months: Iterable[MonthlyScore]) -> OverallStats:
    valid_months = [m for m in months if m.weekly_data]
    if not valid_months:
        return OverallStats(monthly_target=MONTHLY_TARGET)

    overall_score = _mean([m.average for m in valid_months])
    weekly_average = _mean([week.percentage for m in valid_months for week in m.weekly_data])

    return OverallStats(
        overall_score=round2(overall_score),
        weekly_average=round2(weekly_average),
        monthly_target=MONTHLY_TARGET,
        achievement=grade_of(overall_score),
    )


def build_analytics_report(
    tasks: Iterable[TaskSnapshot],
    year: int,
    month: Optional[int] = None,
    now: Optional[datetime] = None,
) -> AnalyticsReport:
    """Full-year scores, optionally narrowed to one month for display."""
    now = as_utc(now) if now else utcnow()
    tasks = list(tasks)

    months = generate_monthly_data(tasks, year, now)
    overall = calculate_overall_stats(months)
    shown = filter_months(months, month)

    logger.debug(
        "Analytics for %s (month=%s): %d tasks, overall=%.2f",
        year, month, len(tasks), overall.overall_score,
    )

    return AnalyticsReport(
        year=year,
        month=month,
        as_of=now,
        task_count=len(tasks),
        overall=overall,
        monthly_data=shown,
        weekly_data=weekly_view(shown),
        distribution=performance_distribution(week for m in shown for week in m.weekly_data),
        formulas=SCORING_FORMULAS,
    )
