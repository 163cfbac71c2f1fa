from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Dict, List, Literal, Optional
from app.utils.dates import as_utc

Priority = Literal["high", "medium", "low"]
WeekStatus = Literal["completed", "late", "not_sent"]


class TaskSnapshot(BaseModel):
    """Read-only view of a task as the scoring engine sees it."""
    id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Priority = "medium"
    deadline: Optional[datetime] = None
    completed: bool = False
    completed_at: Optional[datetime] = None
    estimated_time: Optional[float] = None  # hours
    created_at: datetime

    model_config = {"frozen": True}

    @field_validator("deadline", "completed_at", "created_at")
    @classmethod
    def normalize_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def is_planned(self) -> bool:
        return bool(self.description) and bool(self.estimated_time)

    @property
    def is_reported(self) -> bool:
        # completed without a completion timestamp earns no reporting credit
        return self.completed and self.completed_at is not None


class WeeklyScore(BaseModel):
    week: int  # 1-based, resets every month
    week_start: date
    week_end: date
    status: WeekStatus
    dp: int  # Daily Planning, max 40
    rh: int  # Report Harian, max 20
    wo: int  # Weekly Objective, max 40
    total: float
    percentage: float
    tasks: List[TaskSnapshot]


class MonthlyScore(BaseModel):
    month: str
    month_index: int  # 1-12
    staff: float
    structural: float
    average: float
    weekly_data: List[WeeklyScore]


class MonthWeeks(BaseModel):
    month: str
    weeks: List[WeeklyScore]


class OverallStats(BaseModel):
    overall_score: float = 0.0
    weekly_average: float = 0.0
    monthly_target: float = 95.0
    achievement: str = "C"


class DistributionBucket(BaseModel):
    tier: str
    label: str
    count: int
    share: int  # rounded percent of all weeks


class PerformanceDistribution(BaseModel):
    total_weeks: int
    buckets: List[DistributionBucket]


class AnalyticsReport(BaseModel):
    year: int
    month: Optional[int] = None
    as_of: datetime
    task_count: int
    overall: OverallStats
    monthly_data: List[MonthlyScore]
    weekly_data: List[MonthWeeks]
    distribution: PerformanceDistribution
    formulas: Dict[str, str]


class GradeResponse(BaseModel):
    percentage: float = Field(..., ge=0, le=100)
    grade: str
    severity: str
