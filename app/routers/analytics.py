from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel
from app.database import get_db
from app.core.auth import get_current_user
from app.schemas.analytics import AnalyticsReport, GradeResponse, TaskSnapshot
from app.services.analytics import get_user_analytics
from app.services.grading import grade_of, severity_of
from app.services.performance import build_analytics_report
from app.utils.dates import utcnow

router = APIRouter(prefix="/analytics", tags=["analytics"])


class AnalyticsPreviewRequest(BaseModel):
    tasks: List[TaskSnapshot]
    year: int
    month: Optional[int] = None
    as_of: Optional[datetime] = None


def validate_period(year: int, month: Optional[int]) -> None:
    if month is not None and not (1 <= month <= 12):
        raise HTTPException(400, "Invalid month")
    if year < 1900 or year > 2100:
        raise HTTPException(400, "Invalid year")


@router.get("", response_model=AnalyticsReport)
async def get_my_analytics(
    year: Optional[int] = None,
    month: Optional[int] = None,
    as_of: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """
    Weekly (TAL), monthly and yearly scores for the current user's tasks.
    ``as_of`` pins the clock used for late/overdue status so that a past
    report can be reproduced; it defaults to now.
    """
    if year is None:
        year = utcnow().year
    validate_period(year, month)
    return await get_user_analytics(db, current_user.id, year, month=month, as_of=as_of)


@router.post("/preview", response_model=AnalyticsReport)
async def preview_analytics(
    request: AnalyticsPreviewRequest,
    current_user = Depends(get_current_user)
):
    """Score an arbitrary task list without storing it (what-if planning)."""
    validate_period(request.year, request.month)
    return build_analytics_report(request.tasks, request.year, month=request.month, now=request.as_of)


@router.get("/grade", response_model=GradeResponse)
async def get_grade(percentage: float = Query(..., ge=0, le=100)):
    return GradeResponse(
        percentage=percentage,
        grade=grade_of(percentage),
        severity=severity_of(percentage)
    )
