from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Literal

Priority = Literal["low", "medium", "high"]

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: Optional[int] = None
    priority: Priority = "medium"
    deadline: Optional[datetime] = None
    day_of_week: Optional[int] = Field(None, ge=0, le=6)  # 0 = Sunday
    time_slot: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    is_scheduled: bool = False
    estimated_time: Optional[float] = Field(None, ge=0, le=24)

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: Optional[int] = None
    priority: Optional[Priority] = None
    deadline: Optional[datetime] = None
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    time_slot: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    is_scheduled: Optional[bool] = None
    estimated_time: Optional[float] = Field(None, ge=0, le=24)
    completed: Optional[bool] = None

class TaskSchedule(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6)
    time_slot: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")

class TaskResponse(BaseModel):
    id: int
    user_id: int
    category_id: Optional[int]
    title: str
    description: Optional[str]
    completed: bool
    priority: str
    deadline: Optional[datetime]
    day_of_week: Optional[int]
    time_slot: Optional[str]
    is_scheduled: bool
    estimated_time: Optional[float]
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class TaskSummaryResponse(BaseModel):
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int
    pending_tasks: int
    tasks: List[TaskResponse]
