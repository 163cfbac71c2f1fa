from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional

class FocusGoalCreate(BaseModel):
    goal: str = Field(..., min_length=1, max_length=200)
    week_start_date: Optional[date] = None  # defaults to the current week

class FocusGoalUpdate(BaseModel):
    goal: Optional[str] = Field(None, min_length=1, max_length=200)
    completed: Optional[bool] = None

class FocusGoalResponse(BaseModel):
    id: int
    week_start_date: date
    goal: str
    completed: bool
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}
