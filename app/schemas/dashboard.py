from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, List, Optional

class QuickStats(BaseModel):
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    inbox_count: int
    today_tasks: int
    today_completed: int
    week_tasks: int
    week_completion_rate: int  # whole percent

class ActivityLogResponse(BaseModel):
    id: int
    user_id: int
    action: str
    entity_type: str
    entity_id: str
    details: Optional[Dict[str, Any]]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}

class DashboardResponse(BaseModel):
    name: str
    stats: QuickStats
    recent_activity: List[ActivityLogResponse]
