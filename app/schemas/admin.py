from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional
from .user import Role, UserResponse
from .dashboard import ActivityLogResponse


class AdminStats(BaseModel):
    total_users: int
    active_users: int  # created a task in the last 30 days
    total_tasks: int
    completed_tasks: int
    completion_rate: float
    new_users_this_week: int
    tasks_completed_today: int


class UserWithStats(UserResponse):
    task_count: int = 0
    completed_task_count: int = 0
    last_active: Optional[datetime] = None


class UserListResponse(BaseModel):
    users: List[UserWithStats]
    total: int
    page: int
    limit: int


class RoleUpdate(BaseModel):
    role: Role


class SuspendRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)
    until: Optional[datetime] = None  # None = until lifted


class AdminSettingUpdate(BaseModel):
    value: Any
    description: Optional[str] = None


class AdminSettingResponse(BaseModel):
    id: int
    key: str
    value: Any
    description: Optional[str]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class AdminLogResponse(BaseModel):
    id: int
    admin_id: int
    action: str
    target_type: Optional[str]
    target_id: Optional[str]
    details: Optional[Dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}


class AdminLogListResponse(BaseModel):
    logs: List[AdminLogResponse]
    total: int


class ActivityLogListResponse(BaseModel):
    logs: List[ActivityLogResponse]
    total: int
