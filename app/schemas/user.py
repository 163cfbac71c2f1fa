from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime

Role = Literal["user", "admin", "super_admin"]

class UserCreate(BaseModel):
    email: EmailStr
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserResponse(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str]
    avatar_url: Optional[str] = None
    role: str
    suspended: bool
    suspended_reason: Optional[str] = None
    suspended_until: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: UserResponse
