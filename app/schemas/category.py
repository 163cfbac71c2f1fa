from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: str = Field("#6b7280", pattern=r"^#[0-9a-fA-F]{6}$")
    emoji: str = Field("📌", min_length=1, max_length=8)

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")
    emoji: Optional[str] = Field(None, min_length=1, max_length=8)

class CategoryResponse(BaseModel):
    id: int
    name: str
    color: str
    emoji: str
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}
