from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, Float, func
from app.database import Base

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    priority = Column(String, nullable=False, default="medium")  # low, medium, high
    deadline = Column(DateTime(timezone=True), nullable=True)
    day_of_week = Column(Integer, nullable=True)   # 0 = Sunday
    time_slot = Column(String, nullable=True)      # "09:00"
    is_scheduled = Column(Boolean, nullable=False, default=False)  # False = inbox
    estimated_time = Column(Float, nullable=True)  # hours
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
