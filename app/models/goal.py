from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func, Date
from app.database import Base

class WeeklyFocusGoal(Base):
    __tablename__ = "weekly_focus_goals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    week_start_date = Column(Date, nullable=False, index=True)  # Sunday that opens the week
    goal = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
