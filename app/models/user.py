from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, func
from app.database import Base

class User(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")  # user, admin, super_admin

    suspended = Column(Boolean, nullable=False, default=False)
    suspended_reason = Column(Text, nullable=True)
    suspended_until = Column(DateTime(timezone=True), nullable=True)  # NULL = indefinitely

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
