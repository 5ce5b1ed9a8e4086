"""Long-lived wake/sleep profile, owned outside the planner."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Time, func
from sqlalchemy.dialects.postgresql import UUID

from dayplan.db.base import Base


class ScheduleProfile(Base):
    __tablename__ = "schedule_profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    wake_time = Column(Time, nullable=True)
    sleep_time = Column(Time, nullable=True)
    minimum_rest_minutes = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
