"""Per-weekday work window, commute and midday rest."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, ForeignKey, Integer, Time, UniqueConstraint, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from dayplan.db.base import Base


class WeeklyScheduleEntry(Base):
    __tablename__ = "weekly_schedule_entries"
    __table_args__ = (UniqueConstraint("user_id", "day_of_week", name="uq_weekly_schedule_user_day"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Monday=0 ... Sunday=6, same as date.weekday()
    day_of_week = Column(Integer, nullable=False)
    work_start_time = Column(Time, nullable=True)
    work_end_time = Column(Time, nullable=True)
    commute_minutes = Column(Integer, nullable=False, server_default=sa_text("0"))
    midday_rest_minutes = Column(Integer, nullable=False, server_default=sa_text("0"))
