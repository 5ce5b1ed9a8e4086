"""PlanItem ORM model: one persisted block of a DailyPlan."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from dayplan.db.base import Base


class PlanItem(Base):
    __tablename__ = "plan_items"
    __table_args__ = (Index("ix_plan_items_daily_plan_id", "daily_plan_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    daily_plan_id = Column(UUID(as_uuid=True), ForeignKey("daily_plans.id", ondelete="CASCADE"), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    item_type = Column(String(length=20), nullable=False)
    task_id = Column(UUID(as_uuid=True), ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True)
    label = Column(Text, nullable=True)
    status = Column(String(length=20), nullable=False, server_default=sa_text("'PENDING'"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
