"""DailyMode ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, UniqueConstraint, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from dayplan.db.base import Base


class DailyMode(Base):
    __tablename__ = "daily_modes"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_modes_user_date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    mode = Column(String(length=30), nullable=False)
    auto_generated = Column(Boolean, nullable=False, server_default=sa_text("false"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
