"""Task ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from dayplan.db.base import Base

BACKLOG_STATUSES = ("INBOX", "ACTIVE")


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_id", "user_id"),
        Index("ix_tasks_user_status", "user_id", "status"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(length=20), nullable=False, server_default=sa_text("'INBOX'"))
    importance = Column(Integer, nullable=True)
    urgency = Column(Integer, nullable=True)
    estimated_minutes = Column(Integer, nullable=True)
    deferred_count = Column(Integer, nullable=False, server_default=sa_text("0"))
    last_deferred_at = Column(DateTime(timezone=True), nullable=True)
    forced_priority = Column(Boolean, nullable=False, server_default=sa_text("false"))
    due_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
