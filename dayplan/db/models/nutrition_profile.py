"""Meal times and eating pattern."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, ForeignKey, String, Time, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from dayplan.db.base import Base


class NutritionProfile(Base):
    __tablename__ = "nutrition_profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    eating_pattern = Column(String(length=30), nullable=False, server_default=sa_text("'NORMAL'"))
    breakfast_time = Column(Time, nullable=True)
    lunch_time = Column(Time, nullable=True)
    dinner_time = Column(Time, nullable=True)
    suhoor_time = Column(Time, nullable=True)
    iftar_time = Column(Time, nullable=True)
