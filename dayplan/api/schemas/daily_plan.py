"""Schemas for daily plan endpoints."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel


class DailyPlanRunRequest(BaseModel):
    user_id: UUID
    date: date


class DailyPlanRunResponse(BaseModel):
    plan_id: UUID
    date: date
    mode: str
    total_blocks: int
    used_minutes: int
    real_load_percent: int
    load_factor: float
    scheduled_task_ids: List[UUID]
    deferred_task_ids: List[UUID]
    dropped_blocks: List[str] = []
    request_id: str


class PlanItemPayload(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime
    item_type: str
    task_id: Optional[UUID]
    label: Optional[str]
    status: str


class DailyPlanResponse(BaseModel):
    id: UUID
    user_id: UUID
    date: date
    status: str
    strategic_summary: Optional[str]
    items: List[PlanItemPayload]
    request_id: str


class DailyPlanStatusRequest(BaseModel):
    user_id: UUID
    status: Literal["REVIEWED", "APPROVED"]


class DailyPlanStatusResponse(BaseModel):
    id: UUID
    status: str
    request_id: str
