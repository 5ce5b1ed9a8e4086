"""Schemas for daily mode endpoints."""
from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import BaseModel, field_validator

from dayplan.services.daily_mode import validate_mode


class DailyModeUpdateRequest(BaseModel):
    user_id: UUID
    date: date
    mode: str

    @field_validator("mode")
    @classmethod
    def normalize_mode(cls, value: str) -> str:
        return validate_mode(value)


class DailyModeResponse(BaseModel):
    user_id: UUID
    date: date
    mode: str
    auto_generated: bool
    load_factor: float
    request_id: str
