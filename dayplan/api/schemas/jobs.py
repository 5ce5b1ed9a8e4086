"""Schemas for job operations endpoints."""
from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class JobRunRequest(BaseModel):
    date: date
    user_id: Optional[UUID] = None


class JobRunResponse(BaseModel):
    job: str
    users_processed: int
    plans_written: int
    failures: int
    request_id: str
