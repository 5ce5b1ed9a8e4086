"""Daily mode endpoints."""
from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dayplan.api.schemas.daily_mode import DailyModeResponse, DailyModeUpdateRequest
from dayplan.db.deps import get_db
from dayplan.db.models.daily_mode import DailyMode
from dayplan.db.models.user import User
from dayplan.observability.tracing import trace
from dayplan.services.daily_mode import LOAD_FACTORS, DEFAULT_LOAD_FACTOR, resolve_daily_mode
from dayplan.services.errors import PlanStoreError
from dayplan.services.plan_store import SqlAlchemyPlanStore

router = APIRouter()


@router.get("/daily-mode", response_model=DailyModeResponse, tags=["daily-mode"])
def daily_mode_get(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    mode_date: date = Query(..., alias="date", description="Day to resolve"),
    db: Session = Depends(get_db),
) -> DailyModeResponse:
    """Return the day's mode, creating the weekday/weekend default when none is stored."""
    request_id = getattr(request.state, "request_id", None)
    if db.get(User, user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    with trace("daily_mode.get", metadata={"date": mode_date.isoformat()}, user_id=str(user_id), request_id=request_id):
        try:
            resolution = resolve_daily_mode(SqlAlchemyPlanStore(db), user_id, mode_date)
        except PlanStoreError as exc:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))

    return DailyModeResponse(
        user_id=user_id,
        date=mode_date,
        mode=resolution.mode,
        auto_generated=resolution.auto_generated,
        load_factor=LOAD_FACTORS.get(resolution.mode, DEFAULT_LOAD_FACTOR),
        request_id=request_id or "",
    )


@router.put("/daily-mode", response_model=DailyModeResponse, tags=["daily-mode"])
def daily_mode_set(
    request: Request,
    payload: DailyModeUpdateRequest,
    db: Session = Depends(get_db),
) -> DailyModeResponse:
    """Store the user's own choice of mode for a day."""
    request_id = getattr(request.state, "request_id", None)
    if db.get(User, payload.user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    metadata = {"date": payload.date.isoformat(), "mode": payload.mode}
    with trace("daily_mode.set", metadata=metadata, user_id=str(payload.user_id), request_id=request_id):
        row = (
            db.query(DailyMode)
            .filter(DailyMode.user_id == payload.user_id, DailyMode.date == payload.date)
            .one_or_none()
        )
        if row is None:
            row = DailyMode(user_id=payload.user_id, date=payload.date)
            db.add(row)
        row.mode = payload.mode
        row.auto_generated = False
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to save daily mode")
        db.refresh(row)

    return DailyModeResponse(
        user_id=row.user_id,
        date=row.date,
        mode=row.mode,
        auto_generated=bool(row.auto_generated),
        load_factor=LOAD_FACTORS[row.mode],
        request_id=request_id or "",
    )
