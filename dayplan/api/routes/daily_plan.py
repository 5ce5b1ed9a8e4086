"""Daily plan generation and retrieval endpoints."""
from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from dayplan.api.schemas.daily_plan import (
    DailyPlanResponse,
    DailyPlanRunRequest,
    DailyPlanRunResponse,
    DailyPlanStatusRequest,
    DailyPlanStatusResponse,
    PlanItemPayload,
)
from dayplan.db.deps import get_db
from dayplan.db.models.daily_plan import DailyPlan
from dayplan.observability.metrics import latency_metric, log_metric
from dayplan.observability.tracing import trace
from dayplan.services.errors import PlanAlreadyRunning, PlanningError
from dayplan.services.plan_store import SqlAlchemyPlanStore
from dayplan.services.planning_agent import generate_daily_plan

router = APIRouter()


@router.post("/daily-plan/run", response_model=DailyPlanRunResponse, tags=["daily-plan"])
def daily_plan_run(
    request: Request,
    payload: DailyPlanRunRequest,
    db: Session = Depends(get_db),
) -> DailyPlanRunResponse:
    """Generate (or regenerate) the plan for one user and date."""
    request_id = getattr(request.state, "request_id", None)
    metadata = {"user_id": str(payload.user_id), "date": payload.date.isoformat(), "request_id": request_id}
    locks = request.app.state.plan_locks

    with latency_metric("daily_plan.run.latency_ms", metadata={"user_id": str(payload.user_id)}), trace(
        "daily_plan.run", metadata=metadata, user_id=str(payload.user_id), request_id=request_id
    ):
        try:
            with locks.hold(payload.user_id, payload.date):
                summary = generate_daily_plan(db, payload.user_id, payload.date, request_id=request_id)
        except PlanAlreadyRunning:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Plan generation already running")
        except ValueError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        except PlanningError as exc:
            log_metric("daily_plan.run.success", 0, metadata={"user_id": str(payload.user_id)})
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)

    log_metric("daily_plan.run.success", 1, metadata={"user_id": str(payload.user_id)})
    return DailyPlanRunResponse(
        plan_id=summary.plan_id,
        date=summary.date,
        mode=summary.mode,
        total_blocks=summary.total_blocks,
        used_minutes=summary.used_minutes,
        real_load_percent=summary.real_load_percent,
        load_factor=summary.load_factor,
        scheduled_task_ids=summary.scheduled_task_ids,
        deferred_task_ids=summary.deferred_task_ids,
        dropped_blocks=summary.dropped_blocks,
        request_id=request_id or "",
    )


@router.get("/daily-plan", response_model=DailyPlanResponse, tags=["daily-plan"])
def daily_plan_get(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    plan_date: date = Query(..., alias="date", description="Plan date"),
    db: Session = Depends(get_db),
) -> DailyPlanResponse:
    request_id = getattr(request.state, "request_id", None)
    metadata = {"user_id": str(user_id), "date": plan_date.isoformat(), "request_id": request_id}
    with trace("daily_plan.get", metadata=metadata, user_id=str(user_id), request_id=request_id):
        plan = (
            db.query(DailyPlan)
            .filter(DailyPlan.user_id == user_id, DailyPlan.date == plan_date)
            .one_or_none()
        )
        if not plan:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No plan for this date")
        items = SqlAlchemyPlanStore(db).list_plan_items(plan.id)

    log_metric("daily_plan.get.items", len(items), metadata={"user_id": str(user_id)})
    return DailyPlanResponse(
        id=plan.id,
        user_id=plan.user_id,
        date=plan.date,
        status=plan.status,
        strategic_summary=plan.strategic_summary,
        items=[
            PlanItemPayload(
                id=item.id,
                start_time=item.start_time,
                end_time=item.end_time,
                item_type=item.item_type,
                task_id=item.task_id,
                label=item.label,
                status=item.status,
            )
            for item in items
        ],
        request_id=request_id or "",
    )


@router.patch("/daily-plan/{plan_id}/status", response_model=DailyPlanStatusResponse, tags=["daily-plan"])
def daily_plan_status(
    plan_id: UUID,
    payload: DailyPlanStatusRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> DailyPlanStatusResponse:
    """Record a review decision on a generated plan."""
    request_id = getattr(request.state, "request_id", None)
    plan = db.get(DailyPlan, plan_id)
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    if plan.user_id != payload.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Plan does not belong to user")

    metadata = {"plan_id": str(plan_id), "status": payload.status, "request_id": request_id}
    with trace("daily_plan.status", metadata=metadata, user_id=str(payload.user_id), request_id=request_id):
        plan.status = payload.status
        db.commit()
        db.refresh(plan)

    return DailyPlanStatusResponse(id=plan.id, status=plan.status, request_id=request_id or "")
