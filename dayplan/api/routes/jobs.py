"""Operational endpoints for the daily planning job."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from dayplan.api.schemas.jobs import JobRunRequest, JobRunResponse
from dayplan.core.config import settings
from dayplan.db.deps import get_db
from dayplan.observability.metrics import latency_metric, log_metric
from dayplan.observability.tracing import trace
from dayplan.services.errors import PlanAlreadyRunning, PlanningError
from dayplan.services.job_runner import run_daily_plan_for_user, run_daily_plans_for_all_users

router = APIRouter()


@router.get("/jobs", tags=["jobs"])
def get_jobs_config(request: Request) -> dict:
    request_id = getattr(request.state, "request_id", None)
    with trace("jobs.config", metadata={"request_id": request_id}, request_id=request_id):
        data = {
            "scheduler_enabled": settings.scheduler_enabled,
            "schedule": {
                "timezone": settings.scheduler_timezone,
                "daily_time": f"{settings.daily_job_hour:02d}:{settings.daily_job_minute:02d}",
                "target_offset_days": settings.plan_target_offset_days,
            },
        }
    return {**data, "request_id": request_id or ""}


@router.post("/jobs/run-now", response_model=JobRunResponse, tags=["jobs"])
def run_job_now(
    request: Request,
    payload: JobRunRequest,
    db: Session = Depends(get_db),
) -> JobRunResponse:
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Run-now only allowed in debug mode")

    request_id = getattr(request.state, "request_id", None)
    locks = request.app.state.plan_locks
    metadata = {"job": "daily_plan", "date": payload.date.isoformat(), "request_id": request_id}
    with latency_metric("jobs.run_now.latency_ms", metadata={"job": "daily_plan"}), trace(
        "jobs.run_now", metadata=metadata, request_id=request_id
    ):
        if payload.user_id:
            try:
                run_daily_plan_for_user(db, payload.user_id, payload.date, locks=locks)
            except ValueError:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
            except PlanAlreadyRunning:
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Plan generation already running")
            except PlanningError as exc:
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)
            result = {"users_processed": 1, "plans_written": 1, "failures": 0}
        else:
            res = run_daily_plans_for_all_users(db, payload.date, locks=locks)
            result = {
                "users_processed": res.users_processed,
                "plans_written": res.plans_written,
                "failures": res.failures,
            }

    log_metric("jobs.run_now.success", 1, metadata={"job": "daily_plan"})
    return JobRunResponse(job="daily_plan", request_id=request_id or "", **result)
