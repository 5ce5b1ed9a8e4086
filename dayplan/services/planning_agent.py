"""Daily planning run: mode, structure, gaps, task packing, persistence."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from dayplan.core.context import planning_context
from dayplan.db.models.user import User
from dayplan.observability.metrics import log_metric
from dayplan.observability.tracing import trace
from dayplan.services.daily_mode import load_factor_for, resolve_daily_mode
from dayplan.services.errors import PlanningError, PlanStoreError
from dayplan.services.gap_finder import find_gaps
from dayplan.services.plan_store import PlanStore, SqlAlchemyPlanStore
from dayplan.services.plan_writer import write_plan
from dayplan.services.structural_blocks import Block, build_structural_blocks, fit_to_window, load_day_profile
from dayplan.services.task_scheduler import BacklogTask, TaskDeferral, prioritize, schedule_tasks

logger = logging.getLogger(__name__)


@dataclass
class PlanningSummary:
    plan_id: UUID
    date: date
    mode: str
    total_blocks: int
    used_minutes: int
    real_load_percent: int
    load_factor: float
    scheduled_task_ids: List[UUID] = field(default_factory=list)
    deferred_task_ids: List[UUID] = field(default_factory=list)
    defaults_applied: List[str] = field(default_factory=list)
    dropped_blocks: List[str] = field(default_factory=list)


def generate_daily_plan(
    db: Session,
    user_id: UUID,
    target_date: date,
    *,
    request_id: str | None = None,
) -> PlanningSummary:
    """Run the planner for a user against the given session. Raises ValueError for unknown users."""
    if db.get(User, user_id) is None:
        raise ValueError("User not found")
    return run_daily_planning(SqlAlchemyPlanStore(db), user_id, target_date, request_id=request_id)


def run_daily_planning(
    store: PlanStore,
    user_id: UUID,
    target_date: date,
    *,
    request_id: str | None = None,
) -> PlanningSummary:
    """
    Build and persist the plan for one user and one date.

    Callers must not run this concurrently for the same (user, date): items
    are replaced wholesale and deferral counters are read then written.
    Raises PlanningError when a required record cannot be read or written.
    """
    with planning_context(user_id, target_date), trace(
        "daily_plan.generate",
        metadata={"date": target_date.isoformat()},
        user_id=str(user_id),
        request_id=request_id,
    ) as planning_trace:
        try:
            summary = _plan(store, user_id, target_date)
        except PlanStoreError as exc:
            logger.error("Planning for %s aborted: %s", target_date, exc)
            raise PlanningError(str(exc), user_id=user_id, target_date=target_date) from exc

        if planning_trace:
            planning_trace.update(
                metadata={
                    "mode": summary.mode,
                    "total_blocks": summary.total_blocks,
                    "real_load_percent": summary.real_load_percent,
                }
            )

    log_metric("daily_plan.generate.used_minutes", summary.used_minutes, metadata={"mode": summary.mode})
    log_metric("daily_plan.generate.deferred_tasks", len(summary.deferred_task_ids), metadata={"mode": summary.mode})
    return summary


def _plan(store: PlanStore, user_id: UUID, target_date: date) -> PlanningSummary:
    mode = resolve_daily_mode(store, user_id, target_date)
    profile = load_day_profile(store, user_id, target_date)
    if profile.defaults_applied:
        logger.debug("Using defaults for %s", ", ".join(profile.defaults_applied))

    total_awake_minutes = profile.awake_minutes
    load_factor = load_factor_for(mode.mode, total_awake_minutes)
    capacity = total_awake_minutes * load_factor
    logger.info(
        "Planning %s in mode %s: %s awake minutes, capacity %.0f",
        target_date,
        mode.mode,
        total_awake_minutes,
        capacity,
    )

    dropped: List[Block] = []
    structural = fit_to_window(build_structural_blocks(profile, mode.mode), profile.wake, profile.sleep, dropped)
    gaps = find_gaps(structural, profile.wake, profile.sleep)
    backlog = prioritize(BacklogTask.from_row(row) for row in store.list_backlog_tasks(user_id))

    def persist_deferral(deferral: TaskDeferral) -> None:
        try:
            store.record_deferrals([deferral])
        except PlanStoreError:
            logger.warning("Could not record deferral for task %s; continuing", deferral.task_id, exc_info=True)

    outcome = schedule_tasks(gaps, backlog, capacity, on_defer=persist_deferral)

    written = write_plan(
        store,
        user_id=user_id,
        target_date=target_date,
        mode=mode.mode,
        blocks=structural + outcome.blocks,
        used_minutes=outcome.used_minutes,
        total_awake_minutes=total_awake_minutes,
    )
    return PlanningSummary(
        plan_id=written.plan_id,
        date=target_date,
        mode=written.mode,
        total_blocks=written.total_blocks,
        used_minutes=written.used_minutes,
        real_load_percent=written.real_load_percent,
        load_factor=load_factor,
        scheduled_task_ids=outcome.scheduled_task_ids,
        deferred_task_ids=[deferral.task_id for deferral in outcome.deferrals],
        defaults_applied=list(profile.defaults_applied),
        dropped_blocks=[block.label or block.kind for block in dropped],
    )
