"""Batch runner that plans a date for every eligible user."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from dayplan.db.models.schedule_profile import ScheduleProfile
from dayplan.db.models.task import BACKLOG_STATUSES, Task
from dayplan.services.plan_locks import PlanLockRegistry
from dayplan.services.planning_agent import PlanningSummary, generate_daily_plan

logger = logging.getLogger(__name__)


@dataclass
class JobRunResult:
    users_processed: int
    plans_written: int
    failures: int = 0


def _eligible_user_ids(db: Session) -> List[UUID]:
    with_profile = {row[0] for row in db.query(ScheduleProfile.user_id).distinct().all()}
    with_backlog = {
        row[0]
        for row in db.query(Task.user_id).filter(Task.status.in_(BACKLOG_STATUSES)).distinct().all()
    }
    return sorted(with_profile | with_backlog, key=str)


def run_daily_plan_for_user(
    db: Session,
    user_id: UUID,
    target_date: date,
    *,
    locks: PlanLockRegistry,
) -> PlanningSummary:
    """Plan one user under a lock from the caller's shared registry; raises PlanAlreadyRunning if held."""
    with locks.hold(user_id, target_date):
        return generate_daily_plan(db, user_id, target_date)


def run_daily_plans_for_all_users(
    db: Session,
    target_date: date,
    *,
    locks: PlanLockRegistry,
    user_ids: Optional[Iterable[UUID]] = None,
) -> JobRunResult:
    ids = _eligible_user_ids(db) if user_ids is None else list(dict.fromkeys(user_ids))
    users_processed = 0
    plans_written = 0
    failures = 0
    for uid in ids:
        users_processed += 1
        try:
            run_daily_plan_for_user(db, uid, target_date, locks=locks)
        except Exception:
            failures += 1
            logger.exception("Daily plan job failed for user %s on %s", uid, target_date)
            continue
        plans_written += 1
    return JobRunResult(users_processed=users_processed, plans_written=plans_written, failures=failures)
