"""Record-storage collaborator consumed by the planning engine."""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from dayplan.db.models.daily_mode import DailyMode
from dayplan.db.models.daily_plan import DailyPlan
from dayplan.db.models.nutrition_profile import NutritionProfile
from dayplan.db.models.plan_item import PlanItem
from dayplan.db.models.schedule_profile import ScheduleProfile
from dayplan.db.models.task import BACKLOG_STATUSES, Task
from dayplan.db.models.weekly_schedule import WeeklyScheduleEntry
from dayplan.services.errors import PlanStoreError
from dayplan.services.structural_blocks import Block
from dayplan.services.task_scheduler import TaskDeferral

logger = logging.getLogger(__name__)

PLAN_STATUS_GENERATED = "GENERATED"
PLAN_ITEM_PENDING = "PENDING"

T = TypeVar("T")


class PlanStore:
    """
    Storage interface the planner reads profiles from and writes plans to.

    Implementations raise PlanStoreError for any persistence failure; the
    planner decides which failures are fatal.
    """

    def get_schedule_profile(self, user_id: UUID) -> Optional[ScheduleProfile]:
        raise NotImplementedError

    def get_weekly_schedule(self, user_id: UUID, day_of_week: int) -> Optional[WeeklyScheduleEntry]:
        raise NotImplementedError

    def get_nutrition_profile(self, user_id: UUID) -> Optional[NutritionProfile]:
        raise NotImplementedError

    def list_backlog_tasks(self, user_id: UUID) -> List[Task]:
        raise NotImplementedError

    def get_daily_mode(self, user_id: UUID, target_date: date) -> Optional[DailyMode]:
        raise NotImplementedError

    def create_daily_mode(self, user_id: UUID, target_date: date, mode: str, *, auto_generated: bool) -> DailyMode:
        raise NotImplementedError

    def record_deferrals(self, deferrals: Sequence[TaskDeferral]) -> None:
        raise NotImplementedError

    def upsert_daily_plan(self, user_id: UUID, target_date: date) -> DailyPlan:
        raise NotImplementedError

    def replace_plan_items(self, plan: DailyPlan, blocks: Sequence[Block]) -> int:
        raise NotImplementedError

    def update_plan_summary(self, plan: DailyPlan, summary: str) -> None:
        raise NotImplementedError

    def count_plan_items(self, plan_id: UUID) -> int:
        raise NotImplementedError

    def list_plan_items(self, plan_id: UUID) -> List[PlanItem]:
        raise NotImplementedError


class SqlAlchemyPlanStore(PlanStore):
    """PlanStore backed by a caller-owned SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def get_schedule_profile(self, user_id: UUID) -> Optional[ScheduleProfile]:
        return self._read(
            lambda: self.db.query(ScheduleProfile).filter(ScheduleProfile.user_id == user_id).one_or_none()
        )

    def get_weekly_schedule(self, user_id: UUID, day_of_week: int) -> Optional[WeeklyScheduleEntry]:
        return self._read(
            lambda: self.db.query(WeeklyScheduleEntry)
            .filter(
                WeeklyScheduleEntry.user_id == user_id,
                WeeklyScheduleEntry.day_of_week == day_of_week,
            )
            .one_or_none()
        )

    def get_nutrition_profile(self, user_id: UUID) -> Optional[NutritionProfile]:
        return self._read(
            lambda: self.db.query(NutritionProfile).filter(NutritionProfile.user_id == user_id).one_or_none()
        )

    def list_backlog_tasks(self, user_id: UUID) -> List[Task]:
        return self._read(
            lambda: self.db.query(Task)
            .filter(Task.user_id == user_id, Task.status.in_(BACKLOG_STATUSES))
            .order_by(
                Task.forced_priority.desc(),
                func.coalesce(Task.importance, 1).desc(),
                func.coalesce(Task.urgency, 1).desc(),
                Task.created_at.asc(),
            )
            .all()
        )

    def get_daily_mode(self, user_id: UUID, target_date: date) -> Optional[DailyMode]:
        return self._read(
            lambda: self.db.query(DailyMode)
            .filter(DailyMode.user_id == user_id, DailyMode.date == target_date)
            .one_or_none()
        )

    def create_daily_mode(self, user_id: UUID, target_date: date, mode: str, *, auto_generated: bool) -> DailyMode:
        row = DailyMode(user_id=user_id, date=target_date, mode=mode, auto_generated=auto_generated)
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError:
            # Lost a race with another writer; keep whatever landed first.
            self.db.rollback()
            existing = self.get_daily_mode(user_id, target_date)
            if existing is None:
                raise PlanStoreError(f"Unable to create daily mode for {target_date}")
            return existing
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PlanStoreError(f"Unable to create daily mode for {target_date}: {exc}") from exc
        self.db.refresh(row)
        return row

    def record_deferrals(self, deferrals: Sequence[TaskDeferral]) -> None:
        if not deferrals:
            return
        try:
            for deferral in deferrals:
                self.db.query(Task).filter(Task.id == deferral.task_id).update(
                    {
                        Task.deferred_count: deferral.deferred_count,
                        Task.last_deferred_at: deferral.deferred_at,
                        Task.importance: deferral.importance,
                        Task.urgency: deferral.urgency,
                        Task.forced_priority: deferral.forced_priority,
                    },
                    synchronize_session=False,
                )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PlanStoreError(f"Unable to record {len(deferrals)} task deferral(s): {exc}") from exc

    def upsert_daily_plan(self, user_id: UUID, target_date: date) -> DailyPlan:
        try:
            plan = (
                self.db.query(DailyPlan)
                .filter(DailyPlan.user_id == user_id, DailyPlan.date == target_date)
                .one_or_none()
            )
            if plan is None:
                plan = DailyPlan(user_id=user_id, date=target_date, status=PLAN_STATUS_GENERATED)
                self.db.add(plan)
            else:
                plan.status = PLAN_STATUS_GENERATED
            self.db.commit()
            self.db.refresh(plan)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PlanStoreError(f"Unable to find or create daily plan for {target_date}: {exc}") from exc
        return plan

    def replace_plan_items(self, plan: DailyPlan, blocks: Sequence[Block]) -> int:
        try:
            self.db.query(PlanItem).filter(PlanItem.daily_plan_id == plan.id).delete(synchronize_session=False)
            self.db.add_all(
                [
                    PlanItem(
                        user_id=plan.user_id,
                        daily_plan_id=plan.id,
                        start_time=block.start,
                        end_time=block.end,
                        item_type=block.kind,
                        task_id=block.task_id,
                        label=block.label,
                        status=PLAN_ITEM_PENDING,
                    )
                    for block in blocks
                ]
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PlanStoreError(f"Unable to save plan items for plan {plan.id}: {exc}") from exc
        self.db.expire(plan, ["items"])
        return len(blocks)

    def update_plan_summary(self, plan: DailyPlan, summary: str) -> None:
        try:
            plan.strategic_summary = summary
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PlanStoreError(f"Unable to update summary for plan {plan.id}: {exc}") from exc

    def count_plan_items(self, plan_id: UUID) -> int:
        return self._read(
            lambda: self.db.query(func.count(PlanItem.id)).filter(PlanItem.daily_plan_id == plan_id).scalar() or 0
        )

    def list_plan_items(self, plan_id: UUID) -> List[PlanItem]:
        return self._read(
            lambda: self.db.query(PlanItem)
            .filter(PlanItem.daily_plan_id == plan_id)
            .order_by(PlanItem.start_time.asc(), PlanItem.id.asc())
            .all()
        )

    def _read(self, query: Callable[[], T]) -> T:
        try:
            return query()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.debug("Store read failed", exc_info=True)
            raise PlanStoreError(str(exc)) from exc
