from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dayplan.db.base import Base
from dayplan.db.models.daily_mode import DailyMode
from dayplan.db.models.daily_plan import DailyPlan
from dayplan.db.models.nutrition_profile import NutritionProfile
from dayplan.db.models.plan_item import PlanItem
from dayplan.db.models.schedule_profile import ScheduleProfile
from dayplan.db.models.task import Task
from dayplan.db.models.user import User
from dayplan.db.models.weekly_schedule import WeeklyScheduleEntry
from dayplan.services.errors import PlanningError, PlanStoreError
from dayplan.services.plan_store import SqlAlchemyPlanStore
from dayplan.services.planning_agent import generate_daily_plan, run_daily_planning

MONDAY = date(2026, 10, 19)
BASE_TS = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def _session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _seed(Session, *rows):
    session = Session()
    try:
        session.add_all(rows)
        session.commit()
    finally:
        session.close()


def _seed_user(Session, eating_pattern="FLEXIBLE"):
    user_id = uuid4()
    _seed(Session, User(id=user_id))
    _seed(
        Session,
        ScheduleProfile(user_id=user_id, wake_time=time(8, 0), sleep_time=time(22, 0)),
        NutritionProfile(user_id=user_id, eating_pattern=eating_pattern),
    )
    return user_id


def _seed_tasks(Session, user_id, count, minutes=60, **kwargs):
    ids = []
    for index in range(count):
        task_id = uuid4()
        values = {"importance": 3, "urgency": 3}
        values.update(kwargs)
        _seed(
            Session,
            Task(
                id=task_id,
                user_id=user_id,
                content=f"Task {index + 1}",
                estimated_minutes=minutes,
                created_at=BASE_TS + timedelta(minutes=index),
                **values,
            ),
        )
        ids.append(task_id)
    return ids


def _plan_items(Session, plan_id):
    session = Session()
    try:
        return (
            session.query(PlanItem)
            .filter(PlanItem.daily_plan_id == plan_id)
            .order_by(PlanItem.start_time)
            .all()
        )
    finally:
        session.close()


def _task(Session, task_id):
    session = Session()
    try:
        return session.get(Task, task_id)
    finally:
        session.close()


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime.combine(MONDAY, time(hour, minute))


def test_strategic_day_without_structure_packs_tasks_from_wake() -> None:
    Session = _session()
    user_id = _seed_user(Session)
    task_ids = _seed_tasks(Session, user_id, 3)

    session = Session()
    summary = generate_daily_plan(session, user_id, MONDAY)
    session.close()

    assert summary.mode == "STRATEGIC"
    assert summary.total_blocks == 3
    assert summary.used_minutes == 180
    assert summary.real_load_percent == 21
    assert summary.scheduled_task_ids == task_ids
    items = _plan_items(Session, summary.plan_id)
    assert [(item.start_time, item.end_time, item.task_id) for item in items] == [
        (_at(8), _at(9), task_ids[0]),
        (_at(9), _at(10), task_ids[1]),
        (_at(10), _at(11), task_ids[2]),
    ]
    assert all(item.item_type == "TASK" and item.status == "PENDING" for item in items)

    session = Session()
    plan = session.get(DailyPlan, summary.plan_id)
    assert plan.status == "GENERATED"
    assert "STRATEGIC" in plan.strategic_summary
    assert "21%" in plan.strategic_summary
    mode = session.query(DailyMode).filter(DailyMode.user_id == user_id).one()
    assert mode.auto_generated is True
    session.close()


def test_full_rest_day_defers_tasks_beyond_capacity() -> None:
    Session = _session()
    user_id = _seed_user(Session)
    _seed(Session, DailyMode(user_id=user_id, date=MONDAY, mode="FULL_REST", auto_generated=False))
    task_ids = _seed_tasks(Session, user_id, 5)

    session = Session()
    summary = generate_daily_plan(session, user_id, MONDAY)
    session.close()

    assert summary.used_minutes == 120
    assert summary.scheduled_task_ids == task_ids[:2]
    assert summary.deferred_task_ids == task_ids[2:]
    assert summary.total_blocks == 4
    items = _plan_items(Session, summary.plan_id)
    assert [(item.start_time, item.end_time, item.item_type) for item in items] == [
        (_at(8), _at(9), "TASK"),
        (_at(9), _at(10), "TASK"),
        (_at(10), _at(10, 30), "STRUCTURAL"),
        (_at(18), _at(18, 30), "STRUCTURAL"),
    ]

    third = _task(Session, task_ids[2])
    assert third.deferred_count == 1
    assert third.last_deferred_at is not None
    assert _task(Session, task_ids[0]).deferred_count == 0


def test_repeated_deferral_escalates_priority() -> None:
    Session = _session()
    user_id = _seed_user(Session)
    _seed(Session, DailyMode(user_id=user_id, date=MONDAY, mode="FULL_REST", auto_generated=False))
    _seed_tasks(Session, user_id, 2, minutes=60, importance=5, urgency=5)
    (slipping,) = _seed_tasks(Session, user_id, 1, minutes=60, importance=3, urgency=3, deferred_count=6)

    session = Session()
    generate_daily_plan(session, user_id, MONDAY)
    session.close()

    task = _task(Session, slipping)
    assert (task.deferred_count, task.importance, task.urgency, task.forced_priority) == (7, 4, 4, True)


def test_regeneration_replaces_items_and_keeps_plan() -> None:
    Session = _session()
    user_id = _seed_user(Session, eating_pattern="NORMAL")
    _seed_tasks(Session, user_id, 2)

    session = Session()
    first = generate_daily_plan(session, user_id, MONDAY)
    _seed_tasks(Session, user_id, 1, minutes=30, importance=5)
    second = generate_daily_plan(session, user_id, MONDAY)
    session.close()

    assert second.plan_id == first.plan_id
    assert second.total_blocks == first.total_blocks + 1
    assert len(_plan_items(Session, second.plan_id)) == second.total_blocks
    session = Session()
    assert session.query(DailyPlan).filter(DailyPlan.user_id == user_id).count() == 1
    session.close()


def test_busy_weekday_plan_has_no_overlaps_and_stays_awake() -> None:
    Session = _session()
    user_id = uuid4()
    _seed(Session, User(id=user_id))
    _seed(
        Session,
        ScheduleProfile(user_id=user_id, wake_time=time(7, 0), sleep_time=time(23, 0)),
        NutritionProfile(user_id=user_id, eating_pattern="NORMAL", lunch_time=time(14, 0)),
        WeeklyScheduleEntry(
            user_id=user_id,
            day_of_week=MONDAY.weekday(),
            work_start_time=time(9, 0),
            work_end_time=time(17, 0),
            commute_minutes=30,
            midday_rest_minutes=60,
        ),
    )
    for minutes in (45, 90, 30, 120, 20, 60, 75):
        _seed_tasks(Session, user_id, 1, minutes=minutes)

    session = Session()
    summary = generate_daily_plan(session, user_id, MONDAY)
    session.close()

    items = _plan_items(Session, summary.plan_id)
    assert len(items) == summary.total_blocks
    for earlier, later in zip(items, items[1:]):
        assert earlier.end_time <= later.start_time
    assert all(_at(7) <= item.start_time < item.end_time <= _at(23) for item in items)
    task_minutes = sum(
        (item.end_time - item.start_time).total_seconds() / 60 for item in items if item.item_type == "TASK"
    )
    assert task_minutes == summary.used_minutes
    assert task_minutes <= 16 * 60 * 0.75
    labels = [item.label for item in items if item.item_type == "STRUCTURAL"]
    assert labels[:3] == ["Commute", "Work", "Commute"]
    assert summary.dropped_blocks == ["Breakfast", "Lunch", "Midday rest"]


def test_missing_profiles_fall_back_to_defaults() -> None:
    Session = _session()
    user_id = uuid4()
    _seed(Session, User(id=user_id))

    session = Session()
    summary = generate_daily_plan(session, user_id, MONDAY)
    session.close()

    assert summary.total_blocks == 3
    assert summary.used_minutes == 0
    assert summary.real_load_percent == 0
    assert set(summary.defaults_applied) == {"schedule_profile", "weekly_schedule", "nutrition_profile"}
    assert [item.label for item in _plan_items(Session, summary.plan_id)] == ["Breakfast", "Lunch", "Dinner"]


def test_unknown_user_is_rejected() -> None:
    Session = _session()
    session = Session()
    with pytest.raises(ValueError):
        generate_daily_plan(session, uuid4(), MONDAY)
    session.close()


class _DeferralFailingStore(SqlAlchemyPlanStore):
    def record_deferrals(self, deferrals):
        raise PlanStoreError("task table unavailable")


class _ItemWriteFailingStore(SqlAlchemyPlanStore):
    def replace_plan_items(self, plan, blocks):
        raise PlanStoreError("plan_items insert failed")


def test_failed_deferral_write_does_not_abort_run() -> None:
    Session = _session()
    user_id = _seed_user(Session)
    _seed(Session, DailyMode(user_id=user_id, date=MONDAY, mode="FULL_REST", auto_generated=False))
    task_ids = _seed_tasks(Session, user_id, 3)

    session = Session()
    summary = run_daily_planning(_DeferralFailingStore(session), user_id, MONDAY)
    session.close()

    assert summary.deferred_task_ids == [task_ids[2]]
    assert len(_plan_items(Session, summary.plan_id)) == summary.total_blocks
    assert _task(Session, task_ids[2]).deferred_count == 0


def test_failed_item_write_is_fatal() -> None:
    Session = _session()
    user_id = _seed_user(Session)
    _seed_tasks(Session, user_id, 1)

    session = Session()
    with pytest.raises(PlanningError) as excinfo:
        run_daily_planning(_ItemWriteFailingStore(session), user_id, MONDAY)
    session.close()

    assert excinfo.value.user_id == user_id
    assert excinfo.value.target_date == MONDAY
    assert "plan_items" in excinfo.value.message
