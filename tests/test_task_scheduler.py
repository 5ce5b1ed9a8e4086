from __future__ import annotations

from datetime import date, datetime, time, timezone
from uuid import uuid4

from dayplan.services.gap_finder import Gap
from dayplan.services.structural_blocks import TASK
from dayplan.services.task_scheduler import (
    BacklogTask,
    apply_deferral_penalty,
    prioritize,
    schedule_tasks,
)

DAY = date(2026, 10, 19)
NOW = datetime(2026, 10, 18, 21, 0, tzinfo=timezone.utc)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime.combine(DAY, time(hour, minute))


def _task(minutes=60, **kwargs) -> BacklogTask:
    values = {"id": uuid4(), "content": "task", "importance": 3, "urgency": 3, "estimated_minutes": minutes}
    values.update(kwargs)
    return BacklogTask(**values)


def _schedule(gaps, tasks, capacity, deferred=None):
    return schedule_tasks(
        gaps,
        tasks,
        capacity,
        on_defer=deferred.append if deferred is not None else None,
        clock=lambda: NOW,
    )


def test_tasks_are_packed_back_to_back() -> None:
    tasks = [_task() for _ in range(3)]

    outcome = _schedule([Gap(_at(8), _at(22))], tasks, 630)

    assert [(block.start, block.end) for block in outcome.blocks] == [
        (_at(8), _at(9)),
        (_at(9), _at(10)),
        (_at(10), _at(11)),
    ]
    assert all(block.kind == TASK for block in outcome.blocks)
    assert outcome.scheduled_task_ids == [task.id for task in tasks]
    assert outcome.used_minutes == 180
    assert outcome.deferrals == []


def test_missing_estimate_defaults_to_an_hour() -> None:
    outcome = _schedule([Gap(_at(8), _at(12))], [_task(minutes=None)], 600)

    assert outcome.blocks[0].end == _at(9)


def test_zero_or_negative_estimate_defaults_to_an_hour() -> None:
    tasks = [_task(minutes=-30), _task(minutes=0)]

    outcome = _schedule([Gap(_at(8), _at(12))], tasks, 600)

    assert [(block.start, block.end) for block in outcome.blocks] == [
        (_at(8), _at(9)),
        (_at(9), _at(10)),
    ]
    assert outcome.used_minutes == 120


def test_task_too_long_for_gap_closes_gap_without_skipping_ahead() -> None:
    long_task = _task(minutes=90)
    short_task = _task(minutes=15)
    gaps = [Gap(_at(8), _at(9)), Gap(_at(10), _at(12))]

    outcome = _schedule(gaps, [long_task, short_task], 600)

    assert [(block.task_id, block.start) for block in outcome.blocks] == [
        (long_task.id, _at(10)),
        (short_task.id, _at(11, 30)),
    ]


def test_capacity_overflow_defers_and_keeps_trying_in_same_gap() -> None:
    tasks = [_task() for _ in range(5)]
    deferred = []

    outcome = _schedule([Gap(_at(8), _at(10)), Gap(_at(10, 30), _at(18))], tasks, 168, deferred)

    assert outcome.scheduled_task_ids == [tasks[0].id, tasks[1].id]
    assert outcome.used_minutes == 120
    assert [d.task_id for d in deferred] == [task.id for task in tasks[2:]]
    assert deferred == outcome.deferrals
    assert all(d.deferred_count == 1 and d.deferred_at == NOW for d in deferred)


def test_smaller_task_after_deferral_still_fits_capacity() -> None:
    big = _task(minutes=120)
    small = _task(minutes=30)

    outcome = _schedule([Gap(_at(8), _at(18))], [big, small], 60)

    assert [d.task_id for d in outcome.deferrals] == [big.id]
    assert outcome.scheduled_task_ids == [small.id]
    assert outcome.blocks[0].start == _at(8)


def test_zero_capacity_places_no_tasks() -> None:
    tasks = [_task(), _task()]

    outcome = _schedule([Gap(_at(8), _at(22))], tasks, 0)

    assert outcome.blocks == []
    assert len(outcome.deferrals) == 2


def test_tasks_beyond_last_gap_are_untouched() -> None:
    tasks = [_task(), _task(), _task()]

    outcome = _schedule([Gap(_at(8), _at(9))], tasks, 600)

    assert outcome.scheduled_task_ids == [tasks[0].id]
    assert outcome.deferrals == []


def test_capacity_is_never_exceeded() -> None:
    durations = [45, 90, 30, 120, 15, 60, 75, 20, 50]
    tasks = [_task(minutes=minutes) for minutes in durations]

    outcome = _schedule([Gap(_at(8), _at(12)), Gap(_at(13), _at(22))], tasks, 200)

    assert sum(block.minutes for block in outcome.blocks) == outcome.used_minutes
    assert outcome.used_minutes <= 200


def test_penalty_thresholds() -> None:
    third = apply_deferral_penalty(_task(deferred_count=2, importance=3, urgency=3), NOW)
    assert (third.deferred_count, third.importance, third.urgency, third.forced_priority) == (3, 4, 3, False)

    fifth = apply_deferral_penalty(_task(deferred_count=4, importance=4, urgency=2), NOW)
    assert (fifth.importance, fifth.urgency, fifth.forced_priority) == (5, 3, False)

    seventh = apply_deferral_penalty(_task(deferred_count=6, importance=5, urgency=5), NOW)
    assert (seventh.deferred_count, seventh.importance, seventh.urgency, seventh.forced_priority) == (7, 5, 5, True)

    first = apply_deferral_penalty(_task(deferred_count=0, importance=2, urgency=2), NOW)
    assert (first.deferred_count, first.importance, first.urgency, first.forced_priority) == (1, 2, 2, False)


def test_prioritize_orders_forced_then_importance_then_urgency() -> None:
    plain = _task(importance=5, urgency=5, content="plain")
    forced = _task(importance=1, urgency=1, forced_priority=True, content="forced")
    mid_a = _task(importance=3, urgency=4, content="mid_a")
    mid_b = _task(importance=3, urgency=4, content="mid_b")
    low = _task(importance=3, urgency=1, content="low")

    ordered = prioritize([low, mid_a, plain, mid_b, forced])

    assert [task.content for task in ordered] == ["forced", "plain", "mid_a", "mid_b", "low"]
