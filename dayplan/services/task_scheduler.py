"""Greedy packing of the prioritized backlog into free gaps."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Sequence
from uuid import UUID

from dayplan.services.gap_finder import Gap
from dayplan.services.structural_blocks import TASK, Block

logger = logging.getLogger(__name__)

DEFAULT_TASK_MINUTES = 60
MAX_LEVEL = 5
IMPORTANCE_BUMP_AT = 3
URGENCY_BUMP_AT = 5
FORCE_PRIORITY_AT = 7


@dataclass
class BacklogTask:
    id: UUID
    content: str = ""
    importance: int = 1
    urgency: int = 1
    estimated_minutes: Optional[int] = None
    deferred_count: int = 0
    forced_priority: bool = False

    @classmethod
    def from_row(cls, row) -> "BacklogTask":
        return cls(
            id=row.id,
            content=row.content or "",
            importance=row.importance or 1,
            urgency=row.urgency or 1,
            estimated_minutes=row.estimated_minutes,
            deferred_count=row.deferred_count or 0,
            forced_priority=bool(row.forced_priority),
        )

    @property
    def duration_minutes(self) -> int:
        if self.estimated_minutes is None or self.estimated_minutes <= 0:
            return DEFAULT_TASK_MINUTES
        return self.estimated_minutes


@dataclass(frozen=True)
class TaskDeferral:
    task_id: UUID
    deferred_count: int
    importance: int
    urgency: int
    forced_priority: bool
    deferred_at: datetime


@dataclass
class ScheduleOutcome:
    blocks: List[Block] = field(default_factory=list)
    used_minutes: int = 0
    deferrals: List[TaskDeferral] = field(default_factory=list)

    @property
    def scheduled_task_ids(self) -> List[UUID]:
        return [block.task_id for block in self.blocks]


def prioritize(tasks: Iterable[BacklogTask]) -> List[BacklogTask]:
    """Forced first, then importance, then urgency; ties keep backlog order."""
    return sorted(tasks, key=lambda task: (not task.forced_priority, -task.importance, -task.urgency))


def apply_deferral_penalty(task: BacklogTask, deferred_at: datetime) -> TaskDeferral:
    deferred_count = task.deferred_count + 1
    importance = task.importance
    urgency = task.urgency
    forced = task.forced_priority
    if deferred_count >= IMPORTANCE_BUMP_AT and importance < MAX_LEVEL:
        importance += 1
    if deferred_count >= URGENCY_BUMP_AT and urgency < MAX_LEVEL:
        urgency += 1
    if deferred_count >= FORCE_PRIORITY_AT:
        forced = True
    return TaskDeferral(
        task_id=task.id,
        deferred_count=deferred_count,
        importance=importance,
        urgency=urgency,
        forced_priority=forced,
        deferred_at=deferred_at,
    )


def schedule_tasks(
    gaps: Sequence[Gap],
    tasks: Sequence[BacklogTask],
    capacity_minutes: float,
    *,
    on_defer: Optional[Callable[[TaskDeferral], None]] = None,
    clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
) -> ScheduleOutcome:
    """
    Pack tasks into gaps in order without ever revisiting an earlier task.

    A task that does not fit the rest of the current gap closes that gap.
    A task that fits but would exceed capacity is deferred and skipped;
    on_defer is called right away so the penalty can be persisted.
    """
    outcome = ScheduleOutcome()
    cursor = 0
    for gap in gaps:
        pointer = gap.start
        while cursor < len(tasks) and pointer < gap.end:
            task = tasks[cursor]
            duration = task.duration_minutes
            end = pointer + timedelta(minutes=duration)
            if end > gap.end:
                break

            if outcome.used_minutes + duration > capacity_minutes:
                deferral = apply_deferral_penalty(task, clock())
                outcome.deferrals.append(deferral)
                logger.info(
                    "Deferred task %s (deferred_count=%s, forced=%s)",
                    task.id,
                    deferral.deferred_count,
                    deferral.forced_priority,
                )
                if on_defer is not None:
                    on_defer(deferral)
                cursor += 1
                continue

            outcome.blocks.append(Block(start=pointer, end=end, kind=TASK, task_id=task.id, label=task.content or None))
            pointer = end
            outcome.used_minutes += duration
            cursor += 1
        if cursor >= len(tasks):
            break
    return outcome
