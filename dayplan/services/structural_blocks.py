"""Fixed daily commitments (meals, work, commute, rest) laid out as blocks."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from dayplan.services.daily_mode import FULL_REST

logger = logging.getLogger(__name__)

STRUCTURAL = "STRUCTURAL"
TASK = "TASK"

EATING_NORMAL = "NORMAL"
EATING_RAMADAN = "RAMADAN"

DEFAULT_WAKE_TIME = time(8, 0)
DEFAULT_SLEEP_TIME = time(22, 0)
DEFAULT_LUNCH_TIME = time(14, 0)
DEFAULT_DINNER_TIME = time(21, 0)
SIESTA_ANCHOR = time(15, 30)

BREAKFAST_MINUTES = 20
LUNCH_MINUTES = 60
DINNER_MINUTES = 40
SUHOOR_MINUTES = 30
IFTAR_MINUTES = 60
BREAKFAST_AFTER_WAKE = timedelta(hours=2)

FULL_REST_BLOCKS: Tuple[Tuple[time, time, str], ...] = (
    (time(10, 0), time(10, 30), "Light movement"),
    (time(18, 0), time(18, 30), "Family contact"),
)


@dataclass(frozen=True)
class Block:
    start: datetime
    end: datetime
    kind: str
    task_id: Optional[UUID] = None
    label: Optional[str] = None

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


@dataclass(frozen=True)
class DayProfile:
    """
    Everything the builder needs for one date, with defaults already substituted.

    defaults_applied names each profile source that was absent so callers can
    report it; absence is never an error.
    """

    target_date: date
    wake: datetime
    sleep: datetime
    work_start: Optional[datetime] = None
    work_end: Optional[datetime] = None
    commute_minutes: int = 0
    midday_rest_minutes: int = 0
    eating_pattern: str = EATING_NORMAL
    lunch_time: Optional[time] = None
    dinner_time: Optional[time] = None
    suhoor_time: Optional[time] = None
    iftar_time: Optional[time] = None
    defaults_applied: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def awake_minutes(self) -> int:
        return int((self.sleep - self.wake).total_seconds() // 60)

    @property
    def has_work(self) -> bool:
        return bool(self.work_start and self.work_end and self.work_end > self.work_start)


def load_day_profile(store, user_id: UUID, target_date: date) -> DayProfile:
    """Read schedule, weekly and nutrition rows for a date and fill in defaults."""
    defaults: List[str] = []

    schedule = store.get_schedule_profile(user_id)
    if schedule is None:
        defaults.append("schedule_profile")
    wake_time = (schedule.wake_time if schedule else None) or DEFAULT_WAKE_TIME
    sleep_time = (schedule.sleep_time if schedule else None) or DEFAULT_SLEEP_TIME
    wake = datetime.combine(target_date, wake_time)
    sleep = datetime.combine(target_date, sleep_time)
    if sleep <= wake:
        sleep += timedelta(days=1)

    weekly = store.get_weekly_schedule(user_id, target_date.weekday())
    if weekly is None:
        defaults.append("weekly_schedule")
    work_start = work_end = None
    if weekly and weekly.work_start_time and weekly.work_end_time:
        work_start = datetime.combine(target_date, weekly.work_start_time)
        work_end = datetime.combine(target_date, weekly.work_end_time)
        if work_end < work_start:
            work_end += timedelta(days=1)

    nutrition = store.get_nutrition_profile(user_id)
    if nutrition is None:
        defaults.append("nutrition_profile")

    return DayProfile(
        target_date=target_date,
        wake=wake,
        sleep=sleep,
        work_start=work_start,
        work_end=work_end,
        commute_minutes=(weekly.commute_minutes or 0) if weekly else 0,
        midday_rest_minutes=(weekly.midday_rest_minutes or 0) if weekly else 0,
        eating_pattern=(nutrition.eating_pattern or EATING_NORMAL) if nutrition else EATING_NORMAL,
        lunch_time=nutrition.lunch_time if nutrition else None,
        dinner_time=nutrition.dinner_time if nutrition else None,
        suhoor_time=nutrition.suhoor_time if nutrition else None,
        iftar_time=nutrition.iftar_time if nutrition else None,
        defaults_applied=tuple(defaults),
    )


def build_structural_blocks(profile: DayProfile, mode: str) -> List[Block]:
    """
    Return the day's fixed blocks sorted by start time.

    Overlaps between blocks are left in place; see fit_to_window.
    """
    day = profile.target_date
    blocks: List[Block] = []

    if profile.has_work:
        commute = timedelta(minutes=profile.commute_minutes)
        if profile.commute_minutes > 0:
            blocks.append(_block(profile.work_start - commute, profile.work_start, "Commute"))
        blocks.append(_block(profile.work_start, profile.work_end, "Work"))
        if profile.commute_minutes > 0:
            blocks.append(_block(profile.work_end, profile.work_end + commute, "Commute"))

    pattern = (profile.eating_pattern or EATING_NORMAL).upper()
    if pattern == EATING_NORMAL:
        breakfast = timedelta(minutes=BREAKFAST_MINUTES)
        if profile.has_work:
            breakfast_end = profile.work_start
        else:
            breakfast_end = profile.wake + BREAKFAST_AFTER_WAKE
        blocks.append(_block(breakfast_end - breakfast, breakfast_end, "Breakfast"))
        blocks.append(_timed_block(day, profile.lunch_time or DEFAULT_LUNCH_TIME, LUNCH_MINUTES, "Lunch"))
        blocks.append(_timed_block(day, profile.dinner_time or DEFAULT_DINNER_TIME, DINNER_MINUTES, "Dinner"))
    elif pattern == EATING_RAMADAN:
        if profile.suhoor_time:
            blocks.append(_timed_block(day, profile.suhoor_time, SUHOOR_MINUTES, "Suhoor"))
        if profile.iftar_time:
            blocks.append(_timed_block(day, profile.iftar_time, IFTAR_MINUTES, "Iftar"))

    if profile.midday_rest_minutes > 0:
        blocks.append(_timed_block(day, SIESTA_ANCHOR, profile.midday_rest_minutes, "Midday rest"))

    if mode == FULL_REST:
        for start, end, label in FULL_REST_BLOCKS:
            blocks.append(_block(datetime.combine(day, start), datetime.combine(day, end), label))

    # sorted() is stable, so equal starts keep insertion order
    return sorted(blocks, key=lambda block: block.start)


def fit_to_window(
    blocks: List[Block],
    wake: datetime,
    sleep: datetime,
    dropped: Optional[List[Block]] = None,
) -> List[Block]:
    """
    Clip sorted blocks to [wake, sleep] and trim overlaps against earlier blocks.

    Blocks left without any duration are dropped and, when a `dropped` list
    is given, appended to it unchanged.
    """
    fitted: List[Block] = []
    frontier = wake
    for block in blocks:
        start = max(block.start, frontier)
        end = min(block.end, sleep)
        if end <= start:
            logger.info("Dropping structural block %s (%s-%s): no free time left", block.label, block.start, block.end)
            if dropped is not None:
                dropped.append(block)
            continue
        if start != block.start or end != block.end:
            logger.debug("Trimming structural block %s to %s-%s", block.label, start, end)
        fitted.append(Block(start=start, end=end, kind=block.kind, task_id=block.task_id, label=block.label))
        frontier = end
    return fitted


def _timed_block(day: date, start: time, minutes: int, label: str) -> Block:
    begin = datetime.combine(day, start)
    return _block(begin, begin + timedelta(minutes=minutes), label)


def _block(start: datetime, end: datetime, label: str) -> Block:
    return Block(start=start, end=end, kind=STRUCTURAL, label=label)
