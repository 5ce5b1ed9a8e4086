"""Persist a generated block list as the day's plan."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Sequence
from uuid import UUID

from dayplan.services.structural_blocks import Block

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanWriteResult:
    plan_id: UUID
    mode: str
    total_blocks: int
    used_minutes: int
    real_load_percent: int


def real_load_percent(used_minutes: float, total_awake_minutes: float) -> int:
    """Share of the awake window spent on tasks, rounded half up."""
    if total_awake_minutes <= 0:
        return 0
    return int(math.floor(used_minutes / total_awake_minutes * 100 + 0.5))


def build_strategic_summary(mode: str, total_blocks: int, load_percent: int) -> str:
    return f"Mode: {mode}\nTotal blocks: {total_blocks}\nReal load: {load_percent}%"


def write_plan(
    store,
    *,
    user_id: UUID,
    target_date: date,
    mode: str,
    blocks: Sequence[Block],
    used_minutes: int,
    total_awake_minutes: float,
) -> PlanWriteResult:
    """
    Upsert the DailyPlan, replace all of its items, then store the summary.

    Store failures propagate as PlanStoreError.
    """
    ordered = sorted(blocks, key=lambda block: block.start)
    plan = store.upsert_daily_plan(user_id, target_date)
    written = store.replace_plan_items(plan, ordered)
    load_percent = real_load_percent(used_minutes, total_awake_minutes)
    store.update_plan_summary(plan, build_strategic_summary(mode, written, load_percent))
    logger.info("Plan %s for %s saved with %s blocks (%s%% load)", plan.id, target_date, written, load_percent)
    return PlanWriteResult(
        plan_id=plan.id,
        mode=mode,
        total_blocks=written,
        used_minutes=used_minutes,
        real_load_percent=load_percent,
    )
