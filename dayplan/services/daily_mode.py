"""Daily mode resolution and the load factor it implies."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

logger = logging.getLogger(__name__)

FULL_REST = "FULL_REST"
LIGHT_PROGRESS = "LIGHT_PROGRESS"
STRATEGIC = "STRATEGIC"
HIGH_PERFORMANCE = "HIGH_PERFORMANCE"
RECOVERY = "RECOVERY"

DAILY_MODES = (FULL_REST, LIGHT_PROGRESS, STRATEGIC, HIGH_PERFORMANCE, RECOVERY)

LOAD_FACTORS = {
    FULL_REST: 0.2,
    LIGHT_PROGRESS: 0.5,
    STRATEGIC: 0.75,
    HIGH_PERFORMANCE: 0.9,
    RECOVERY: 0.3,
}
DEFAULT_LOAD_FACTOR = 0.75

# Short awake windows get a reduced share of time for tasks.
FATIGUE_THRESHOLD_MINUTES = 6 * 60
FATIGUE_MULTIPLIER = 0.7


@dataclass(frozen=True)
class ModeResolution:
    mode: str
    auto_generated: bool
    created: bool


def default_mode_for(target_date: date) -> str:
    """Weekends default to light progress, weekdays to strategic work."""
    return LIGHT_PROGRESS if target_date.weekday() >= 5 else STRATEGIC


def load_factor_for(mode: str, awake_minutes: float) -> float:
    factor = LOAD_FACTORS.get(mode, DEFAULT_LOAD_FACTOR)
    if awake_minutes < FATIGUE_THRESHOLD_MINUTES:
        factor *= FATIGUE_MULTIPLIER
    return factor


def resolve_daily_mode(store, user_id: UUID, target_date: date) -> ModeResolution:
    """
    Return the stored mode for the date, creating the weekday/weekend default if absent.

    An existing row is never overwritten. Store failures propagate as PlanStoreError.
    """
    existing = store.get_daily_mode(user_id, target_date)
    if existing is not None:
        return ModeResolution(mode=existing.mode, auto_generated=bool(existing.auto_generated), created=False)

    mode = default_mode_for(target_date)
    row = store.create_daily_mode(user_id, target_date, mode, auto_generated=True)
    logger.info("Daily mode for %s defaulted to %s", target_date, row.mode)
    return ModeResolution(mode=row.mode, auto_generated=bool(row.auto_generated), created=True)


def validate_mode(mode: str) -> str:
    normalized = (mode or "").strip().upper()
    if normalized not in DAILY_MODES:
        raise ValueError(f"Unknown daily mode: {mode!r}")
    return normalized
