"""Caller-side guard against overlapping runs for the same user and date."""
from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from threading import Lock
from typing import Iterator, Set, Tuple
from uuid import UUID

from dayplan.services.errors import PlanAlreadyRunning


class PlanLockRegistry:
    """Non-blocking per-(user, date) locks held for the duration of a planning run."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._held: Set[Tuple[UUID, date]] = set()

    @contextmanager
    def hold(self, user_id: UUID, target_date: date) -> Iterator[None]:
        key = (user_id, target_date)
        with self._guard:
            if key in self._held:
                raise PlanAlreadyRunning(f"Planning already running for {user_id} on {target_date}")
            self._held.add(key)
        try:
            yield
        finally:
            with self._guard:
                self._held.discard(key)

    def is_held(self, user_id: UUID, target_date: date) -> bool:
        with self._guard:
            return (user_id, target_date) in self._held
