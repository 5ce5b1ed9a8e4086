"""Exceptions raised by the planning engine and its storage collaborator."""
from __future__ import annotations

from datetime import date
from uuid import UUID


class PlanStoreError(RuntimeError):
    """A read or write against the record store failed."""


class PlanningError(RuntimeError):
    """A planning run aborted; nothing after the failure point was written."""

    def __init__(self, message: str, *, user_id: UUID, target_date: date):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.target_date = target_date


class PlanAlreadyRunning(RuntimeError):
    """Another run holds the lock for the same user and date."""
