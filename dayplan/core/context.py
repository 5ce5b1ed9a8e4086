"""Context variables shared by logging and tracing."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date
from typing import Iterator
from uuid import UUID

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
planning_user_ctx_var: ContextVar[str | None] = ContextVar("planning_user", default=None)
planning_date_ctx_var: ContextVar[str | None] = ContextVar("planning_date", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_planning_user() -> str | None:
    return planning_user_ctx_var.get()


def get_planning_date() -> str | None:
    return planning_date_ctx_var.get()


@contextmanager
def planning_context(user_id: UUID, target_date: date) -> Iterator[None]:
    """Tag log records emitted during one planning run with its user and date."""
    user_token = planning_user_ctx_var.set(str(user_id))
    date_token = planning_date_ctx_var.set(target_date.isoformat())
    try:
        yield
    finally:
        planning_date_ctx_var.reset(date_token)
        planning_user_ctx_var.reset(user_token)
