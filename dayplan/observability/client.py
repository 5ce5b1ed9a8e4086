"""Opik SDK client helpers."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from opik import Opik

from dayplan.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_opik_client() -> Optional[Opik]:
    """Build the Opik client on first use; None when tracing is off or misconfigured."""
    if not settings.opik_enabled:
        return None

    if not settings.opik_api_key:
        logger.warning("OPIK_ENABLED is true but OPIK_API_KEY is missing; tracing disabled.")
        return None

    try:
        client = Opik(project_name=settings.opik_project, api_key=settings.opik_api_key)
    except Exception as exc:  # pragma: no cover - depends on remote service
        logger.warning("Failed to initialize Opik, tracing will be disabled: %s", exc)
        return None

    logger.info("Opik enabled (project=%s).", settings.opik_project)
    return client

