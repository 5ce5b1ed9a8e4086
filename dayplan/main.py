"""Main FastAPI application for the day planner backend."""
from fastapi import FastAPI, Request

from dayplan.api.routes.daily_mode import router as daily_mode_router
from dayplan.api.routes.daily_plan import router as daily_plan_router
from dayplan.api.routes.jobs import router as jobs_router
from dayplan.core.config import settings
from dayplan.core.logging import configure_logging
from dayplan.core.middleware import RequestIDMiddleware
from dayplan.observability.client import get_opik_client
from dayplan.observability.tracing import trace
from dayplan.services.plan_locks import PlanLockRegistry

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.state.plan_locks = PlanLockRegistry()
app.add_middleware(RequestIDMiddleware)
app.include_router(daily_plan_router)
app.include_router(daily_mode_router)
app.include_router(jobs_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    get_opik_client()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
