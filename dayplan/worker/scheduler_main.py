"""Dedicated APScheduler worker process for the nightly planning run."""
from __future__ import annotations

import logging
import signal
import threading
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler

from dayplan.core.config import settings
from dayplan.core.logging import configure_logging
from dayplan.db.session import SessionLocal
from dayplan.services.job_runner import run_daily_plans_for_all_users
from dayplan.services.plan_locks import PlanLockRegistry


logger = logging.getLogger(__name__)

_locks = PlanLockRegistry()


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        _register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running daily planning once on startup")
            _run_daily_plan_job()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def target_date_for_run(now: datetime | None = None) -> date:
    """The date the nightly run plans: local today plus the configured offset."""
    current = now or datetime.now(ZoneInfo(settings.scheduler_timezone))
    return current.date() + timedelta(days=settings.plan_target_offset_days)


def _register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        _run_daily_plan_job,
        trigger="cron",
        hour=settings.daily_job_hour,
        minute=settings.daily_job_minute,
        id="daily_plan_job",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(
        "Registered daily plan job (time=%02d:%02d %s, offset=%s day(s))",
        settings.daily_job_hour,
        settings.daily_job_minute,
        settings.scheduler_timezone,
        settings.plan_target_offset_days,
    )


def _run_daily_plan_job() -> None:
    target_date = target_date_for_run()
    session = SessionLocal()
    try:
        result = run_daily_plans_for_all_users(session, target_date, locks=_locks)
        logger.info(
            "Daily plan job for %s complete: users=%s, plans=%s, failures=%s",
            target_date,
            result.users_processed,
            result.plans_written,
            result.failures,
        )
    except Exception:  # pragma: no cover - keep the worker alive
        logger.exception("Daily plan job failed")
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
