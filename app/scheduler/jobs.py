"""
app/scheduler/jobs.py

APScheduler-based periodic recomputation of subcategory average prices.

Schedule
--------
  price_averaging: every ``PRICE_AVERAGING_SCHEDULE_MINUTES`` minutes when
                    ``PRICE_AVERAGING_SCHEDULE_ENABLED`` is true.

A tick that fires while a run (scheduled or manually triggered) is still in
flight is skipped; it is not queued.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import SchedulerSettings, get_scheduler_settings
from app.services.price_averaging_orchestrator import (
    FATAL_ERRORS,
    PriceAveragingOrchestrator,
    RunInProgressError,
    get_price_averaging_orchestrator,
)

logger = logging.getLogger(__name__)

PRICE_AVERAGING_JOB_ID = "price_averaging"


def run_price_averaging(orchestrator: PriceAveragingOrchestrator | None = None) -> None:
    """
    Run one recomputation for the scheduler, skipping when a run is in flight.
    """
    orchestrator = orchestrator or get_price_averaging_orchestrator()
    logger.info("Scheduler: price_averaging starting")
    try:
        report = orchestrator.run()
    except RunInProgressError:
        logger.info("Scheduler: price_averaging skipped, a run is already in progress")
        return
    except FATAL_ERRORS as exc:
        logger.warning("Scheduler: price_averaging aborted: %s", exc)
        return

    logger.info(
        "Scheduler: price_averaging complete succeeded=%s failed=%s",
        report.success_count,
        report.failure_count,
    )


def build_scheduler(settings: SchedulerSettings | None = None) -> BackgroundScheduler:
    """
    Build the scheduler and register the recomputation job when enabled.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """
    settings = settings or get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if not settings.enabled:
        logger.info("Scheduler: price_averaging disabled")
        return scheduler

    scheduler.add_job(
        run_price_averaging,
        trigger="interval",
        minutes=settings.interval_minutes,
        id=PRICE_AVERAGING_JOB_ID,
        name="Subcategory average price recomputation",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=600,
    )
    return scheduler
