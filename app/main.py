from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from urllib.parse import urlparse

from fastapi import FastAPI

_POSITIVE_INT_SETTINGS = (
    "PRICE_AVERAGING_PAGE_SIZE",
    "PRICE_AVERAGING_MAX_PAGES",
    "PRICE_AVERAGING_MAX_CONCURRENCY",
    "PRICE_AVERAGING_SCHEDULE_MINUTES",
)


def _validate_env() -> None:
    """
    Validate pipeline environment variables at startup.

    Raises RuntimeError listing every invalid variable so the operator can
    fix all problems in one restart cycle.

    Rules:
    - UPSTREAM_BASE_URL, when set, must be an absolute http(s) URL.
    - Numeric pipeline settings, when set, must parse as positive numbers.
    """

    from app.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Upstream base URL ----------------------------------------------
    base_url = os.getenv("UPSTREAM_BASE_URL")
    if base_url is not None:
        parsed = urlparse(base_url.strip())
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            errors.append(
                f"UPSTREAM_BASE_URL='{base_url}' is not valid. "
                "It must be an absolute http(s) URL."
            )

    # --- Numeric settings -----------------------------------------------
    for name in _POSITIVE_INT_SETTINGS:
        raw = os.getenv(name)
        if raw is None:
            continue
        try:
            valid = int(raw) > 0
        except ValueError:
            valid = False
        if not valid:
            errors.append(f"{name}='{raw}' is not valid. It must be a positive integer.")

    raw_timeout = os.getenv("UPSTREAM_HTTP_TIMEOUT_SECONDS")
    if raw_timeout is not None:
        try:
            valid_timeout = float(raw_timeout) > 0
        except ValueError:
            valid_timeout = False
        if not valid_timeout:
            errors.append(
                f"UPSTREAM_HTTP_TIMEOUT_SECONDS='{raw_timeout}' is not valid. "
                "It must be a positive number."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed, invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Start the recomputation scheduler on boot; shut it down on exit."""
    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logging.getLogger(__name__).info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logging.getLogger(__name__).info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Teacher Price Averaging API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import price_averaging_router

    application.include_router(price_averaging_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
