"""
app/services/price_averaging_orchestrator.py

Average price pipeline orchestrator.

Wires CatalogClient → ListingPager → price aggregation → ResultPublisher
for every subcategory in the catalog:

    CatalogClient      – one category tree snapshot per run
    ListingPager       – all teacher listings for one subcategory code
    price_aggregator   – rounded average over the matching listings
    ResultPublisher    – posts the average back upstream

Failure contract
----------------
- Catalog fetch failure           → CatalogUnavailableError, run aborted
- Empty catalog / no subcategories → NothingToProcessError subclass, run aborted
- Anything raised inside one subcategory pipeline (publish failure, page cap,
  unexpected errors) becomes a failure outcome for that subcategory only.

Fatal errors are stored as the observable last error and re-raised to
synchronous callers. No per-subcategory work starts after a fatal error.

Concurrency
-----------
Subcategory pipelines run on a bounded thread pool. Every pipeline is
awaited before the report is built, and outcomes are collected from the
futures in submission order, so the report follows the flattened catalog
order regardless of completion order.

At most one run is in flight per orchestrator; a second trigger while busy
raises :class:`RunInProgressError`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Protocol

import requests
from requests.adapters import HTTPAdapter
from fastapi import BackgroundTasks

from app.config import get_price_averaging_settings, get_upstream_settings
from app.connectors import (
    CatalogClient,
    CatalogUnavailableError,
    ListingPager,
    PaginationLimitExceededError,
    ResultPublisher,
    UpstreamRequestError,
)
from app.domain.price_averaging import (
    AggregationOutcome,
    AggregationReport,
    OutcomeStatus,
    RunState,
    Subcategory,
    TeacherListing,
)
from app.logging_utils import log_event
from app.services.price_aggregator import aggregate

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
UNEXPECTED_RUN_ERROR_MESSAGE = "An unexpected error occurred."
PARTIAL_LISTINGS_NOTE = "Listing set is partial: a search page request failed."


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PriceAveragingError(RuntimeError):
    """
    Base class for orchestration-level errors.
    """


class NothingToProcessError(PriceAveragingError):
    """
    Raised when the catalog snapshot yields nothing to aggregate.
    """


class NoCategoriesError(NothingToProcessError):
    pass


class NoSubcategoriesError(NothingToProcessError):
    pass


class RunInProgressError(PriceAveragingError):
    """
    Raised when a run is triggered while another one is still in flight.
    """


FATAL_ERRORS: tuple[type[Exception], ...] = (CatalogUnavailableError, NothingToProcessError)


# ---------------------------------------------------------------------------
# Background execution
# ---------------------------------------------------------------------------


class RunExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class FastAPIBackgroundTaskExecutor:
    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._background_tasks = background_tasks

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self._background_tasks.add_task(task, *args, **kwargs)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _format_price(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text or "0"


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class PriceAveragingOrchestrator:
    """
    Coordinates one fetch → aggregate → publish pipeline per subcategory.

    Observable state (busy flag, last report, last error) is exposed via
    :meth:`snapshot` for the API and CLI layers.
    """

    def __init__(
        self,
        *,
        catalog_client: CatalogClient,
        listing_pager: ListingPager,
        publisher: ResultPublisher,
        max_concurrent_pipelines: int,
    ) -> None:
        self._catalog_client = catalog_client
        self._listing_pager = listing_pager
        self._publisher = publisher
        self._max_concurrent_pipelines = max(1, max_concurrent_pipelines)

        self._state_lock = threading.Lock()
        self._busy = False
        self._last_report: AggregationReport | None = None
        self._last_error: str | None = None
        self._updated_at = _utcnow()

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        with self._state_lock:
            return self._busy

    def snapshot(self) -> RunState:
        with self._state_lock:
            return RunState(
                busy=self._busy,
                last_report=self._last_report,
                last_error=self._last_error,
                updated_at=self._updated_at,
            )

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def run(self) -> AggregationReport:
        """
        Execute one full run and return its report.

        Raises :class:`RunInProgressError` when a run is already in flight,
        and re-raises fatal errors after recording them.
        """

        self._begin()
        return self._execute()

    def start(self, executor: RunExecutor) -> RunState:
        """
        Mark the orchestrator busy and hand the run to *executor*.
        """

        self._begin()
        try:
            executor.submit(self._execute_in_background)
        except Exception:
            self._finish(error="The run could not be scheduled.")
            raise
        return self.snapshot()

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _begin(self) -> None:
        with self._state_lock:
            if self._busy:
                raise RunInProgressError("A price averaging run is already in progress.")
            self._busy = True
            self._last_report = None
            self._last_error = None
            self._updated_at = _utcnow()

    def _finish(
        self,
        *,
        report: AggregationReport | None = None,
        error: str | None = None,
    ) -> None:
        with self._state_lock:
            self._busy = False
            self._last_report = report
            self._last_error = error
            self._updated_at = _utcnow()

    # ------------------------------------------------------------------
    # Run body
    # ------------------------------------------------------------------

    def _execute(self) -> AggregationReport:
        started_at = _utcnow()
        try:
            subcategories = self._load_subcategories()
            log_event(
                logger,
                logging.INFO,
                "price_averaging_run_started",
                subcategories=len(subcategories),
                max_concurrency=self._max_concurrent_pipelines,
            )
            outcomes = self._process_all(subcategories)
        except FATAL_ERRORS as exc:
            log_event(
                logger,
                logging.ERROR,
                "price_averaging_run_aborted",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            self._finish(error=str(exc))
            raise
        except Exception:
            logger.exception("Price averaging run failed unexpectedly")
            self._finish(error=UNEXPECTED_RUN_ERROR_MESSAGE)
            raise

        report = AggregationReport(
            outcomes=outcomes,
            started_at=started_at,
            finished_at=_utcnow(),
        )
        self._finish(report=report)
        log_event(
            logger,
            logging.INFO,
            "price_averaging_run_completed",
            subcategories=len(outcomes),
            succeeded=report.success_count,
            failed=report.failure_count,
        )
        return report

    def _execute_in_background(self) -> None:
        try:
            self._execute()
        except FATAL_ERRORS:
            # Recorded as the observable last error by _execute.
            return

    def _load_subcategories(self) -> list[Subcategory]:
        categories = self._catalog_client.fetch_categories()
        if not categories:
            raise NoCategoriesError("No categories found.")

        subcategories = [sub for category in categories for sub in category.subcategories]
        if not subcategories:
            raise NoSubcategoriesError("No subcategories found to process.")
        return subcategories

    def _process_all(self, subcategories: Sequence[Subcategory]) -> tuple[AggregationOutcome, ...]:
        workers = min(self._max_concurrent_pipelines, len(subcategories))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="price-avg") as pool:
            futures = [pool.submit(self._process_subcategory, sub) for sub in subcategories]
            wait(futures)
        return tuple(future.result() for future in futures)

    def _process_subcategory(self, subcategory: Subcategory) -> AggregationOutcome:
        try:
            return self._run_pipeline(subcategory)
        except (UpstreamRequestError, PaginationLimitExceededError) as exc:
            logger.warning("Subcategory pipeline failed subcategory=%s error=%s", subcategory.name, exc)
            return self._failure(subcategory, exc)
        except Exception as exc:
            logger.exception("Error processing subcategory %s", subcategory.name)
            return self._failure(subcategory, exc)

    def _run_pipeline(self, subcategory: Subcategory) -> AggregationOutcome:
        listings: Sequence[TeacherListing] = ()
        partial = False
        if subcategory.code is not None:
            fetched = self._listing_pager.fetch_all_listings(subcategory.code)
            listings = fetched.listings
            partial = fetched.partial

        result = aggregate(listings, subcategory.name)
        self._publisher.publish(subcategory.name, result.average_price)

        message = (
            f"Successfully posted average price of {_format_price(result.average_price)} "
            f"for {result.contributing_listings} teachers."
        )
        if partial:
            message = f"{message} {PARTIAL_LISTINGS_NOTE}"
        log_event(
            logger,
            logging.DEBUG,
            "subcategory_average_published",
            subcategory=subcategory.name,
            average_price=result.average_price,
            contributing_listings=result.contributing_listings,
            partial=partial,
        )
        return AggregationOutcome(
            subcategory_name=subcategory.name,
            average_price=result.average_price,
            status=OutcomeStatus.SUCCESS,
            message=message,
            contributing_listings=result.contributing_listings,
            partial=partial,
        )

    @staticmethod
    def _failure(subcategory: Subcategory, exc: Exception) -> AggregationOutcome:
        return AggregationOutcome(
            subcategory_name=subcategory.name,
            average_price=0.0,
            status=OutcomeStatus.FAILURE,
            message=str(exc) or UNKNOWN_ERROR_MESSAGE,
        )


def build_session(pool_size: int) -> requests.Session:
    """
    Create a session whose connection pool can serve *pool_size* concurrent pipelines.
    """

    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


@lru_cache(maxsize=1)
def get_price_averaging_orchestrator() -> PriceAveragingOrchestrator:
    """
    Build and cache the orchestrator with one shared HTTP session.
    """

    upstream_settings = get_upstream_settings()
    averaging_settings = get_price_averaging_settings()
    session = build_session(averaging_settings.max_concurrent_pipelines)
    return PriceAveragingOrchestrator(
        catalog_client=CatalogClient(settings=upstream_settings, session=session),
        listing_pager=ListingPager(
            settings=upstream_settings,
            averaging_settings=averaging_settings,
            session=session,
        ),
        publisher=ResultPublisher(settings=upstream_settings, session=session),
        max_concurrent_pipelines=averaging_settings.max_concurrent_pipelines,
    )
