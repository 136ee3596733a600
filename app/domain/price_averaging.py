"""
app/domain/price_averaging.py

Domain models for the subcategory average price pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Subcategory:
    """
    One leaf of the marketplace category tree.

    ``name`` is the join key against teacher listings; ``code`` is the
    query key sent to the search endpoint.
    """

    id: str
    name: str
    code: int | None = None


@dataclass(frozen=True)
class Category:
    """
    Top-level category with its ordered children.
    """

    id: str
    name: str
    subcategories: tuple[Subcategory, ...] = ()


@dataclass(frozen=True)
class TeacherCategoryPrice:
    """
    One (category name, hourly price) pair declared by a teacher.

    The price is kept exactly as received; validation happens during
    aggregation.
    """

    name: str
    price_per_hour: Any = None


@dataclass(frozen=True)
class TeacherListing:
    id: str
    categories: tuple[TeacherCategoryPrice, ...] = ()


@dataclass(frozen=True)
class ListingFetchResult:
    """
    All listings gathered for one category code.

    ``partial`` is set when a page request failed before the empty
    terminating page was seen.
    """

    category_code: int
    listings: tuple[TeacherListing, ...]
    pages_requested: int
    partial: bool = False
    error: str | None = None


@dataclass(frozen=True)
class PriceAggregate:
    average_price: float
    contributing_listings: int


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class AggregationOutcome:
    """
    Result for one subcategory in one run.
    """

    subcategory_name: str
    average_price: float
    status: OutcomeStatus
    message: str
    contributing_listings: int = 0
    partial: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


@dataclass(frozen=True)
class AggregationReport:
    """
    Ordered outcomes of one run, in flattened catalog order.
    """

    outcomes: tuple[AggregationOutcome, ...]
    started_at: datetime
    finished_at: datetime

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.outcomes) - self.success_count


@dataclass(frozen=True)
class RunState:
    """
    Observable orchestrator state for presentation consumers.
    """

    busy: bool
    last_report: AggregationReport | None = None
    last_error: str | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
