"""
app/domain package marker.
"""

from app.domain.price_averaging import (
    AggregationOutcome,
    AggregationReport,
    Category,
    ListingFetchResult,
    OutcomeStatus,
    PriceAggregate,
    RunState,
    Subcategory,
    TeacherCategoryPrice,
    TeacherListing,
)

__all__ = [
    "AggregationOutcome",
    "AggregationReport",
    "Category",
    "ListingFetchResult",
    "OutcomeStatus",
    "PriceAggregate",
    "RunState",
    "Subcategory",
    "TeacherCategoryPrice",
    "TeacherListing",
]
