"""
app/schemas package marker.
"""

from app.schemas.price_averaging import (
    AggregationOutcomeResponse,
    AggregationReportResponse,
    RunStatusResponse,
)
from app.schemas.upstream import (
    AveragePriceRequestPayload,
    CategoryPayload,
    SearchRequestPayload,
    SearchResponsePayload,
    SubcategoryPayload,
    TeacherCategoryPayload,
    TeacherPayload,
)

__all__ = [
    "AggregationOutcomeResponse",
    "AggregationReportResponse",
    "AveragePriceRequestPayload",
    "CategoryPayload",
    "RunStatusResponse",
    "SearchRequestPayload",
    "SearchResponsePayload",
    "SubcategoryPayload",
    "TeacherCategoryPayload",
    "TeacherPayload",
]
