"""
app/schemas/price_averaging.py

Response schemas for average price runs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.domain.price_averaging import AggregationOutcome, AggregationReport, RunState


class AggregationOutcomeResponse(BaseModel):
    """
    API response model for one subcategory outcome.
    """

    subcategory_name: str
    average_price: float = Field(..., ge=0)
    status: Literal["success", "failure"]
    message: str
    contributing_listings: int = Field(..., ge=0)
    partial: bool = False

    @classmethod
    def from_domain(cls, outcome: AggregationOutcome) -> "AggregationOutcomeResponse":
        return cls(
            subcategory_name=outcome.subcategory_name,
            average_price=outcome.average_price,
            status=outcome.status.value,
            message=outcome.message,
            contributing_listings=outcome.contributing_listings,
            partial=outcome.partial,
        )


class AggregationReportResponse(BaseModel):
    started_at: datetime
    finished_at: datetime
    success_count: int = Field(..., ge=0)
    failure_count: int = Field(..., ge=0)
    outcomes: list[AggregationOutcomeResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, report: AggregationReport) -> "AggregationReportResponse":
        return cls(
            started_at=report.started_at,
            finished_at=report.finished_at,
            success_count=report.success_count,
            failure_count=report.failure_count,
            outcomes=[AggregationOutcomeResponse.from_domain(item) for item in report.outcomes],
        )


class RunStatusResponse(BaseModel):
    """
    Observable pipeline state: busy flag, last report and last top-level error.
    """

    busy: bool
    last_error: str | None = None
    report: AggregationReportResponse | None = None
    updated_at: datetime

    @classmethod
    def from_domain(cls, state: RunState) -> "RunStatusResponse":
        report = None
        if state.last_report is not None:
            report = AggregationReportResponse.from_domain(state.last_report)
        return cls(
            busy=state.busy,
            last_error=state.last_error,
            report=report,
            updated_at=state.updated_at,
        )
