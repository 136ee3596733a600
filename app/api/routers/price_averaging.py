"""
app/api/routers/price_averaging.py

Average price run trigger and status endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from app.schemas.price_averaging import RunStatusResponse
from app.services.price_averaging_orchestrator import (
    FastAPIBackgroundTaskExecutor,
    PriceAveragingOrchestrator,
    RunInProgressError,
    get_price_averaging_orchestrator,
)

router = APIRouter(prefix="/price-averages", tags=["price-averages"])


@router.post(
    "/runs",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=RunStatusResponse,
)
def trigger_price_averaging(
    background_tasks: BackgroundTasks,
    orchestrator: PriceAveragingOrchestrator = Depends(get_price_averaging_orchestrator),
) -> RunStatusResponse:
    """
    Start a run in the background. Rejected with 409 while another run is in flight.
    """

    try:
        state = orchestrator.start(FastAPIBackgroundTaskExecutor(background_tasks))
    except RunInProgressError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    return RunStatusResponse.from_domain(state)


@router.get("/status", response_model=RunStatusResponse)
def get_price_averaging_status(
    orchestrator: PriceAveragingOrchestrator = Depends(get_price_averaging_orchestrator),
) -> RunStatusResponse:
    return RunStatusResponse.from_domain(orchestrator.snapshot())
