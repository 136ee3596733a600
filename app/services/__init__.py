"""
app/services package marker.
"""

from app.services.price_aggregator import aggregate, round_to_cents
from app.services.price_averaging_orchestrator import (
    FastAPIBackgroundTaskExecutor,
    NoCategoriesError,
    NoSubcategoriesError,
    NothingToProcessError,
    PriceAveragingError,
    PriceAveragingOrchestrator,
    RunInProgressError,
    get_price_averaging_orchestrator,
)

__all__ = [
    "aggregate",
    "round_to_cents",
    "FastAPIBackgroundTaskExecutor",
    "NoCategoriesError",
    "NoSubcategoriesError",
    "NothingToProcessError",
    "PriceAveragingError",
    "PriceAveragingOrchestrator",
    "RunInProgressError",
    "get_price_averaging_orchestrator",
]
