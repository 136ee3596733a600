"""
app/services/price_aggregator.py

Per-subcategory average hourly price calculation.

No I/O, no logging, and no side effects are permitted in this module.

Matching rules
--------------
- A listing contributes at most once: only its *first* category entry whose
  name equals the subcategory name (exact, case-sensitive) is considered.
- That entry's price must be a finite, non-negative real number; booleans
  and numeric strings do not count. A non-contributing first match does not
  fall through to a later entry with the same name.

Rounding
--------
Averages are rounded to the nearest cent with ties going up, applied to the
binary floating product ``value * 100``. This mirrors the marketplace's
client-side rounding, so ``0.125`` becomes ``0.13`` while ``1.005`` becomes
``1.0`` (``1.005 * 100 == 100.49999999999999``).
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from numbers import Real
from typing import Any

from app.domain.price_averaging import PriceAggregate, TeacherListing


def round_to_cents(value: float) -> float:
    """
    Round *value* to two decimal places, half-up on the scaled product.

    Values too large to scale by 100 have no cent fraction and are returned
    unchanged.
    """

    scaled = value * 100
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled + 0.5) / 100


def is_valid_price(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        as_float = float(value)
    except OverflowError:
        return False
    return math.isfinite(as_float) and as_float >= 0


def matching_price(listing: TeacherListing, subcategory_name: str) -> Any:
    """
    Return the raw price of the first entry named *subcategory_name*, or ``None``.
    """

    for entry in listing.categories:
        if entry.name == subcategory_name:
            return entry.price_per_hour
    return None


def _mean(prices: list[float]) -> float:
    if not prices:
        return 0.0
    count = len(prices)
    average = sum(prices) / count
    if math.isinf(average):
        # The running sum overflowed; scale each term first.
        average = sum(price / count for price in prices)
    return average


def aggregate(listings: Iterable[TeacherListing], subcategory_name: str) -> PriceAggregate:
    prices: list[float] = []
    for listing in listings:
        price = matching_price(listing, subcategory_name)
        if not is_valid_price(price):
            continue
        prices.append(float(price))

    return PriceAggregate(average_price=round_to_cents(_mean(prices)), contributing_listings=len(prices))
