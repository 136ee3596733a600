"""
app/connectors package marker.
"""

from app.connectors.base import BaseUpstreamClient, UpstreamRequestError
from app.connectors.catalog_client import CatalogClient, CatalogUnavailableError
from app.connectors.listing_pager import (
    ListingPageError,
    ListingPager,
    PaginationLimitExceededError,
)
from app.connectors.result_publisher import PublishFailedError, ResultPublisher

__all__ = [
    "BaseUpstreamClient",
    "CatalogClient",
    "CatalogUnavailableError",
    "ListingPageError",
    "ListingPager",
    "PaginationLimitExceededError",
    "PublishFailedError",
    "ResultPublisher",
    "UpstreamRequestError",
]
