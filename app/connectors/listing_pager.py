"""
app/connectors/listing_pager.py

Paginated teacher listing retrieval for one category code.
"""

from __future__ import annotations

import logging

import requests
from pydantic import ValidationError

from app.config import PriceAveragingSettings, UpstreamSettings
from app.connectors.base import BaseUpstreamClient, UpstreamRequestError
from app.domain.price_averaging import ListingFetchResult, TeacherListing
from app.schemas.upstream import SearchRequestPayload, SearchResponsePayload

logger = logging.getLogger(__name__)


class ListingPageError(UpstreamRequestError):
    """
    Raised when one search page cannot be fetched or decoded.
    """


class PaginationLimitExceededError(RuntimeError):
    """
    Raised when the search endpoint keeps returning non-empty pages past the page cap.
    """


class ListingPager(BaseUpstreamClient):
    """
    Walks ``POST /search`` pages for one category code until an empty page.

    A failed page stops the walk and returns what was gathered so far,
    flagged as partial.
    """

    def __init__(
        self,
        *,
        settings: UpstreamSettings,
        averaging_settings: PriceAveragingSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(settings=settings, session=session)
        self._page_size = averaging_settings.page_size
        self._max_pages = averaging_settings.max_pages

    def fetch_all_listings(self, category_code: int) -> ListingFetchResult:
        listings: list[TeacherListing] = []
        page = 0
        while page < self._max_pages:
            try:
                batch = self.fetch_page(category_code, page)
            except ListingPageError as exc:
                logger.warning(
                    "Listing pagination stopped early code=%s page=%s collected=%s error=%s",
                    category_code,
                    page,
                    len(listings),
                    exc,
                )
                return ListingFetchResult(
                    category_code=category_code,
                    listings=tuple(listings),
                    pages_requested=page + 1,
                    partial=True,
                    error=str(exc),
                )

            if not batch:
                return ListingFetchResult(
                    category_code=category_code,
                    listings=tuple(listings),
                    pages_requested=page + 1,
                )
            listings.extend(batch)
            page += 1

        raise PaginationLimitExceededError(
            f"Listing search for category {category_code} did not end after {self._max_pages} pages."
        )

    def fetch_page(self, category_code: int, page: int) -> list[TeacherListing]:
        """
        Fetch one page of listings. An empty list means the results are exhausted.
        """

        body = SearchRequestPayload(
            categories=[category_code],
            page=page,
            page_size=self._page_size,
        ).model_dump(by_alias=True)
        try:
            payload = self._request_json(method="POST", path="/search", body=body)
            parsed = SearchResponsePayload.model_validate(payload)
        except UpstreamRequestError as exc:
            raise ListingPageError(
                f"Failed to fetch teachers for category {category_code} on page {page}",
                status_code=exc.status_code,
            ) from exc
        except ValidationError as exc:
            raise ListingPageError(
                f"Malformed search response for category {category_code} on page {page}"
            ) from exc

        return [teacher.to_domain() for teacher in parsed.teachers or []]
