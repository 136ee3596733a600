"""
app/connectors/catalog_client.py

Category tree client.
"""

from __future__ import annotations

import logging

from pydantic import TypeAdapter, ValidationError

from app.connectors.base import BaseUpstreamClient, UpstreamRequestError
from app.domain.price_averaging import Category
from app.schemas.upstream import CategoryPayload

logger = logging.getLogger(__name__)

_CATEGORY_LIST = TypeAdapter(list[CategoryPayload])


class CatalogUnavailableError(UpstreamRequestError):
    """
    Raised when the category tree cannot be fetched or decoded.
    """


class CatalogClient(BaseUpstreamClient):
    """
    Fetches the category tree from ``GET /categories``.
    """

    def fetch_categories(self) -> list[Category]:
        try:
            payload = self._request_json(method="GET", path="/categories")
        except UpstreamRequestError as exc:
            logger.error("Category fetch failed error=%s", exc)
            raise CatalogUnavailableError(
                "Failed to fetch categories",
                status_code=exc.status_code,
            ) from exc

        if payload is None:
            return []
        try:
            categories = _CATEGORY_LIST.validate_python(payload)
        except ValidationError as exc:
            logger.error("Category payload failed validation errors=%s", exc.error_count())
            raise CatalogUnavailableError("Failed to fetch categories: malformed response body.") from exc

        return [category.to_domain() for category in categories]
