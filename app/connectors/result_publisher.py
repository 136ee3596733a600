"""
app/connectors/result_publisher.py

Posts computed subcategory averages back to the marketplace.
"""

from __future__ import annotations

import logging

from app.connectors.base import BaseUpstreamClient, UpstreamRequestError
from app.schemas.upstream import AveragePriceRequestPayload

logger = logging.getLogger(__name__)


class PublishFailedError(UpstreamRequestError):
    """
    Raised when an average price could not be posted.
    """


class ResultPublisher(BaseUpstreamClient):
    def publish(self, subcategory_name: str, average_price: float) -> None:
        body = AveragePriceRequestPayload(
            category_name=subcategory_name,
            average_price=average_price,
        ).model_dump(by_alias=True)
        try:
            self._request(method="POST", path="/average-price", body=body)
        except UpstreamRequestError as exc:
            raise PublishFailedError(
                f"Failed to post average price for {subcategory_name}",
                status_code=exc.status_code,
            ) from exc
        logger.debug("Published average price subcategory=%s average=%s", subcategory_name, average_price)
