"""
app/connectors/base.py

Base client for the teaching marketplace API and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import UpstreamSettings

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class UpstreamRequestError(RuntimeError):
    """
    Raised when a marketplace API call does not succeed.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BaseUpstreamClient:
    """
    Shared request handling for marketplace API clients.

    Every call is a single attempt: non-2xx responses, transport errors
    and undecodable bodies all surface as :class:`UpstreamRequestError`.
    """

    def __init__(
        self,
        *,
        settings: UpstreamSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = settings.base_url.rstrip("/")
        self._accept_language = settings.accept_language
        self._timeout_seconds = settings.timeout_seconds
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _headers(self, *, with_body: bool) -> dict[str, str]:
        headers = {"Accept-Language": self._accept_language}
        if with_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers

    def _request_json(
        self,
        *,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Execute an HTTP request and return parsed JSON.
        """

        response = self._request(method=method, path=path, body=body)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamRequestError(
                f"{method} {path}: response was not valid JSON.",
                status_code=response.status_code,
            ) from exc

    def _request(
        self,
        *,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> requests.Response:
        url = self._url(path)
        try:
            response = self._session.request(
                method=method,
                url=url,
                json=body,
                headers=self._headers(with_body=body is not None),
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.debug("Upstream request rejected method=%s url=%s status=%s", method, url, status_code)
            raise UpstreamRequestError(
                f"{method} {path}: upstream returned HTTP {status_code}.",
                status_code=status_code,
            ) from exc
        except requests.RequestException as exc:
            logger.debug("Upstream transport failure method=%s url=%s error=%s", method, url, exc)
            raise UpstreamRequestError(f"{method} {path}: {exc}") from exc
        return response
