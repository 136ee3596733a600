"""
tests/conftest.py

Shared fixtures: upstream settings and a recording fake ``requests`` session.

The fake session returns real ``requests.Response`` objects so status
handling and JSON decoding go through the same code paths as production.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pytest
import requests

from app.config import PriceAveragingSettings, UpstreamSettings

BASE_URL = "https://upstream.test/users/v1/open"


@dataclass(frozen=True)
class RecordedCall:
    method: str
    url: str
    json: Any
    headers: dict[str, str]
    timeout: float | None


def build_response(status_code: int = 200, payload: Any = None, *, body: bytes | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = BASE_URL
    response.encoding = "utf-8"
    response._content = body if body is not None else json.dumps(payload).encode("utf-8")
    return response


class FakeSession:
    """
    Stand-in for ``requests.Session`` that routes every request to *handler*.

    ``handler(method, url, body)`` returns a response or raises a
    ``requests`` exception.
    """

    def __init__(self, handler: Callable[[str, str, Any], requests.Response]) -> None:
        self._handler = handler
        self._lock = threading.Lock()
        self.calls: list[RecordedCall] = []

    def request(
        self,
        *,
        method: str,
        url: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        **_: Any,
    ) -> requests.Response:
        with self._lock:
            self.calls.append(
                RecordedCall(method=method, url=url, json=json, headers=dict(headers or {}), timeout=timeout)
            )
        return self._handler(method, url, json)


@pytest.fixture()
def upstream_settings() -> UpstreamSettings:
    return UpstreamSettings(base_url=BASE_URL, accept_language="en", timeout_seconds=5.0)


@pytest.fixture()
def averaging_settings() -> PriceAveragingSettings:
    return PriceAveragingSettings(page_size=10, max_pages=50, max_concurrent_pipelines=4)


@pytest.fixture()
def response_factory() -> Callable[..., requests.Response]:
    return build_response


@pytest.fixture()
def session_factory() -> Callable[[Callable[[str, str, Any], requests.Response]], FakeSession]:
    return FakeSession
