"""
Shared fixtures: a recording transport double and requests.Response objects
that count close() calls.
"""

from __future__ import annotations

import io
from typing import Any, Callable

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from exactrest.infrastructure.rest.client import RestClient
from exactrest.infrastructure.rest.transport import ApiRequest
from exactrest.utils.config import ClientConfig

BASE_URL = "https://start.exactonline.nl/api/v1/123456"


class TrackedResponse(requests.Response):
    def __init__(self) -> None:
        super().__init__()
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        super().close()


class FakeTransport:
    """Records sent requests; returns a canned response or raises a canned error."""

    def __init__(
        self,
        response: requests.Response | None = None,
        error: Exception | None = None,
        on_send: Callable[[ApiRequest], None] | None = None,
    ) -> None:
        self.response = response
        self.error = error
        self.on_send = on_send
        self.sent: list[ApiRequest] = []

    def send(self, request: ApiRequest) -> requests.Response:
        self.sent.append(request)
        if self.on_send is not None:
            self.on_send(request)
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


def build_response(
    status: int = 200,
    body: bytes | str = b"",
    headers: dict[str, str] | None = None,
    reason: str = "",
) -> TrackedResponse:
    if isinstance(body, str):
        body = body.encode("utf-8")
    r = TrackedResponse()
    r.status_code = status
    r.reason = reason or ("OK" if 200 <= status < 300 else "Error")
    r.raw = io.BytesIO(body)
    r.headers = CaseInsensitiveDict(headers or {"Content-Type": "application/json"})
    r.encoding = "utf-8"
    r.url = BASE_URL
    return r


@pytest.fixture
def make_response() -> Callable[..., TrackedResponse]:
    return build_response


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(base_url=BASE_URL, user_agent="exact-rest-tests/1.0")


@pytest.fixture
def make_client(config: ClientConfig) -> Callable[..., tuple[RestClient, FakeTransport]]:
    def _make(
        response: requests.Response | None = None,
        error: Exception | None = None,
        on_send: Callable[[ApiRequest], None] | None = None,
        **changes: Any,
    ) -> tuple[RestClient, FakeTransport]:
        transport = FakeTransport(response=response, error=error, on_send=on_send)
        cfg = config.with_options(**changes) if changes else config
        return RestClient(cfg, transport=transport), transport

    return _make
