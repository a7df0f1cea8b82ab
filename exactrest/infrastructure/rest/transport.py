"""
HTTP transport for the REST pipeline: request context (cancellation and
deadline), the built request type, and a requests.Session-backed transport.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Protocol

import requests
from requests.structures import CaseInsensitiveDict

from exactrest.errors import (
    CancelledError,
    DeadlineExceededError,
    TransportError,
)
from exactrest.utils.config import DEFAULT_TIMEOUT_SECONDS
from exactrest.utils.logger import get_logger

logger = get_logger()


class RequestContext:
    """
    Per-call cancellation and deadline.

    ``cancel()`` may be called from any thread. The deadline is measured on
    the monotonic clock.
    """

    def __init__(self, timeout: float | None = None, deadline: float | None = None) -> None:
        if timeout is not None:
            deadline = time.monotonic() + timeout
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestContext":
        return cls(timeout=seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    @property
    def expired(self) -> bool:
        left = self.remaining()
        return left is not None and left <= 0

    def raise_if_done(self) -> None:
        """Raise CancelledError or DeadlineExceededError if the context is finished."""
        if self.cancelled:
            raise CancelledError("request context cancelled")
        if self.expired:
            raise DeadlineExceededError("request context deadline exceeded")


@dataclass
class ApiRequest:
    """A prepared HTTP request plus the optional context it runs under."""

    prepared: requests.PreparedRequest
    context: RequestContext | None = None

    @property
    def method(self) -> str:
        return self.prepared.method or ""

    @property
    def url(self) -> str:
        return self.prepared.url or ""

    @property
    def headers(self) -> CaseInsensitiveDict:
        return self.prepared.headers

    @property
    def body(self) -> bytes | None:
        body = self.prepared.body
        if isinstance(body, str):
            return body.encode("utf-8")
        return body


class Transport(Protocol):
    """Sends a built request. Raises TransportError (or a subclass) on network failure."""

    def send(self, request: ApiRequest) -> requests.Response:
        ...


class SessionTransport:
    """
    Transport backed by a shared requests.Session (connection pooling).

    Responses are streamed; the caller owns closing them. A context deadline
    shorter than the default timeout becomes the requests timeout.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout

    def send(self, request: ApiRequest) -> requests.Response:
        timeout = self._timeout
        deadline_bound = False
        ctx = request.context
        if ctx is not None:
            ctx.raise_if_done()
            left = ctx.remaining()
            if left is not None and (timeout is None or left <= timeout):
                timeout = left
                deadline_bound = True

        try:
            # Proxy and CA bundle env vars, as Session.request would apply them.
            settings = self._session.merge_environment_settings(request.url, {}, True, None, None)
            return self._session.send(
                request.prepared,
                stream=True,
                timeout=timeout,
                proxies=settings["proxies"],
                verify=settings["verify"],
                cert=settings["cert"],
            )
        except requests.Timeout as e:
            logger.warning("%s %s timed out: %s", request.method, request.url, e)
            if deadline_bound:
                raise DeadlineExceededError(
                    f"{request.method} {request.url}: deadline exceeded", e
                ) from e
            raise TransportError(f"{request.method} {request.url}: timed out after {timeout}s", e) from e
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s (%s)", request.method, request.url, e, type(e).__name__)
            raise TransportError(f"{request.method} {request.url}: {type(e).__name__}: {e}", e) from e

    def close(self) -> None:
        self._session.close()
