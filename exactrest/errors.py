"""
Error taxonomy for the REST pipeline.

Every error keeps the underlying exception in ``original`` and is raised
``from`` it.
"""

from __future__ import annotations

from typing import Any


class RestError(RuntimeError):
    """Base class for all errors raised by exactrest."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


class EncodingError(RestError):
    """The request body could not be serialized to JSON. Nothing was sent."""


class InvalidURLError(RestError):
    """The base endpoint is unset or the resolved URL cannot be parsed. Nothing was sent."""


class TransportError(RestError):
    """Network-level failure (connection, DNS, timeout). No response is available."""


class CancelledError(TransportError):
    """The request context was cancelled before the response was available."""


class DeadlineExceededError(TransportError):
    """The request context deadline passed before the response was available."""


class APIError(RestError):
    """
    The server answered with a non-2xx status.

    ``detail`` holds the parsed JSON error body when there is one, otherwise
    the raw text (or None for an empty body).
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        detail: Any = None,
        response: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.response = response


class DecodeError(RestError):
    """A body or value does not match the expected envelope, payload shape or format."""

    def __init__(
        self,
        message: str,
        original: Exception | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(message, original)
        self.response = response
