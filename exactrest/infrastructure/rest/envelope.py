"""
Envelope handling for OData-style bodies.

Every successful response is wrapped like this:

    {
        "d": {
            "results": {...} or [{...}, ...]
        }
    }

Callers pass a target describing the shape they expect inside "results".
"""

from __future__ import annotations

import json
from typing import Any, Callable, Generic, Optional, TypeVar

from exactrest.errors import DecodeError

T = TypeVar("T")

Factory = Callable[[dict[str, Any]], T]

# Exceptions a model factory may raise on bad input; reported as DecodeError.
_FACTORY_ERRORS = (TypeError, ValueError, KeyError, DecodeError)


def _apply(factory: Optional[Callable[[dict[str, Any]], Any]], item: dict[str, Any], where: str) -> Any:
    if factory is None:
        return item
    try:
        return factory(item)
    except _FACTORY_ERRORS as e:
        raise DecodeError(f"cannot build {where}: {e}", e) from e


class Target(Generic[T]):
    """Base for decode targets. ``value`` is only replaced by a complete decode."""

    def __init__(self, factory: Optional[Factory[T]] = None) -> None:
        self.factory = factory
        self.value: Any = None
        self.decoded = False

    def build(self, payload: Any) -> Any:
        raise NotImplementedError

    def assign(self, payload: Any) -> None:
        value = self.build(payload)
        self.value = value
        self.decoded = True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(decoded={self.decoded}, value={self.value!r})"


class Single(Target[T]):
    """Expects "results" to be one JSON object."""

    value: Optional[T]

    def build(self, payload: Any) -> Optional[T]:
        if not isinstance(payload, dict):
            raise DecodeError(f"expected an object in results, got {_json_type(payload)}")
        return _apply(self.factory, payload, "result")


class Sequence(Target[T]):
    """Expects "results" to be a JSON array of objects."""

    value: Optional[list[T]]

    def build(self, payload: Any) -> list[T]:
        if not isinstance(payload, list):
            raise DecodeError(f"expected an array in results, got {_json_type(payload)}")
        out: list[T] = []
        for i, item in enumerate(payload):
            if not isinstance(item, dict):
                raise DecodeError(f"expected an object at results[{i}], got {_json_type(item)}")
            out.append(_apply(self.factory, item, f"results[{i}]"))
        return out


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def wrap_envelope(payload: Any) -> dict[str, Any]:
    return {"d": {"results": payload}}


def encode_envelope(payload: Any) -> bytes:
    """Serialize payload inside the envelope, as the server would send it."""
    return json.dumps(wrap_envelope(payload)).encode("utf-8")


def unwrap_envelope(data: Any) -> Any:
    """Return the "results" payload of an already parsed body."""
    if not isinstance(data, dict) or "d" not in data:
        raise DecodeError('response body is missing the "d" envelope')
    inner = data["d"]
    if not isinstance(inner, dict) or "results" not in inner:
        raise DecodeError('response envelope is missing "d.results"')
    return inner["results"]


def decode_envelope(raw: bytes | str, target: Target[Any]) -> Target[Any]:
    """
    Parse raw JSON and decode the envelope payload into target.

    Raises:
        DecodeError: Invalid JSON, missing envelope keys, or a payload whose
            shape does not match the target. The target is left untouched.
    """
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"response body is not valid JSON: {e}", e) from e
    target.assign(unwrap_envelope(data))
    return target
