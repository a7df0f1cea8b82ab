"""
Edm.DateTime values as sent by the API: "/Date(1488939627017)/", the number
being milliseconds since the Unix epoch (UTC).

Parsing is lenient on purpose: the first run of digits anywhere in the string
is used, and a string without digits is treated as no value.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from exactrest.errors import DecodeError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Largest value the API side can represent (signed 64-bit).
MAX_MILLISECONDS = 2**63 - 1
_MAX_DIGITS = len(str(MAX_MILLISECONDS))

_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class DateTime:
    """An optional UTC instant. ``DateTime()`` is the unset value."""

    value: Optional[datetime] = None

    @classmethod
    def parse(cls, raw: str) -> "DateTime":
        """
        Parse "/Date(<ms>)/".

        Returns the unset value for an empty string or a string with no
        digits.

        Raises:
            DecodeError: The digit run does not fit a signed 64-bit integer
                or a datetime.
        """
        if not raw:
            return cls()

        match = _DIGITS.search(raw)
        if match is None:
            return cls()

        digits = match.group(0)
        # int() refuses very long digit strings; anything this long is out of range anyway.
        significant = digits.lstrip("0") or "0"
        if len(significant) > _MAX_DIGITS:
            raise DecodeError(f"timestamp {digits[:32]}... ({len(digits)} digits) is out of range")
        ms = int(significant)
        if ms > MAX_MILLISECONDS:
            raise DecodeError(f"timestamp {digits} is out of range")
        try:
            return cls(EPOCH + timedelta(milliseconds=ms))
        except OverflowError as e:
            raise DecodeError(f"timestamp {digits} is out of range", e) from e

    @classmethod
    def from_json(cls, value: Any) -> "DateTime":
        """Decode a JSON value: null or a string. Anything else is a DecodeError."""
        if value is None:
            return cls()
        if not isinstance(value, str):
            raise DecodeError(f"expected a /Date(ms)/ string, got {type(value).__name__}")
        return cls.parse(value)

    @classmethod
    def from_datetime(cls, value: datetime) -> "DateTime":
        """Wrap a datetime; naive values are taken as UTC."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return cls(value.astimezone(timezone.utc))

    @property
    def is_set(self) -> bool:
        return self.value is not None

    @property
    def milliseconds(self) -> Optional[int]:
        if self.value is None:
            return None
        return (self.value - EPOCH) // timedelta(milliseconds=1)

    def format(self) -> str:
        """Encode as "/Date(<ms>)/", or "" when unset."""
        ms = self.milliseconds
        if ms is None:
            return ""
        return f"/Date({ms})/"

    def to_json(self) -> str:
        return self.format()

    def __bool__(self) -> bool:
        return self.is_set

    def __str__(self) -> str:
        return self.value.isoformat() if self.value is not None else ""
