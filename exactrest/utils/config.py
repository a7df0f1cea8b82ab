"""Load and validate environment variables. Uses python-dotenv.

Callers should use the accessor functions or ``ClientConfig.from_env`` rather
than reading ``os.environ`` directly, to keep environment handling consistent.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv

DEFAULT_USER_AGENT = "exact-rest/0.1"
DEFAULT_TIMEOUT_SECONDS = 30.0

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")

# (request, response) -> None. Typed loosely to keep utils free of requests.
RequestCompletionCallback = Callable[[Any, Any], None]


def _project_root() -> Path:
    """Resolve project root (the directory holding the package)."""
    return Path(__file__).resolve().parent.parent.parent


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Uses override=True so .env values take precedence over existing env vars.
    """
    load_dotenv(_project_root() / ".env", override=True)


def get_required(key: str) -> str:
    """
    Get required env var. Raises if missing or empty.

    Raises:
        ValueError: If key is missing or empty after trimming.
    """
    load_config()
    val = os.getenv(key, "").strip()
    if not val:
        raise ValueError(
            f"Missing required environment variable: {key}. "
            "Set it in .env or export it."
        )
    return val


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_float(key: str, default: float) -> float:
    """Get optional env var as float; return default if missing, invalid or not positive."""
    raw = get_optional(key)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_optional_bool(key: str, default: bool = False) -> bool:
    """Get optional env var as bool (1/true/yes/on, 0/false/no/off)."""
    raw = get_optional(key).lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


# --- Public config accessors ---

def base_url() -> str:
    """Required: base API URL, e.g. https://start.exactonline.nl/api/v1/123456."""
    return get_required("EXACT_BASE_URL")


def user_agent() -> str:
    """Optional: User-Agent header sent with every request."""
    return get_optional("EXACT_USER_AGENT", DEFAULT_USER_AGENT)


def debug_enabled() -> bool:
    """Optional: dump full requests/responses to the log. Default off."""
    return get_optional_bool("EXACT_DEBUG", False)


def timeout_seconds() -> float:
    """Optional: per-request timeout when no deadline is given. Default 30s."""
    return get_optional_float("EXACT_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)


def log_file() -> Path | None:
    """Optional: file that setup_logger should also write to."""
    val = get_optional("EXACT_LOG_FILE", "")
    return Path(val) if val else None


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings read by RestClient on every call. Immutable: use with_options
    to derive a modified copy.

    Attributes:
        base_url: Absolute base endpoint (scheme, host, base path).
        user_agent: Value of the User-Agent header.
        debug: Dump full requests and responses to the log.
        timeout: Seconds to wait for the server when the request has no deadline.
        on_request_completed: Called with (request, response) after every dispatch.
    """

    base_url: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    debug: bool = False
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    on_request_completed: Optional[RequestCompletionCallback] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from EXACT_* variables; keyword arguments win over the environment."""
        values: dict[str, Any] = {
            "user_agent": user_agent(),
            "debug": debug_enabled(),
            "timeout": timeout_seconds(),
        }
        if "base_url" not in overrides:
            values["base_url"] = base_url()
        values.update(overrides)
        return cls(**values)

    def with_options(self, **changes: Any) -> "ClientConfig":
        return dataclasses.replace(self, **changes)
