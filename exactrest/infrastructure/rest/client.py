"""
REST client: builds JSON requests against a base endpoint and decodes
envelope-wrapped responses into caller-supplied targets.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests
from requests.exceptions import InvalidSchema, InvalidURL, MissingSchema

from exactrest.errors import (
    APIError,
    DecodeError,
    EncodingError,
    InvalidURLError,
    TransportError,
)
from exactrest.infrastructure.rest.envelope import Target, decode_envelope
from exactrest.infrastructure.rest.transport import (
    ApiRequest,
    RequestContext,
    SessionTransport,
    Transport,
)
from exactrest.utils.config import ClientConfig
from exactrest.utils.logger import get_logger

logger = get_logger()

MEDIA_TYPE = "application/json"
CHARSET = "utf-8"

_MAX_DEBUG_BODY_CHARS = 4000
_CHUNK_SIZE = 8192


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


def classify_status(status_code: int) -> Outcome:
    """2xx is a success, everything else a failure."""
    if 200 <= status_code < 300:
        return Outcome.SUCCESS
    return Outcome.FAILURE


def _read_body(response: requests.Response) -> bytes:
    try:
        return response.content or b""
    except requests.RequestException as e:
        raise TransportError(f"failed reading response body: {e}", e) from e


def _error_detail(response: requests.Response) -> Any:
    try:
        raw = response.content
    except requests.RequestException:
        return None
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return raw.decode(response.encoding or CHARSET, errors="replace")


def _error_message(detail: Any) -> str | None:
    # OData v2: {"error": {"code": "", "message": {"lang": "", "value": "..."}}}
    if not isinstance(detail, dict):
        return None
    err = detail.get("error")
    if isinstance(err, dict):
        msg = err.get("message")
        if isinstance(msg, dict):
            msg = msg.get("value")
        if isinstance(msg, str) and msg:
            return msg
    if isinstance(err, str) and err:
        return err
    msg = detail.get("message")
    return msg if isinstance(msg, str) and msg else None


def check_response(response: requests.Response) -> None:
    """
    Raise APIError unless the response status is 2xx.

    The error body is decoded on a best-effort basis: JSON when possible,
    text otherwise.
    """
    status = response.status_code
    if classify_status(status) is Outcome.SUCCESS:
        return

    detail = _error_detail(response)
    req = getattr(response, "request", None)
    where = f"{req.method} {req.url}: " if req is not None else ""
    message = f"{where}{status} {response.reason or ''}".rstrip()
    extra = _error_message(detail)
    if extra:
        message = f"{message}: {extra}"
    elif isinstance(detail, str) and detail.strip():
        message = f"{message}: {detail.strip()[:200]}"
    logger.info("API error: %s", message)
    raise APIError(message, status, detail=detail, response=response)


def _dump_body(body: bytes | None) -> str:
    if not body:
        return ""
    text = body.decode(CHARSET, errors="replace")
    if len(text) > _MAX_DEBUG_BODY_CHARS:
        return text[:_MAX_DEBUG_BODY_CHARS] + f"... ({len(text)} chars)"
    return text


def dump_request(request: ApiRequest) -> str:
    lines = [f"{request.method} {request.url}"]
    lines += [f"{k}: {v}" for k, v in request.headers.items()]
    return "\n".join(lines) + "\n\n" + _dump_body(request.body)


def dump_response(response: requests.Response) -> str:
    lines = [f"HTTP {response.status_code} {response.reason or ''}".rstrip()]
    lines += [f"{k}: {v}" for k, v in response.headers.items()]
    try:
        body = _dump_body(response.content)
    except requests.RequestException as e:
        body = f"<body unavailable: {e}>"
    return "\n".join(lines) + "\n\n" + body


def _writes_raw(target: Any) -> bool:
    return not isinstance(target, Target) and callable(getattr(target, "write", None))


class RestClient:
    """
    JSON client for an envelope-wrapped REST API.

    Holds an immutable ClientConfig and a transport; safe to share between
    threads as long as the transport is.
    """

    def __init__(self, config: ClientConfig, transport: Transport | None = None) -> None:
        self._config = config
        self._transport = transport or SessionTransport(timeout=config.timeout)

    @classmethod
    def from_env(cls, transport: Transport | None = None, **overrides: Any) -> "RestClient":
        return cls(ClientConfig.from_env(**overrides), transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def get_endpoint(self, path: str) -> str:
        """
        Resolve path against the base URL with exactly one slash between them.

        A query string on path is merged with the base URL's query.

        Raises:
            InvalidURLError: If no base URL is configured or it is not absolute.
        """
        base = (self._config.base_url or "").strip()
        if not base:
            raise InvalidURLError("base URL is not configured")
        parts = urlsplit(base)
        if not parts.scheme or not parts.netloc:
            raise InvalidURLError(f"base URL must be absolute: {base!r}")

        rel, _, rel_query = (path or "").partition("?")
        full_path = parts.path.rstrip("/") + "/" + rel.lstrip("/")
        query = "&".join(q for q in (parts.query, rel_query) if q)
        return urlunsplit((parts.scheme, parts.netloc, full_path, query, parts.fragment))

    def build_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> ApiRequest:
        """
        Build a JSON request for path. No network activity.

        Args:
            method: HTTP verb.
            path: Path relative to the base URL.
            body: JSON-serializable value, or None for no body.
            context: Optional cancellation/deadline for the call.

        Raises:
            EncodingError: body cannot be serialized.
            InvalidURLError: base URL unset or resolved URL unparseable.
        """
        if not method or not method.strip():
            raise ValueError("method must be a non-empty HTTP verb")

        data: bytes | None = None
        if body is not None:
            try:
                data = json.dumps(body, allow_nan=False).encode(CHARSET)
            except (TypeError, ValueError, RecursionError) as e:
                raise EncodingError(f"cannot encode request body as JSON: {e}", e) from e

        url = self.get_endpoint(path)
        headers = {
            "Content-Type": f"{MEDIA_TYPE}; charset={CHARSET}",
            "Accept": MEDIA_TYPE,
            "User-Agent": self._config.user_agent,
        }
        try:
            prepared = requests.Request(
                method.strip().upper(), url, headers=headers, data=data
            ).prepare()
        except (InvalidURL, MissingSchema, InvalidSchema) as e:
            raise InvalidURLError(f"invalid URL {url!r}: {e}", e) from e

        logger.debug("Built request %s %s", prepared.method, prepared.url)
        return ApiRequest(prepared=prepared, context=context)

    def execute(self, request: ApiRequest, target: Any = None) -> requests.Response:
        """
        Send request and decode the body into target.

        target may be a Single or Sequence (decoded from {"d": {"results": ...}}),
        a file-like object with ``write`` (raw body copied, not decoded), or None
        (body not read). The response is always closed before returning.

        Raises:
            TransportError: Network failure, cancellation or deadline; no response.
            APIError: Non-2xx status; the response is attached.
            DecodeError: Body does not match the envelope or target shape.
        """
        ctx = request.context
        if ctx is not None:
            ctx.raise_if_done()

        if self._config.debug:
            logger.debug("Request dump:\n%s", dump_request(request))

        response = self._transport.send(request)
        try:
            if ctx is not None:
                ctx.raise_if_done()

            self._notify_completed(request, response)

            if self._config.debug:
                logger.debug("Response dump:\n%s", dump_response(response))

            check_response(response)

            if target is None:
                return response

            if _writes_raw(target):
                try:
                    for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                        target.write(chunk)
                except requests.RequestException as e:
                    raise TransportError(f"failed reading response body: {e}", e) from e
                return response

            try:
                decode_envelope(_read_body(response), target)
            except DecodeError as e:
                e.response = response
                raise
            return response
        finally:
            response.close()

    def _notify_completed(self, request: ApiRequest, response: requests.Response) -> None:
        callback = self._config.on_request_completed
        if callback is None:
            return
        try:
            callback(request, response)
        except Exception:
            logger.exception("on_request_completed callback failed for %s %s", request.method, request.url)

    def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "RestClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
