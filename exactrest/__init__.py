"""JSON REST client for envelope-wrapped ({"d": {"results": ...}}) APIs."""

from exactrest.domains.edm.date_time import DateTime
from exactrest.errors import (
    APIError,
    CancelledError,
    DeadlineExceededError,
    DecodeError,
    EncodingError,
    InvalidURLError,
    RestError,
    TransportError,
)
from exactrest.infrastructure.rest import (
    ApiRequest,
    RequestContext,
    RestClient,
    Sequence,
    SessionTransport,
    Single,
)
from exactrest.utils.config import ClientConfig

__version__ = "0.1.0"

__all__ = [
    "APIError",
    "ApiRequest",
    "CancelledError",
    "ClientConfig",
    "DateTime",
    "DeadlineExceededError",
    "DecodeError",
    "EncodingError",
    "InvalidURLError",
    "RequestContext",
    "RestClient",
    "RestError",
    "Sequence",
    "SessionTransport",
    "Single",
    "TransportError",
]
