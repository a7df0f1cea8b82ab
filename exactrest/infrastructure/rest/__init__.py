"""REST pipeline: request building, transport, envelope decoding."""

from exactrest.infrastructure.rest.client import (
    Outcome,
    RestClient,
    check_response,
    classify_status,
)
from exactrest.infrastructure.rest.envelope import (
    Sequence,
    Single,
    Target,
    decode_envelope,
    encode_envelope,
    unwrap_envelope,
    wrap_envelope,
)
from exactrest.infrastructure.rest.transport import (
    ApiRequest,
    RequestContext,
    SessionTransport,
    Transport,
)

__all__ = [
    "ApiRequest",
    "Outcome",
    "RequestContext",
    "RestClient",
    "Sequence",
    "SessionTransport",
    "Single",
    "Target",
    "Transport",
    "check_response",
    "classify_status",
    "decode_envelope",
    "encode_envelope",
    "unwrap_envelope",
    "wrap_envelope",
]
