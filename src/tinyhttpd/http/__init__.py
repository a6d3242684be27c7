"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that understands HTTP/1.1 bytes:

    wire.py          delimiters and framing helpers
    request.py       bytes → HTTPRequest   (RequestDecoder)
    response.py      HTTPResponse → bytes  (encode_response)
    status_codes.py  code → reason phrase table
    router.py        HTTPRequest → HTTPResponse dispatch

=============================================================================
"""

from .request import (
    DecodeDiagnostic,
    DecodeResult,
    DiagnosticKind,
    HTTPRequest,
    RequestDecoder,
    decode_request,
)
from .response import HTTPResponse, created, encode_response, not_found, ok
from .router import Route, Router
from .status_codes import HTTPStatus

__all__ = [
    # Request
    "HTTPRequest",
    "RequestDecoder",
    "DecodeResult",
    "DecodeDiagnostic",
    "DiagnosticKind",
    "decode_request",
    # Response
    "HTTPResponse",
    "encode_response",
    "ok",
    "created",
    "not_found",
    # Status
    "HTTPStatus",
    # Routing
    "Router",
    "Route",
]
