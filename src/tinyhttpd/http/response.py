"""
=============================================================================
HTTP RESPONSE ENCODER
=============================================================================

Builds responses and serializes them to the exact bytes sent on the wire.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  │    ────┬─── ─┬─ ─┬─                                            │ │
    │  │    Version  Code Phrase                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (insertion order) ────────────────────────────────────┐ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Length: 3\r\n                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE (always, even with zero headers) ──────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (verbatim) ──────────────────────────────────────────────┐ │
    │  │    abc                                                          │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHO OWNS CONTENT-LENGTH?
=============================================================================

The encoder is pure serialization: it adds nothing and checks nothing.
A non-empty body MUST be accompanied by a matching Content-Length header,
and that is the producer's job. set_body() does both at once, which is
why handlers use it instead of assigning .body directly.

=============================================================================
STATUS PAIRING
=============================================================================

The status code and its reason phrase only change together, through
set_status(code), which reads the phrase from the HTTPStatus table:

    response.set_status(404)   # → 404 "Not Found"
    response.set_status(799)   # → ValueError, pair left untouched

set_ok(), set_not_found() and set_created() are named shortcuts for the
three statuses the dispatcher uses.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from .status_codes import HTTPStatus, lookup
from .wire import (
    CRLF,
    DEFAULT_VERSION,
    HEADER_DELIMITER,
    HEADER_ENCODING,
    HEADER_ERRORS,
    format_line,
)


@dataclass
class HTTPResponse:
    """
    Structured response waiting to be encoded.

    Built by the dispatcher, encoded exactly once, then thrown away.

        Handler builds          to_bytes()              Connection sends
        HTTPResponse    ─────►  serializes    ─────►    raw bytes
    """

    version: str = DEFAULT_VERSION
    status_code: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    status_text: str = field(init=False, default="")

    def __post_init__(self):
        self.set_status(self.status_code)

    # =========================================================================
    # STATUS
    # =========================================================================

    def set_status(self, code: int) -> "HTTPResponse":
        """
        Set the status code and its canonical reason phrase together.

        Args:
            code: An integer or HTTPStatus member.

        Returns:
            Self for method chaining.

        Raises:
            ValueError: If the code is not in the status table.
        """
        status = lookup(code)
        self.status_code = int(status)
        self.status_text = status.phrase
        return self

    def set_ok(self) -> "HTTPResponse":
        return self.set_status(HTTPStatus.OK)

    def set_not_found(self) -> "HTTPResponse":
        return self.set_status(HTTPStatus.NOT_FOUND)

    def set_created(self) -> "HTTPResponse":
        return self.set_status(HTTPStatus.CREATED)

    @property
    def status_line(self) -> str:
        """
        The first line of the response, without CRLF.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status_code} {self.status_text}"

    # =========================================================================
    # HEADERS AND BODY
    # =========================================================================

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a response header, replacing any earlier value for the name.

        Returns self for method chaining:
            response.set_header("Content-Type", "text/plain").set_ok()
        """
        self.headers[name] = value
        return self

    def set_content_type(self, content_type: str) -> "HTTPResponse":
        """Set the Content-Type header."""
        return self.set_header("Content-Type", content_type)

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """
        Set the body and its Content-Length in one step.

        Strings are encoded as UTF-8, restoring any bytes the header
        decoder could not read, and the length is the byte length,
        not the character count.
        """
        if isinstance(body, str):
            body = body.encode(HEADER_ENCODING, errors=HEADER_ERRORS)
        self.body = body
        self.headers["Content-Length"] = str(len(body))
        return self

    # =========================================================================
    # ENCODING
    # =========================================================================

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\r\n              ← status line
            Content-Type: text/plain\r\n     ← one line per header,
            Content-Length: 3\r\n               in insertion order
            \r\n                             ← end of headers
            abc                              ← body bytes, verbatim

        =====================================================================

        Deterministic: the same response always encodes to the same bytes.
        """
        parts = [format_line(self.status_line)]

        for name, value in self.headers.items():
            parts.append(format_line(f"{name}{HEADER_DELIMITER}{value}"))

        parts.append(CRLF.encode())
        parts.append(self.body)

        return b"".join(parts)


def encode_response(response: HTTPResponse) -> bytes:
    """Encode a response to wire bytes."""
    return response.to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Shortcuts for the statuses the dispatcher produces. Each takes the version
# to echo back, normally copied from the request.
#
#     return ok(request.version, "abc", content_type="text/plain")
#     return not_found(request.version)
#
# =============================================================================

def ok(
    version: str = DEFAULT_VERSION,
    body: Union[str, bytes] = b"",
    content_type: str = "",
) -> HTTPResponse:
    """
    Create a 200 OK response.

    Content-Type and Content-Length are only added when there is something
    to describe; a bare OK has no headers at all.
    """
    response = HTTPResponse(version=version, status_code=HTTPStatus.OK)
    if content_type:
        response.set_content_type(content_type)
    if body or content_type:
        response.set_body(body)
    return response


def created(version: str = DEFAULT_VERSION) -> HTTPResponse:
    """Create a 201 Created response with no body."""
    return HTTPResponse(version=version, status_code=HTTPStatus.CREATED)


def not_found(version: str = DEFAULT_VERSION) -> HTTPResponse:
    """Create a 404 Not Found response with no body."""
    return HTTPResponse(version=version, status_code=HTTPStatus.NOT_FOUND)
