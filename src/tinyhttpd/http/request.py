"""
=============================================================================
HTTP REQUEST DECODER
=============================================================================

Turns the raw bytes of one socket read into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ─┬── ────────┬─────── ────┬───                              │ │
    │  │   Method       Path       Version                              │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Content-Type: application/octet-stream\r\n                  │ │
    │  │    Content-Length: 5\r\n                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    hello                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
TOLERANCE POLICY
=============================================================================

The decoder is permissive. Bad input degrades the request instead of
aborting it:

    Problem                       Result
    ───────────────────────────   ──────────────────────────────────────
    request line not 3 tokens     method/path/version stay ""
    header line without ": "      that header is dropped, others kept
    no \r\n\r\n in the buffer     whole buffer is headers, body is b""

Each problem is reported as a DecodeDiagnostic carrying the offending line
number, so callers and tests can see exactly what went wrong while the
server keeps answering.

Header policy:
    - Names are case-sensitive and kept exactly as received.
    - A repeated name overwrites the earlier value (last write wins).
    - The body is every byte after the terminator. Content-Length is NOT
      consulted; a single fixed-size read is the only framing.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional
import logging

from .wire import (
    HEADER_DELIMITER,
    TOKEN_SEPARATOR,
    find_body_offset,
    split_header_block,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HTTPRequest:
    """
    Decoded view of one HTTP request.

    Immutable once built: the decoder creates it from the bytes read off the
    socket and the dispatcher only ever reads it. The header mapping is a
    read-only proxy.

    Attributes:
        method:  Request method token, not checked against a known set.
        path:    Raw request target, not URL-decoded.
        version: Protocol token such as "HTTP/1.1", not validated.
        headers: Header name → value, case preserved.
        body:    Bytes after the header terminator.
    """

    method: str = ""
    path: str = ""
    version: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self):
        # Copy so the caller's dict can't change us afterwards
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def user_agent(self) -> str:
        """The User-Agent header, or "" when the client sent none."""
        return self.headers.get("User-Agent", "")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value. The lookup is case-sensitive:

            request.get_header("User-Agent")   # matches "User-Agent"
            request.get_header("user-agent")   # does NOT
        """
        return self.headers.get(name, default)


class DiagnosticKind(Enum):
    """What went wrong while decoding."""

    MALFORMED_REQUEST_LINE = "malformed_request_line"
    MALFORMED_HEADER = "malformed_header"
    INCOMPLETE_REQUEST = "incomplete_request"


@dataclass(frozen=True)
class DecodeDiagnostic:
    """
    One non-fatal decoding problem.

    line_number counts lines of the header block from 0 (the request line).
    It is None for INCOMPLETE_REQUEST, which concerns the buffer as a whole.
    """

    kind: DiagnosticKind
    line_number: Optional[int] = None
    line: str = ""

    def __str__(self) -> str:
        if self.line_number is None:
            return self.kind.value
        return f"{self.kind.value} at line {self.line_number}: {self.line!r}"


@dataclass(frozen=True)
class DecodeResult:
    """
    A decoded request together with everything the decoder tolerated.

        result = RequestDecoder().decode_with_diagnostics(data)
        if not result.ok:
            for diagnostic in result.diagnostics:
                ...
        handle(result.request)
    """

    request: HTTPRequest
    diagnostics: tuple[DecodeDiagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    @property
    def is_complete(self) -> bool:
        """False when the buffer held no header terminator."""
        return not any(
            d.kind is DiagnosticKind.INCOMPLETE_REQUEST for d in self.diagnostics
        )


class RequestDecoder:
    """
    Decodes raw request bytes into HTTPRequest objects.

    ==========================================================================
    DECODING ALGORITHM
    ==========================================================================

        Raw bytes
            │
            ▼
        1. Find the first \r\n\r\n
            │   found     → body = bytes after it
            │   not found → body = b"", INCOMPLETE_REQUEST
            ▼
        2. Split the header block on \r\n
            ▼
        3. Line 0: split on " " → METHOD, PATH, VERSION
            │   not 3 tokens → MALFORMED_REQUEST_LINE, fields stay ""
            ▼
        4. Lines 1..n: split on ": " → KEY, VALUE
            │   not 2 tokens → MALFORMED_HEADER, line skipped
            ▼
        HTTPRequest

    ==========================================================================

    The decoder holds no state, so one instance can serve every connection
    thread.
    """

    def decode(self, data: bytes) -> HTTPRequest:
        """
        Decode a request, logging anything that had to be tolerated.

        Never raises for malformed input.
        """
        result = self.decode_with_diagnostics(data)
        for diagnostic in result.diagnostics:
            logger.warning(f"Tolerated {diagnostic}")
        return result.request

    def decode_with_diagnostics(self, data: bytes) -> DecodeResult:
        """
        Decode a request and report every problem as data.

        Args:
            data: Bytes from a single socket read.

        Returns:
            DecodeResult with the (possibly degraded) request.
        """
        diagnostics: list[DecodeDiagnostic] = []

        # ---------------------------------------------------------------------
        # Header/body boundary
        # ---------------------------------------------------------------------
        body_offset = find_body_offset(data)
        if body_offset is None:
            diagnostics.append(DecodeDiagnostic(DiagnosticKind.INCOMPLETE_REQUEST))
            body = b""
        else:
            body = data[body_offset:]

        lines = split_header_block(data, body_offset)

        # ---------------------------------------------------------------------
        # Request line
        # ---------------------------------------------------------------------
        method, path, version = self._parse_request_line(lines[0], diagnostics)

        # ---------------------------------------------------------------------
        # Headers
        # ---------------------------------------------------------------------
        headers = self._parse_headers(lines[1:], diagnostics)

        request = HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
        )
        return DecodeResult(request=request, diagnostics=tuple(diagnostics))

    def _parse_request_line(
        self,
        line: str,
        diagnostics: list[DecodeDiagnostic],
    ) -> tuple[str, str, str]:
        tokens = line.split(TOKEN_SEPARATOR)
        if len(tokens) != 3:
            diagnostics.append(
                DecodeDiagnostic(DiagnosticKind.MALFORMED_REQUEST_LINE, 0, line)
            )
            return "", "", ""

        method, path, version = tokens
        return method, path, version

    def _parse_headers(
        self,
        lines: list[str],
        diagnostics: list[DecodeDiagnostic],
    ) -> dict[str, str]:
        """
        Parse "KEY: VALUE" lines into a dict.

        The split is on the exact two characters ": ". A value that itself
        contains ": " yields three tokens and the line is dropped, as is a
        line with no delimiter at all.
        """
        headers: dict[str, str] = {}

        for number, line in enumerate(lines, start=1):
            tokens = line.split(HEADER_DELIMITER)
            if len(tokens) != 2:
                diagnostics.append(
                    DecodeDiagnostic(DiagnosticKind.MALFORMED_HEADER, number, line)
                )
                continue

            key, value = tokens
            headers[key] = value  # last write wins

        return headers


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

_decoder = RequestDecoder()


def decode_request(data: bytes) -> HTTPRequest:
    """Decode raw request bytes with a shared RequestDecoder."""
    return _decoder.decode(data)
