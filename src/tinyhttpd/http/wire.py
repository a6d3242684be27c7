"""
=============================================================================
HTTP WIRE FORMAT
=============================================================================

The byte-level vocabulary shared by the request decoder and the response
encoder. Everything that touches the raw stream agrees on these sequences.

=============================================================================
FRAMING AT A GLANCE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ONE HTTP MESSAGE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /echo/abc HTTP/1.1\\r\\n          ← start line + CRLF           │
    │   User-Agent: curl/8.0\\r\\n            ← "KEY: VALUE" + CRLF          │
    │   Host: localhost:4221\\r\\n                                          │
    │   \\r\\n                                ← blank line                  │
    │   ...body bytes...                    ← everything after            │
    │                                                                      │
    │   The last header's CRLF plus the blank line's CRLF form the        │
    │   4-byte HEADER TERMINATOR: \\r\\n\\r\\n                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The delimiters are literal. A header line is split on the exact two
characters ": " (colon, space); no other whitespace is trimmed. The start
line is split on single spaces.

=============================================================================
"""

from typing import Optional


# =============================================================================
# DELIMITERS
# =============================================================================

CRLF = "\r\n"
HEADER_TERMINATOR = b"\r\n\r\n"
HEADER_DELIMITER = ": "
TOKEN_SEPARATOR = " "

# Text encoding used for the header block. The body is never decoded.
# Bytes that are not valid UTF-8 map to lone surrogates and back, so a
# header value or path is echoed byte for byte.
HEADER_ENCODING = "utf-8"
HEADER_ERRORS = "surrogateescape"

DEFAULT_VERSION = "HTTP/1.1"


def find_body_offset(data: bytes) -> Optional[int]:
    """
    Locate the first byte of the body.

    Returns the offset just past the first header terminator, or None when
    the buffer holds no terminator at all (an incomplete request).

        b"GET / HTTP/1.1\\r\\n\\r\\nhello"
                           ▲       ▲
                  index of \\r\\n\\r\\n  body offset (index + 4)
    """
    index = data.find(HEADER_TERMINATOR)
    if index == -1:
        return None
    return index + len(HEADER_TERMINATOR)


def split_header_block(data: bytes, body_offset: Optional[int]) -> list[str]:
    """
    Decode the header block and split it into lines.

    With a terminator present the block is everything before it. Without
    one the whole buffer is the block, minus a single dangling CRLF so a
    request cut right after its start line still yields one line.
    """
    if body_offset is not None:
        block = data[:body_offset - len(HEADER_TERMINATOR)]
    else:
        block = data
        if block.endswith(CRLF.encode()):
            block = block[:-len(CRLF)]

    return block.decode(HEADER_ENCODING, errors=HEADER_ERRORS).split(CRLF)


def format_line(text: str) -> bytes:
    """Encode one line of the header block, CRLF included."""
    return (text + CRLF).encode(HEADER_ENCODING, errors=HEADER_ERRORS)
